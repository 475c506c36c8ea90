"""
Minimal DOM capability interface over BeautifulSoup

The locator and field engine only need text, attributes, children and
ancestor/descendant search. ``DomNode`` exposes exactly that on top of a
parsed page snapshot, so a rendered page and a hand-written HTML fixture
go through the same code.
"""
import logging
from typing import Callable, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup, Tag

from .utils import clean_text

logger = logging.getLogger(__name__)

NodePredicate = Callable[["DomNode"], bool]

class DomNode:
    """Read-only view of one element"""

    __slots__ = ('_tag',)

    def __init__(self, tag: Tag):
        self._tag = tag

    def __eq__(self, other) -> bool:
        # Identity, not bs4's structural equality: two identical rows are distinct nodes
        return isinstance(other, DomNode) and self._tag is other._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"DomNode(<{self.tag}> {self.text[:40]!r})"

    @property
    def tag(self) -> str:
        return (self._tag.name or '').lower()

    @property
    def text(self) -> str:
        """Rendered text, whitespace-normalised"""
        return clean_text(self._tag.get_text(' ', strip=True))

    @property
    def attributes(self) -> Dict[str, str]:
        attrs = {}
        for key, value in (self._tag.attrs or {}).items():
            attrs[key] = ' '.join(value) if isinstance(value, list) else str(value)
        return attrs

    def get(self, name: str, default: str = "") -> str:
        return self.attributes.get(name, default)

    @property
    def class_name(self) -> str:
        return self.get('class')

    @property
    def parent(self) -> Optional["DomNode"]:
        parent = self._tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return DomNode(parent)

    @property
    def children(self) -> List["DomNode"]:
        """Element children only (text nodes skipped)"""
        return [DomNode(child) for child in self._tag.children if isinstance(child, Tag)]

    def ancestors(self) -> Iterator["DomNode"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def closest(self, predicate: NodePredicate) -> Optional["DomNode"]:
        """Nearest of self and ancestors matching predicate"""
        if predicate(self):
            return self
        for node in self.ancestors():
            if predicate(node):
                return node
        return None

    def find_all(self, predicate: NodePredicate) -> List["DomNode"]:
        """Descendants in document order matching predicate"""
        return [
            node for node in (DomNode(tag) for tag in self._tag.find_all(True))
            if predicate(node)
        ]

def parse_document(html: str) -> DomNode:
    """Parse an HTML snapshot and return its root as a DomNode"""
    soup = BeautifulSoup(html or "", 'html.parser')
    return DomNode(soup)

def has_tag(*names: str) -> NodePredicate:
    wanted = {name.lower() for name in names}
    return lambda node: node.tag in wanted
