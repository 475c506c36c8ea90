"""
Record Candidate Locator - finds position anchors and the container owning each

Container resolution tries, in order: the enclosing table row, the nearest
row-like marked ancestor, a bounded walk for the nearest ancestor that owns
exactly one anchor, and finally the grandparent. The first strategy that
yields a container wins.
"""
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..config.enums import ContainerStrategy
from ..config.schema import CandidateContainer
from ..core.dom import DomNode, NodePredicate

logger = logging.getLogger(__name__)

ROW_CLASS_FRAGMENTS = ('position', 'row')
MAX_ANCESTOR_DEPTH = 5
MIN_CONTAINER_CHILDREN = 3

def record_anchor_predicate(marker: str) -> NodePredicate:
    """Anchors whose href points at a record-detail page"""
    def predicate(node: DomNode) -> bool:
        return node.tag == 'a' and marker in node.get('href')
    return predicate

def owns_only(node: DomNode, anchor: DomNode, is_anchor: NodePredicate) -> bool:
    """True if anchor is the only matching anchor under node"""
    anchors = node.find_all(is_anchor)
    return len(anchors) == 1 and anchors[0] == anchor

def nearest_unique_ancestor(anchor: DomNode, accept: NodePredicate,
                            max_depth: int = MAX_ANCESTOR_DEPTH) -> Optional[DomNode]:
    """
    Bounded walk up from the anchor's parent

    Returns the first ancestor, at most max_depth levels up, for which
    accept(node) holds; None if the walk ends without a match.
    """
    node = anchor.parent
    depth = 0
    while node is not None and depth < max_depth:
        if accept(node):
            return node
        node = node.parent
        depth += 1
    return None

def is_semantic_row(node: DomNode) -> bool:
    if node.tag != 'div':
        return False
    if node.get('role') == 'row':
        return True
    class_name = node.class_name
    return any(fragment in class_name for fragment in ROW_CLASS_FRAGMENTS)

ContainerResolver = Callable[[DomNode, NodePredicate], Optional[DomNode]]

def resolve_table_row(anchor: DomNode, is_anchor: NodePredicate) -> Optional[DomNode]:
    row = anchor.closest(lambda node: node.tag == 'tr')
    if row is not None and owns_only(row, anchor, is_anchor):
        return row
    return None

def resolve_semantic_marker(anchor: DomNode, is_anchor: NodePredicate) -> Optional[DomNode]:
    marked = anchor.closest(is_semantic_row)
    if marked is not None and owns_only(marked, anchor, is_anchor):
        return marked
    return None

def resolve_unique_ancestor(anchor: DomNode, is_anchor: NodePredicate) -> Optional[DomNode]:
    def accept(node: DomNode) -> bool:
        return (len(node.children) >= MIN_CONTAINER_CHILDREN
                and owns_only(node, anchor, is_anchor))
    return nearest_unique_ancestor(anchor, accept)

def resolve_grandparent(anchor: DomNode, is_anchor: NodePredicate) -> Optional[DomNode]:
    parent = anchor.parent
    if parent is None:
        return None
    return parent.parent or parent

CONTAINER_STRATEGIES: List[Tuple[ContainerStrategy, ContainerResolver]] = [
    (ContainerStrategy.TABLE_ROW, resolve_table_row),
    (ContainerStrategy.SEMANTIC_MARKER, resolve_semantic_marker),
    (ContainerStrategy.UNIQUE_ANCESTOR, resolve_unique_ancestor),
    (ContainerStrategy.GRANDPARENT, resolve_grandparent),
]

class RecordCandidateLocator:
    """Enumerate candidate containers on a page snapshot"""

    def __init__(self, record_path_marker: str = "/event/",
                 style_markers: Sequence[str] = ("flex-1", "cursor-pointer"),
                 min_styled_anchors: int = 5):
        self.is_anchor = record_anchor_predicate(record_path_marker)
        self.style_markers = tuple(style_markers)
        self.min_styled_anchors = min_styled_anchors

    def find_anchors(self, root: DomNode) -> List[DomNode]:
        """All record anchors, narrowed to the styled ones when there are enough"""
        anchors = root.find_all(self.is_anchor)

        styled = [
            anchor for anchor in anchors
            if all(marker in anchor.class_name for marker in self.style_markers)
        ]

        if len(styled) >= self.min_styled_anchors:
            logger.debug(f"Using {len(styled)} styled anchors out of {len(anchors)}")
            return styled

        logger.debug(f"Only {len(styled)} styled anchors, using all {len(anchors)}")
        return anchors

    def resolve_container(self, anchor: DomNode) -> Optional[CandidateContainer]:
        for strategy, resolver in CONTAINER_STRATEGIES:
            container = resolver(anchor, self.is_anchor)
            if container is not None:
                return CandidateContainer(anchor=anchor, container=container, strategy=strategy)
        return None

    def locate(self, root: DomNode) -> List[CandidateContainer]:
        """Ordered candidates, one per resolvable anchor"""
        candidates = []

        for anchor in self.find_anchors(root):
            try:
                candidate = self.resolve_container(anchor)
            except Exception as e:
                logger.warning(f"Skipping anchor {anchor.get('href')!r}: {e}")
                continue

            if candidate is None:
                logger.debug(f"No container for anchor {anchor.get('href')!r}")
                continue

            candidates.append(candidate)

        logger.info(f"Located {len(candidates)} candidate containers")
        return candidates
