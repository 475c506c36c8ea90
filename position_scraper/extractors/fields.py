"""
Field Extraction Engine - cascading heuristics for each position field

Every field is an ordered chain of pure functions ``DomNode -> Optional[str]``
running from the most structured source (a labelled table cell) to the
loosest (a regex over the whole container text). The first non-empty
answer wins; a strategy that raises counts as no answer.
"""
import logging
import re
from typing import Callable, List, Optional, Sequence

from ..config.schema import CandidateContainer, RawPositionRecord
from ..core.dom import DomNode, has_tag
from ..core.utils import absolutize_url, clean_text, find_cents, find_dollars, normalize_dollars

logger = logging.getLogger(__name__)

UNKNOWN_MARKET = "Unknown Market"

FieldStrategy = Callable[[DomNode], Optional[str]]

TEXT_ELEMENTS = has_tag('span', 'div', 'p', 'td', 'th')
CELL_ELEMENTS = has_tag('td', 'th')

PRICE_CELL_KEYWORDS = re.compile(r'avg|average|price|\bat\b', re.IGNORECASE)
VALUE_KEYWORDS = ('value', 'pnl', 'profit', 'loss')

# A dollar token directly labelled as the value, e.g. "Value $900" in "Cost $400 Value $900"
LABELLED_AMOUNT = re.compile(r'(?:value|pnl|profit|loss)[:\s]*(\$\s*[\d,]+\.?\d*)', re.IGNORECASE)

# Labels that mark a cents token as the average entry price
AVG_LABELS = (r'at\s+', r'avg[:\s]+', r'average[:\s]+')

AVG_TEXT_PATTERNS = [
    re.compile(r'avg[:\s]+(\d+\.?\d*)\s*¢', re.IGNORECASE),
    re.compile(r'average[:\s]+(\d+\.?\d*)\s*¢', re.IGNORECASE),
    re.compile(r'at\s+(\d+\.?\d*)\s*¢', re.IGNORECASE),
]

LABELLED_VALUE_PATTERNS = [
    re.compile(r'value[:\s]+\$?\s*([\d,]+\.?\d*)', re.IGNORECASE),
    re.compile(r'PnL[:\s]+\$?\s*([\d,]+\.?\d*)', re.IGNORECASE),
    re.compile(r'profit[:\s]+\$?\s*([\d,]+\.?\d*)', re.IGNORECASE),
    re.compile(r'loss[:\s]+\$?\s*([\d,]+\.?\d*)', re.IGNORECASE),
]

def _is_average_price(context: str, price: str) -> bool:
    """True if context labels this exact cents token as an average"""
    number = re.escape(price.rstrip("¢"))
    return any(
        re.search(label + number + r'\s*¢', context, re.IGNORECASE)
        for label in AVG_LABELS
    )

def _mentions_value(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in VALUE_KEYWORDS)

def _pick_dollar_amount(texts: Sequence[str]) -> Optional[str]:
    """
    Choose the value amount among several texts

    A token labelled as value/PnL wins, then the first amount of a text that
    mentions such a label, then the first amount at all.
    """
    mentioned = None
    fallback = None
    for text in texts:
        labelled = LABELLED_AMOUNT.search(text)
        if labelled:
            return normalize_dollars(labelled.group(1))
        amount = find_dollars(text)
        if not amount:
            continue
        if mentioned is None and _mentions_value(text):
            mentioned = amount
        if fallback is None:
            fallback = amount
    return mentioned or fallback

# Priced quantity

def price_from_table_cells(container: DomNode) -> Optional[str]:
    if container.tag != 'tr':
        return None
    for cell in container.find_all(CELL_ELEMENTS):
        text = cell.text
        if PRICE_CELL_KEYWORDS.search(text):
            price = find_cents(text)
            if price:
                return price
    return None

def price_from_context_elements(container: DomNode) -> Optional[str]:
    for element in container.find_all(TEXT_ELEMENTS):
        text = element.text
        price = find_cents(text)
        if not price:
            continue
        parent = element.parent
        context = f"{text} {parent.text if parent else ''}"
        if _is_average_price(context, price):
            return price
    return None

def price_from_labelled_text(container: DomNode) -> Optional[str]:
    text = container.text
    for pattern in AVG_TEXT_PATTERNS:
        match = pattern.search(text)
        if match:
            return f"{match.group(1)}¢"
    return None

def price_from_any_cents(container: DomNode) -> Optional[str]:
    return find_cents(container.text)

PRICE_STRATEGIES: List[FieldStrategy] = [
    price_from_table_cells,
    price_from_context_elements,
    price_from_labelled_text,
    price_from_any_cents,
]

# Monetary value

def value_from_table_cells(container: DomNode) -> Optional[str]:
    if container.tag != 'tr':
        return None
    return _pick_dollar_amount([cell.text for cell in container.find_all(CELL_ELEMENTS)])

def value_from_elements(container: DomNode) -> Optional[str]:
    return _pick_dollar_amount([element.text for element in container.find_all(TEXT_ELEMENTS)])

def value_from_text(container: DomNode) -> Optional[str]:
    text = container.text
    amount = _pick_dollar_amount([text])
    if amount:
        return amount
    for pattern in LABELLED_VALUE_PATTERNS:
        match = pattern.search(text)
        if match:
            return f"${match.group(1)}"
    return None

VALUE_STRATEGIES: List[FieldStrategy] = [
    value_from_table_cells,
    value_from_elements,
    value_from_text,
]

def run_chain(container: DomNode, strategies: Sequence[FieldStrategy], field_name: str = "") -> str:
    """Try strategies in order; empty string when none answers"""
    for strategy in strategies:
        try:
            result = strategy(container)
        except Exception as e:
            logger.debug(f"{field_name} strategy {strategy.__name__} failed: {e}")
            continue
        if result:
            return result
    return ""

class FieldExtractionEngine:
    """Turn a candidate container into a RawPositionRecord"""

    def __init__(self, canonical_origin: str = "https://polymarket.com",
                 price_strategies: Sequence[FieldStrategy] = tuple(PRICE_STRATEGIES),
                 value_strategies: Sequence[FieldStrategy] = tuple(VALUE_STRATEGIES)):
        self.canonical_origin = canonical_origin
        self.price_strategies = tuple(price_strategies)
        self.value_strategies = tuple(value_strategies)

    def market_name(self, anchor: DomNode) -> str:
        return clean_text(anchor.text) or UNKNOWN_MARKET

    def market_url(self, anchor: DomNode) -> str:
        return absolutize_url(anchor.get('href'), self.canonical_origin)

    def extract(self, candidate: CandidateContainer) -> Optional[RawPositionRecord]:
        """None when the anchor carries no usable href"""
        market_url = self.market_url(candidate.anchor)
        if not market_url:
            return None

        container = candidate.container
        return RawPositionRecord(
            market_name=self.market_name(candidate.anchor),
            market_url=market_url,
            priced_quantity_text=run_chain(container, self.price_strategies, "priced quantity"),
            monetary_value_text=run_chain(container, self.value_strategies, "monetary value"),
        )

