"""
Derived Metric Calculator - outcome ratio of a position

outcome = monetary value / (priced quantity in cents / 100)
"""
import logging
import math

from ..core.utils import parse_leading_number

logger = logging.getLogger(__name__)

def compute_outcome(priced_quantity_text: str, monetary_value_text: str) -> str:
    """
    Outcome ratio formatted to 2 decimals, or "" when it cannot be computed

    Examples:
    - ("50¢", "$100") -> "200.00"
    - ("45¢", "$900") -> "2000.00"
    - ("0¢", "$100") -> ""
    - ("", "$100") -> ""
    """
    if not priced_quantity_text or not monetary_value_text:
        return ""

    price_cents = parse_leading_number(priced_quantity_text)
    value = parse_leading_number(monetary_value_text, allow_commas=True)
    if price_cents is None or value is None:
        return ""

    unit_price = price_cents / 100
    if not math.isfinite(unit_price) or unit_price <= 0 or not math.isfinite(value):
        return ""

    outcome = value / unit_price
    if not math.isfinite(outcome):
        logger.debug(f"Non-finite outcome for {priced_quantity_text!r} / {monetary_value_text!r}")
        return ""

    return f"{outcome:.2f}"
