"""
Utility functions for text parsing and URL handling
"""
import re
import logging
from typing import Optional
from urllib.parse import urljoin, urlparse

logger = logging.getLogger(__name__)

# "45¢", "12.5 ¢"
CENTS_PATTERN = re.compile(r'(\d+\.?\d*)\s*¢')
# "$5,423", "$12.50"
DOLLAR_PATTERN = re.compile(r'\$\s*[\d,]+\.?\d*')

def clean_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace and trim"""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', str(text)).strip()

def find_cents(text: Optional[str]) -> Optional[str]:
    """
    Find the first cents token in text, normalised

    Examples:
    - "45¢ avg" -> "45¢"
    - "at 12.5 ¢" -> "12.5¢"
    - "$900" -> None
    """
    if not text:
        return None
    match = CENTS_PATTERN.search(text)
    if match:
        return f"{match.group(1)}¢"
    return None

def find_dollars(text: Optional[str]) -> Optional[str]:
    """
    Find the first dollar amount in text

    Examples:
    - "Value $5,423.10" -> "$5,423.10"
    - "$ 100" -> "$100" (sign and digits rendered in separate elements)
    - "45¢" -> None
    """
    if not text:
        return None
    match = DOLLAR_PATTERN.search(text)
    if match:
        return normalize_dollars(match.group(0))
    return None

def normalize_dollars(amount: str) -> str:
    """Drop whitespace between the dollar sign and the digits"""
    return re.sub(r'\s+', '', amount)

def parse_leading_number(text: Optional[str], allow_commas: bool = False) -> Optional[float]:
    """
    Parse the first numeric portion of text

    Examples:
    - "45¢" -> 45.0
    - "$5,423.50" -> 5423.5 (with allow_commas)
    - "abc" -> None
    """
    if not text:
        return None

    pattern = r'([\d,]+\.?\d*)' if allow_commas else r'(\d+\.?\d*)'
    match = re.search(pattern, str(text))
    if not match:
        return None

    digits = match.group(1).replace(',', '') if allow_commas else match.group(1)
    try:
        return float(digits)
    except ValueError:
        return None

def is_absolute_http_url(url: Optional[str]) -> bool:
    """True for http(s) URLs with a host"""
    if not url:
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)

def absolutize_url(href: Optional[str], origin: str) -> str:
    """
    Resolve a root-relative or bare href against the site origin

    Examples:
    - "/event/x" -> "https://site.example/event/x"
    - "event/x" -> "https://site.example/event/x"
    - "https://other.example/a" -> unchanged
    """
    if not href:
        return ""
    href = href.strip()
    if href.startswith(('http://', 'https://')):
        return href
    return urljoin(origin.rstrip('/') + '/', href.lstrip('/'))

def host_matches(url: str, domain: str) -> bool:
    """True if the URL's host is the domain or one of its subdomains"""
    try:
        host = (urlparse(url).hostname or '').lower()
    except ValueError:
        return False
    domain = domain.lower()
    return host == domain or host.endswith('.' + domain)
