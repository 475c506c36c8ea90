"""
Deduplicator & Result Assembler
"""
import logging
from typing import Iterable, List

from ..config.schema import ExtractionResult, PositionRecord

logger = logging.getLogger(__name__)

EMPTY_RESULT_MESSAGE = (
    "No positions found. The page may not have loaded correctly or the profile "
    "has no active positions. Make sure the URL includes ?tab=positions"
)

def dedup_key(market_url: str) -> str:
    """
    Canonical identity of a market URL

    Examples:
    - "https://Site.example/event/x/?q=1#top" -> "https://site.example/event/x"
    """
    key = market_url.split('?')[0].split('#')[0].lower()
    if key.endswith('/'):
        key = key[:-1]
    return key

def deduplicate(records: Iterable[PositionRecord]) -> List[PositionRecord]:
    """Keep the first record per DedupKey, preserving first-seen order"""
    seen = set()
    unique = []
    for record in records:
        key = dedup_key(record.market_url)
        if key in seen:
            logger.debug(f"Dropping duplicate position: {record.market_url}")
            continue
        seen.add(key)
        unique.append(record)
    return unique

def assemble_result(records: Iterable[PositionRecord], target_url: str = "") -> ExtractionResult:
    """Classify the final record set as success or empty success"""
    unique = deduplicate(records)

    if not unique:
        logger.warning(f"No positions found for {target_url}")
        return ExtractionResult.empty(EMPTY_RESULT_MESSAGE, target_url=target_url)

    logger.info(f"Scraped {len(unique)} positions from {target_url}")
    return ExtractionResult.success(unique, target_url=target_url)
