"""
Position extractor - one extraction pass over a stabilized page snapshot
"""
import logging
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config.schema import ExtractionResult, PositionRecord, RawPositionRecord
from ..config.settings import ScraperSettings
from ..core.dom import DomNode, parse_document
from ..core.errors import ExtractionError
from .assembler import assemble_result
from .fields import FieldExtractionEngine
from .locator import RecordCandidateLocator
from .metrics import compute_outcome

logger = logging.getLogger(__name__)

# Number of parsed positions echoed to the log per pass
LOGGED_SAMPLE_SIZE = 3

def to_position(raw: RawPositionRecord) -> PositionRecord:
    return PositionRecord(
        market_name=raw.market_name,
        market_url=raw.market_url,
        outcome=compute_outcome(raw.priced_quantity_text, raw.monetary_value_text),
        priced_quantity_text=raw.priced_quantity_text,
        monetary_value_text=raw.monetary_value_text,
    )

class PositionExtractor:
    """Locate candidates, extract their fields and assemble the result"""

    def __init__(self, settings: Optional[ScraperSettings] = None):
        self.settings = settings or ScraperSettings()
        self.locator = RecordCandidateLocator(
            record_path_marker=self.settings.record_path_marker,
            style_markers=self.settings.style_markers,
            min_styled_anchors=self.settings.min_styled_anchors,
        )
        self.engine = FieldExtractionEngine(canonical_origin=self.settings.canonical_origin)

    def extract_records(self, root: DomNode) -> List[PositionRecord]:
        """Positions in page order, duplicates included"""
        records = []

        for candidate in self.locator.locate(root):
            try:
                raw = self.engine.extract(candidate)
                if raw is None:
                    continue
                position = to_position(raw)
            except Exception as e:
                logger.warning(f"Error extracting position from {candidate.anchor.get('href')!r}: {e}")
                continue

            if len(records) < LOGGED_SAMPLE_SIZE:
                logger.debug(
                    f"Parsed position: market={position.market_name[:50]!r} "
                    f"price={position.priced_quantity_text or '(empty)'} "
                    f"value={position.monetary_value_text or '(empty)'} "
                    f"outcome={position.outcome or '(empty)'} via {candidate.strategy.value}"
                )

            records.append(position)

        return records

    def extract_from_html(self, html: str, target_url: str = "") -> ExtractionResult:
        root = parse_document(html)
        return assemble_result(self.extract_records(root), target_url=target_url)

    async def extract_from_page(self, page: Page, target_url: str = "") -> ExtractionResult:
        """Snapshot the live DOM and run one pass over it"""
        try:
            html = await page.content()
        except PlaywrightError as e:
            raise ExtractionError(f"Could not read page content: {e}") from e

        return self.extract_from_html(html, target_url=target_url)
