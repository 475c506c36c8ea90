"""
Navigation Orchestrator - loads a profile page with graduated fallbacks

Tiers, in order: document parsed, network settled, then a best-effort load
with no wait condition followed by a fixed settle delay. Each attempt shares
the same bounded timeout.
"""
import logging
from typing import List, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config.enums import WaitCondition
from ..config.settings import ScraperSettings
from .browser import RenderSession, count_record_anchors
from .errors import NavigationError
from .utils import host_matches

logger = logging.getLogger(__name__)

CONTENT_FALLBACK_SELECTOR = 'table, tbody, [class*="position"]'

class NavigationOrchestrator:
    """Bring a RenderSession to a loaded, on-site page or raise NavigationError"""

    def __init__(self, settings: ScraperSettings):
        self.settings = settings

    @property
    def tiers(self) -> List[Tuple[WaitCondition, int]]:
        """(wait condition, settle delay after success) per tier"""
        return [
            (WaitCondition.DOM_PARSED, 0),
            (WaitCondition.NETWORK_SETTLED, 0),
            (WaitCondition.NONE, self.settings.best_effort_settle_ms),
        ]

    async def navigate(self, session: RenderSession) -> RenderSession:
        """Load the session's target URL and verify where we landed"""
        page = session.page
        url = session.target_url

        await self._goto_with_fallback(page, url)

        await page.wait_for_timeout(self.settings.post_navigation_settle_ms)

        self.assert_expected_site(page.url)

        await self.wait_for_records(page)
        return session

    async def _goto_with_fallback(self, page: Page, url: str) -> WaitCondition:
        last_error = None

        for wait_condition, settle_ms in self.tiers:
            try:
                logger.info(f"Loading page ({wait_condition.value}): {url}")
                response = await page.goto(
                    url,
                    wait_until=wait_condition.value,
                    timeout=self.settings.navigation_timeout_ms,
                )

                if response and response.status >= 400:
                    logger.warning(f"Page loaded with status {response.status}: {url}")

                if settle_ms:
                    await page.wait_for_timeout(settle_ms)

                logger.info(f"Page loaded successfully ({wait_condition.value}): {url}")
                return wait_condition

            except PlaywrightError as e:
                last_error = e
                logger.warning(f"Navigation with {wait_condition.value} failed for {url}: {e}")

        raise NavigationError(f"Failed to load page {url}: {last_error}")

    def assert_expected_site(self, current_url: str):
        """A load that ended on another site is fatal, not retried"""
        if not host_matches(current_url, self.settings.site_domain):
            raise NavigationError(
                f"Invalid page: expected a {self.settings.site_domain} URL, landed on {current_url}"
            )

    async def wait_for_records(self, page: Page) -> bool:
        """Give client-side rendering a chance to produce record anchors

        Returns True if anchors appeared. Never raises on a missing anchor.
        """
        marker = self.settings.record_path_marker

        for attempt in range(self.settings.anchor_poll_attempts):
            try:
                link_count = await count_record_anchors(page, marker)
            except PlaywrightError as e:
                logger.warning(f"Could not count record anchors: {e}")
                link_count = 0

            if link_count > 0:
                logger.info(f"Found {link_count} record anchors after {attempt + 1} checks")
                return True

            await page.wait_for_timeout(self.settings.anchor_poll_interval_ms)

        try:
            await page.wait_for_selector(
                CONTENT_FALLBACK_SELECTOR,
                timeout=self.settings.content_selector_timeout_ms,
            )
        except PlaywrightError as e:
            logger.warning(f"No record anchors or position content appeared ({e}), continuing anyway")

        return False
