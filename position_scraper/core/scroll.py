"""
Scroll-Stability Driver - forces lazily rendered positions into the DOM

Content streams in as the viewport approaches it. Scrolling stops once both
the page height and the record-anchor count have held still for a few
consecutive samples, or the scroll budget runs out.
"""
import logging
from dataclasses import dataclass, replace

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config.settings import ScraperSettings
from .browser import count_record_anchors

logger = logging.getLogger(__name__)

SCROLL_BY_SCRIPT = "(step) => window.scrollBy(0, step)"
SCROLL_HEIGHT_SCRIPT = "() => document.body.scrollHeight"
SCROLL_TO_BOTTOM_SCRIPT = "() => window.scrollTo(0, document.body.scrollHeight)"
SCROLL_TO_TOP_SCRIPT = "() => window.scrollTo(0, 0)"

@dataclass(frozen=True)
class ScrollState:
    """Loop state threaded through the scroll loop"""
    last_height: int = 0
    last_link_count: int = 0
    stable_count: int = 0
    iterations: int = 0

def advance(state: ScrollState, height: int, link_count: int) -> ScrollState:
    """Fold one (height, link count) sample into the loop state"""
    unchanged = height == state.last_height and link_count == state.last_link_count
    return replace(
        state,
        last_height=height,
        last_link_count=link_count,
        stable_count=state.stable_count + 1 if unchanged else 0,
        iterations=state.iterations + 1,
    )

def should_continue(state: ScrollState, max_scrolls: int, stable_threshold: int) -> bool:
    return state.iterations < max_scrolls and state.stable_count < stable_threshold

class ScrollStabilityDriver:
    """Scroll until content is stable; always succeeds, possibly with partial content"""

    def __init__(self, settings: ScraperSettings):
        self.settings = settings

    async def stabilize(self, page: Page) -> ScrollState:
        s = self.settings
        state = ScrollState()

        try:
            while should_continue(state, s.max_scrolls, s.stable_threshold):
                await page.evaluate(SCROLL_BY_SCRIPT, s.scroll_step_px)
                await page.wait_for_timeout(s.scroll_delay_ms + s.scroll_load_wait_ms)

                height = int(await page.evaluate(SCROLL_HEIGHT_SCRIPT) or 0)
                link_count = await count_record_anchors(page, s.record_path_marker)
                state = advance(state, height, link_count)

                logger.debug(
                    f"Scroll {state.iterations}: height={height} links={link_count} "
                    f"stable={state.stable_count}"
                )

        except PlaywrightError as e:
            logger.warning(f"Scrolling stopped early after {state.iterations} steps: {e}")
            await self._finish(page)
            return state

        await self._finish(page)

        if state.stable_count >= s.stable_threshold:
            logger.info(f"Content stable after {state.iterations} scrolls ({state.last_link_count} links)")
        else:
            logger.info(f"Scroll budget exhausted after {state.iterations} scrolls ({state.last_link_count} links)")

        return state

    async def _finish(self, page: Page):
        """Visit the bottom once more, then return to the top; best effort"""
        s = self.settings
        try:
            await page.evaluate(SCROLL_TO_BOTTOM_SCRIPT)
            await page.wait_for_timeout(s.bottom_settle_ms)

            await page.evaluate(SCROLL_TO_TOP_SCRIPT)
            await page.wait_for_timeout(s.top_settle_ms)
        except PlaywrightError as e:
            logger.warning(f"Could not reset scroll position: {e}")
