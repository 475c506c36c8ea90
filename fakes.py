"""
In-memory stand-ins for the Playwright page and browser used by the tests
"""
import asyncio
from typing import List, Optional, Sequence

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from position_scraper.core.browser import COUNT_ANCHORS_SCRIPT, RenderSession
from position_scraper.core.scroll import SCROLL_HEIGHT_SCRIPT

PROFILE_URL = "https://polymarket.com/@trader?tab=positions"

def _sequence_value(values: Sequence[int], index: int) -> int:
    """Value at index, repeating the last one once the sequence runs out"""
    if not values:
        return 0
    return values[min(index, len(values) - 1)]

class FakePage:
    """Records every call; navigation, scroll signals and content are scripted"""

    def __init__(self, html: str = "", goto_failures: int = 0, landing_url: Optional[str] = None,
                 heights: Sequence[int] = (1000,), link_counts: Sequence[int] = (1,),
                 content_delay: float = 0.0, content_error: Optional[Exception] = None,
                 evaluate_error: Optional[Exception] = None, evaluate_error_script: Optional[str] = None,
                 close_error: Optional[Exception] = None):
        self.url = "about:blank"
        self.html = html
        self.goto_failures = goto_failures
        self.landing_url = landing_url
        self.heights = list(heights)
        self.link_counts = list(link_counts)
        self.content_delay = content_delay
        self.content_error = content_error
        self.evaluate_error = evaluate_error
        self.evaluate_error_script = evaluate_error_script
        self.close_error = close_error

        self.goto_calls: List[str] = []
        self.waits: List[int] = []
        self.scripts: List[str] = []
        self.selector_waits: List[str] = []
        self.height_samples = 0
        self.count_samples = 0
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append(wait_until)
        if len(self.goto_calls) <= self.goto_failures:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")
        self.url = self.landing_url or url
        return None

    async def wait_for_timeout(self, timeout):
        self.waits.append(timeout)

    async def wait_for_selector(self, selector, timeout=None):
        self.selector_waits.append(selector)
        raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")

    async def evaluate(self, script, arg=None):
        if self.evaluate_error and self.evaluate_error_script in (None, script):
            raise self.evaluate_error
        self.scripts.append(script)
        if script == COUNT_ANCHORS_SCRIPT:
            value = _sequence_value(self.link_counts, self.count_samples)
            self.count_samples += 1
            return value
        if script == SCROLL_HEIGHT_SCRIPT:
            value = _sequence_value(self.heights, self.height_samples)
            self.height_samples += 1
            return value
        return None

    async def content(self):
        if self.content_delay:
            await asyncio.sleep(self.content_delay)
        if self.content_error:
            raise self.content_error
        return self.html

    async def add_init_script(self, script):
        self.scripts.append(script)

    async def close(self):
        self.closed = True
        if self.close_error:
            raise self.close_error

class FakeContext:
    """Browser context whose page creation can be slowed down"""

    def __init__(self, page_delay: float = 0.0):
        self.page_delay = page_delay
        self.default_timeout = None
        self.pages: List[FakePage] = []
        self.closed = False

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout

    async def new_page(self):
        if self.page_delay:
            await asyncio.sleep(self.page_delay)
        page = FakePage()
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True

class FakeBrowser:
    """Stands in for a launched Chromium; every context it creates is kept"""

    def __init__(self, page_delay: float = 0.0):
        self.page_delay = page_delay
        self.contexts: List[FakeContext] = []

    async def new_context(self, **options):
        context = FakeContext(self.page_delay)
        self.contexts.append(context)
        return context

class FakeBrowserManager:
    """Hands out RenderSessions around pages built by a factory"""

    def __init__(self, page_factory):
        self.page_factory = page_factory
        self.sessions: List[RenderSession] = []
        self.started = False
        self.closed = False

    async def start(self):
        self.started = True

    async def new_session(self, target_url: str) -> RenderSession:
        session = RenderSession(target_url, self.page_factory(target_url))
        self.sessions.append(session)
        return session

    async def close(self):
        self.closed = True
