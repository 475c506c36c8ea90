"""
Browser management using Playwright
"""
import logging
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page

from ..config.enums import SessionState

logger = logging.getLogger(__name__)

USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

STEALTH_SCRIPT = """
    // Remove webdriver property
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined,
    });

    // Mock chrome property
    window.chrome = {
        runtime: {},
    };
"""

class RenderSession:
    """One live page under automated control, for one target URL

    Owns its browser context exclusively. ``close`` is idempotent and must run
    on every exit path; use the session as an async context manager.
    """

    def __init__(self, target_url: str, page: Page, context: Optional[BrowserContext] = None):
        self.target_url = target_url
        self.page = page
        self.context = context
        self.state = SessionState.OPEN

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.OPEN

    async def close(self):
        """Close the page and its context"""
        if not self.is_open:
            return
        self.state = SessionState.CLOSED

        try:
            await self.page.close()
        except Exception as e:
            logger.error(f"Error closing page for {self.target_url}: {e}")
        finally:
            # The context goes even when the page close fails or is cancelled
            if self.context:
                try:
                    await self.context.close()
                except Exception as e:
                    logger.error(f"Error closing browser context for {self.target_url}: {e}")

        logger.debug(f"Render session closed: {self.target_url}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

class BrowserManager:
    """Manage the Playwright browser process and hand out isolated sessions"""

    def __init__(self, headless: bool = True, timeout: int = 30000):
        self.headless = headless
        self.timeout = timeout
        self.playwright = None
        self.browser: Optional[Browser] = None

    async def start(self):
        """Start the browser"""
        if self.browser:
            return

        try:
            self.playwright = await async_playwright().start()

            # Launch browser with options
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=[
                    '--no-sandbox',
                    '--disable-setuid-sandbox',
                    '--disable-dev-shm-usage',
                    '--disable-accelerated-2d-canvas',
                    '--disable-gpu',
                    '--disable-blink-features=AutomationControlled',
                ]
            )

            logger.info("Browser started successfully")

        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            raise

    async def new_session(self, target_url: str) -> RenderSession:
        """Create a session with its own context so concurrent sessions share no state"""
        if not self.browser:
            await self.start()

        # Create context with realistic settings
        context = await self.browser.new_context(
            viewport={'width': 1920, 'height': 1080},
            user_agent=USER_AGENT,
        )
        context.set_default_timeout(self.timeout)

        try:
            page = await context.new_page()
            await page.add_init_script(STEALTH_SCRIPT)
        except BaseException:
            # Includes cancellation from an overall timeout
            await context.close()
            raise

        logger.debug(f"Render session opened: {target_url}")
        return RenderSession(target_url, page, context)

    async def close(self):
        """Close the browser"""
        try:
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()

            logger.info("Browser closed successfully")

        except Exception as e:
            logger.error(f"Error closing browser: {e}")
        finally:
            self.browser = None
            self.playwright = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

COUNT_ANCHORS_SCRIPT = (
    "(marker) => document.querySelectorAll('a[href*=\"' + marker + '\"]').length"
)

async def count_record_anchors(page: Page, marker: str) -> int:
    """Number of anchors in the live DOM whose href contains marker"""
    return int(await page.evaluate(COUNT_ANCHORS_SCRIPT, marker) or 0)
