"""
Main execution script for the position scraper
"""
import argparse
import asyncio
import json
import logging
import sys
from itertools import chain
from typing import Iterable, List, Optional

from .config.enums import ErrorKind
from .config.schema import BatchResult, ExtractionResult
from .config.settings import ScraperSettings, load_settings
from .core.browser import BrowserManager
from .core.errors import ScraperError, ValidationError
from .core.logger import setup_logger
from .core.navigation import NavigationOrchestrator
from .core.scroll import ScrollStabilityDriver
from .core.utils import is_absolute_http_url
from .extractors.assembler import deduplicate
from .extractors.position_extractor import PositionExtractor

logger = logging.getLogger(__name__)

def validate_profile_url(profile_url: Optional[str], settings: ScraperSettings) -> str:
    """Reject missing or malformed input before any browser work"""
    if not profile_url or not profile_url.strip():
        raise ValidationError("profileUrl parameter is required")

    profile_url = profile_url.strip()
    if not is_absolute_http_url(profile_url):
        raise ValidationError("Invalid URL format")

    if settings.positions_tab_indicator not in profile_url:
        logger.warning(
            f"{profile_url} has no '{settings.positions_tab_indicator}', "
            f"positions may not be rendered"
        )

    return profile_url

class PositionScraper:
    """Scraper orchestrator: one render session per profile URL"""

    def __init__(self, settings: Optional[ScraperSettings] = None,
                 browser_manager: Optional[BrowserManager] = None):
        self.settings = settings or load_settings()
        self.browser_manager = browser_manager
        self._owns_browser = browser_manager is None
        self._start_lock = asyncio.Lock()

        self.navigator = NavigationOrchestrator(self.settings)
        self.scroller = ScrollStabilityDriver(self.settings)
        self.extractor = PositionExtractor(self.settings)

    async def start(self):
        async with self._start_lock:
            if self.browser_manager is None:
                self.browser_manager = BrowserManager(
                    headless=self.settings.headless,
                    timeout=self.settings.navigation_timeout_ms,
                )
            await self.browser_manager.start()

    async def close(self):
        if self._owns_browser and self.browser_manager:
            await self.browser_manager.close()
            self.browser_manager = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _run(self, profile_url: str) -> ExtractionResult:
        """Navigate, scroll, extract; the session closes on every exit path"""
        if self.browser_manager is None:
            await self.start()

        session = await self.browser_manager.new_session(profile_url)
        async with session:
            await self.navigator.navigate(session)
            await self.scroller.stabilize(session.page)

            # Let client-side rendering catch up with the last scroll
            await session.page.wait_for_timeout(self.settings.render_settle_ms)

            return await self.extractor.extract_from_page(session.page, target_url=profile_url)

    async def scrape(self, profile_url: Optional[str]) -> ExtractionResult:
        """Scrape one profile; never raises for scraping problems, returns a typed failure"""
        try:
            url = validate_profile_url(profile_url, self.settings)
        except ValidationError as e:
            logger.warning(f"Rejected profile URL {profile_url!r}: {e.message}")
            return ExtractionResult.failure(e.kind, e.message, target_url=profile_url or "")

        logger.info(f"Starting scrape for {url}")

        try:
            return await asyncio.wait_for(self._run(url), timeout=self.settings.overall_timeout_s)

        except asyncio.TimeoutError:
            message = f"Scraping timed out after {self.settings.overall_timeout_s:g}s"
            logger.error(f"{message}: {url}")
            return ExtractionResult.failure(ErrorKind.TIMEOUT, message, target_url=url)

        except ScraperError as e:
            logger.error(f"Failed to scrape {url}: {e.message}")
            return ExtractionResult.failure(e.kind, e.message, target_url=url)

        except Exception as e:
            logger.error(f"Scraping error for {url}: {e}")
            return ExtractionResult.failure(
                ErrorKind.EXTRACTION, str(e) or "Unknown error occurred", target_url=url
            )

    async def scrape_many(self, profile_urls: Iterable[Optional[str]]) -> BatchResult:
        """Scrape several profiles side by side and merge their positions

        A failing profile becomes a diagnostic; its siblings are unaffected.
        """
        urls = [url.strip() for url in profile_urls if url and url.strip()]
        if not urls:
            raise ValidationError("Please enter at least one profile URL")

        if len(urls) > self.settings.max_profiles:
            logger.warning(
                f"Got {len(urls)} profile URLs, only the first {self.settings.max_profiles} are processed"
            )
            urls = urls[:self.settings.max_profiles]

        await self.start()
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def bounded(url: str) -> ExtractionResult:
            async with semaphore:
                return await self.scrape(url)

        outcomes = await asyncio.gather(*(bounded(url) for url in urls), return_exceptions=True)

        results: List[ExtractionResult] = []
        for url, outcome in zip(urls, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logger.error(f"Profile {url} failed: {outcome}")
                outcome = ExtractionResult.failure(ErrorKind.EXTRACTION, str(outcome), target_url=url)
            results.append(outcome)

        merged = deduplicate(chain.from_iterable(result.records for result in results))

        batch = BatchResult(results=results, records=merged)
        if batch.errors:
            logger.warning(f"Some profiles failed: {'; '.join(batch.errors)}")
        logger.info(f"Completed {len(urls)} profiles: {batch.count} unique positions")
        return batch

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="position_scraper",
        description="Extract open positions from prediction-market profile pages",
    )
    parser.add_argument('urls', nargs='+', metavar='PROFILE_URL',
                        help="profile URL, e.g. https://polymarket.com/@name?tab=positions")
    parser.add_argument('--config', default=None, help="settings YAML file")
    parser.add_argument('--headless', action=argparse.BooleanOptionalAction, default=None,
                        help="run the browser without a window")
    parser.add_argument('--log-level', default=None, help="console log level")
    return parser

async def run(urls: List[str], settings: ScraperSettings) -> int:
    """Scrape and print JSON; returns the process exit code"""
    async with PositionScraper(settings) as scraper:
        if len(urls) == 1:
            status, body = (await scraper.scrape(urls[0])).to_response()
            print(json.dumps(body, indent=2, ensure_ascii=False))
            return 0 if status == 200 else 1

        try:
            batch = await scraper.scrape_many(urls)
        except ValidationError as e:
            print(json.dumps({'error': e.message, 'message': e.message}, indent=2))
            return 1

        print(json.dumps(batch.to_dict(), indent=2, ensure_ascii=False))
        return 0 if batch.count or not batch.errors else 1

def main(argv: Optional[List[str]] = None) -> int:
    """Entry point"""
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config, headless=args.headless, log_level=args.log_level)
    setup_logger(log_level=settings.log_level)

    return asyncio.run(run(args.urls, settings))

if __name__ == "__main__":
    sys.exit(main())
