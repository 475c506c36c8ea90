"""
Tests for the scraper orchestrator: failures, cleanup, timeouts and batches
"""
import asyncio
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from fakes import PROFILE_URL, FakeBrowser, FakeBrowserManager, FakeContext, FakePage
from position_scraper.config.enums import ErrorKind, ResultStatus, SessionState
from position_scraper.config.settings import ScraperSettings
from position_scraper.core.browser import BrowserManager, RenderSession
from position_scraper.core.errors import ValidationError
from position_scraper.main import PositionScraper, build_parser, validate_profile_url

def _row(slug: str, price: str = "50¢", value: str = "$100") -> str:
    return f'<tr><td><a href="/event/{slug}">{slug}</a></td><td>avg {price}</td><td>{value}</td></tr>'

def _table(*rows: str) -> str:
    return f"<html><body><table>{''.join(rows)}</table></body></html>"

def _scraper(page_factory, **settings) -> PositionScraper:
    return PositionScraper(ScraperSettings(**settings), browser_manager=FakeBrowserManager(page_factory))

def test_successful_scrape_closes_session():
    scraper = _scraper(lambda url: FakePage(html=_table(_row("a"), _row("b"))))
    result = asyncio.run(scraper.scrape(PROFILE_URL))

    assert result.status == ResultStatus.SUCCESS
    assert result.count == 2
    assert result.records[0].outcome == "200.00"

    session = scraper.browser_manager.sessions[0]
    assert session.state == SessionState.CLOSED
    assert session.page.closed

def test_empty_page_is_200_with_message():
    scraper = _scraper(lambda url: FakePage(html="<html><body></body></html>", link_counts=[0]))
    status, body = asyncio.run(scraper.scrape(PROFILE_URL)).to_response()
    assert status == 200
    assert body["count"] == 0 and body["positions"] == []
    assert body["message"]

def test_missing_or_malformed_url_is_400_without_browser_work():
    scraper = _scraper(lambda url: FakePage())
    for bad in (None, "", "   ", "not a url", "ftp://polymarket.com/@x"):
        status, body = asyncio.run(scraper.scrape(bad)).to_response()
        assert status == 400
        assert body["error"]
    assert scraper.browser_manager.sessions == []

def test_url_without_positions_tab_is_accepted():
    settings = ScraperSettings()
    assert validate_profile_url(" https://polymarket.com/@x ", settings) == "https://polymarket.com/@x"
    try:
        validate_profile_url("polymarket.com/@x", settings)
    except ValidationError as e:
        assert e.message == "Invalid URL format"
    else:
        raise AssertionError("expected ValidationError")

def test_navigation_failure_is_500_and_session_closed():
    scraper = _scraper(lambda url: FakePage(goto_failures=3))
    result = asyncio.run(scraper.scrape(PROFILE_URL))

    assert result.error_kind == ErrorKind.NAVIGATION
    status, body = result.to_response()
    assert status == 500
    assert body["error"] == "Scraping failed"
    assert "Traceback" not in body["message"]
    assert scraper.browser_manager.sessions[0].page.closed

def test_wrong_site_is_navigation_failure():
    scraper = _scraper(lambda url: FakePage(landing_url="https://example.com/"))
    result = asyncio.run(scraper.scrape(PROFILE_URL))
    assert result.error_kind == ErrorKind.NAVIGATION
    assert scraper.browser_manager.sessions[0].page.closed

def test_unexpected_error_is_extraction_failure_and_session_closed():
    scraper = _scraper(lambda url: FakePage(content_error=RuntimeError("boom")))
    result = asyncio.run(scraper.scrape(PROFILE_URL))
    assert result.error_kind == ErrorKind.EXTRACTION
    assert result.message == "boom"
    assert scraper.browser_manager.sessions[0].page.closed

def test_overall_timeout_aborts_and_closes_session():
    scraper = _scraper(lambda url: FakePage(html=_table(_row("a")), content_delay=5), overall_timeout_s=0.05)
    result = asyncio.run(scraper.scrape(PROFILE_URL))

    assert result.error_kind == ErrorKind.TIMEOUT
    assert result.to_response()[0] == 500
    assert scraper.browser_manager.sessions[0].page.closed

def test_timeout_while_opening_session_closes_context():
    manager = BrowserManager()
    manager.browser = FakeBrowser(page_delay=5)
    scraper = PositionScraper(ScraperSettings(overall_timeout_s=0.05), browser_manager=manager)
    result = asyncio.run(scraper.scrape(PROFILE_URL))

    assert result.error_kind == ErrorKind.TIMEOUT
    assert len(manager.browser.contexts) == 1
    assert manager.browser.contexts[0].closed

def test_batch_merges_and_isolates_failures():
    pages = {
        "https://polymarket.com/@one?tab=positions": lambda: FakePage(html=_table(_row("a"), _row("shared"))),
        "https://polymarket.com/@two?tab=positions": lambda: FakePage(goto_failures=3),
        "https://polymarket.com/@three?tab=positions": lambda: FakePage(html=_table(_row("shared"), _row("c"))),
    }
    scraper = _scraper(lambda url: pages[url]())
    batch = asyncio.run(scraper.scrape_many(list(pages)))

    assert [r.market_name for r in batch.records] == ["a", "shared", "c"]
    assert [r.status for r in batch.results] == [
        ResultStatus.SUCCESS, ResultStatus.FAILED, ResultStatus.SUCCESS,
    ]
    assert len(batch.errors) == 1 and batch.errors[0].startswith("Profile 2:")
    assert all(session.page.closed for session in scraper.browser_manager.sessions)

    body = batch.to_dict()
    assert body["count"] == 3
    assert body["profiles"][1]["status"] == "FAILED"

def test_batch_is_capped_and_skips_blank_urls():
    scraper = _scraper(lambda url: FakePage(html=_table(_row(url.rsplit("@", 1)[1]))), max_profiles=2)
    urls = ["", "https://polymarket.com/@a", "  ", "https://polymarket.com/@b", "https://polymarket.com/@c"]
    batch = asyncio.run(scraper.scrape_many(urls))
    assert [r.target_url for r in batch.results] == urls[1:2] + urls[3:4]

def test_batch_without_urls_is_rejected():
    scraper = _scraper(lambda url: FakePage())
    try:
        asyncio.run(scraper.scrape_many(["", None]))
    except ValidationError:
        pass
    else:
        raise AssertionError("expected ValidationError")

def test_batch_concurrency_is_bounded():
    active = {"now": 0, "peak": 0}

    class CountingPage(FakePage):
        async def content(self):
            active["now"] += 1
            active["peak"] = max(active["peak"], active["now"])
            await asyncio.sleep(0.01)
            active["now"] -= 1
            return self.html

    scraper = _scraper(lambda url: CountingPage(html=_table(_row("x"))), max_concurrency=2)
    urls = [f"https://polymarket.com/@{i}" for i in range(3)]
    asyncio.run(scraper.scrape_many(urls))
    assert active["peak"] == 2

def test_render_session_close_is_idempotent():
    page = FakePage()
    session = RenderSession(PROFILE_URL, page)

    async def close_twice():
        async with session:
            assert session.is_open
        await session.close()

    asyncio.run(close_twice())
    assert session.state == SessionState.CLOSED
    assert page.closed

def test_failed_page_close_still_closes_context():
    page = FakePage(close_error=RuntimeError("target crashed"))
    context = FakeContext()
    session = RenderSession(PROFILE_URL, page, context)

    asyncio.run(session.close())
    assert session.state == SessionState.CLOSED
    assert context.closed

def test_cli_parser_accepts_several_urls():
    args = build_parser().parse_args(["https://polymarket.com/@a", "https://polymarket.com/@b", "--no-headless"])
    assert len(args.urls) == 2
    assert args.headless is False

if __name__ == "__main__":
    for name, test in list(globals().items()):
        if name.startswith("test_") and callable(test):
            test()
            print(f"+ {name}")
