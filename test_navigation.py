"""
Tests for the three-tier navigation fallback and the site check
"""
import asyncio
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from fakes import PROFILE_URL, FakePage
from position_scraper.config.settings import ScraperSettings
from position_scraper.core.browser import RenderSession
from position_scraper.core.errors import NavigationError
from position_scraper.core.navigation import CONTENT_FALLBACK_SELECTOR, NavigationOrchestrator

def _navigate(page: FakePage, settings: ScraperSettings = None):
    orchestrator = NavigationOrchestrator(settings or ScraperSettings())
    return asyncio.run(orchestrator.navigate(RenderSession(PROFILE_URL, page)))

def test_first_tier_success_uses_document_parsed_only():
    page = FakePage()
    _navigate(page)
    assert page.goto_calls == ["domcontentloaded"]
    assert page.url == PROFILE_URL

def test_second_tier_waits_for_network_settled():
    page = FakePage(goto_failures=1)
    _navigate(page)
    assert page.goto_calls == ["domcontentloaded", "networkidle"]

def test_third_tier_is_best_effort_with_settle_delay():
    settings = ScraperSettings()
    page = FakePage(goto_failures=2)
    _navigate(page, settings)
    assert page.goto_calls == ["domcontentloaded", "networkidle", "commit"]
    assert page.waits[:2] == [settings.best_effort_settle_ms, settings.post_navigation_settle_ms]

def test_all_tiers_failing_raises_navigation_error():
    page = FakePage(goto_failures=3)
    try:
        _navigate(page)
    except NavigationError as e:
        assert PROFILE_URL in e.message
    else:
        raise AssertionError("expected NavigationError")
    assert len(page.goto_calls) == 3

def test_landing_on_another_site_is_fatal_without_retry():
    page = FakePage(landing_url="https://example.com/login")
    try:
        _navigate(page)
    except NavigationError as e:
        assert "example.com" in e.message
    else:
        raise AssertionError("expected NavigationError")
    assert page.goto_calls == ["domcontentloaded"]

def test_subdomain_of_expected_site_is_accepted():
    page = FakePage(landing_url="https://www.polymarket.com/@trader?tab=positions")
    _navigate(page)

def test_attempt_timeout_is_capped():
    settings = ScraperSettings(navigation_timeout_ms=600000)
    assert settings.navigation_timeout_ms == 120000

def test_missing_anchors_fall_back_to_content_selector():
    settings = ScraperSettings()
    page = FakePage(link_counts=[0])
    _navigate(page, settings)
    assert page.count_samples == settings.anchor_poll_attempts
    assert page.selector_waits == [CONTENT_FALLBACK_SELECTOR]

def test_anchors_present_skip_content_selector():
    page = FakePage(link_counts=[0, 3])
    _navigate(page)
    assert page.count_samples == 2
    assert page.selector_waits == []

if __name__ == "__main__":
    for name, test in list(globals().items()):
        if name.startswith("test_") and callable(test):
            test()
            print(f"+ {name}")
