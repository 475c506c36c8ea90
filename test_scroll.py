"""
Tests for the scroll-stability loop
"""
import asyncio
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from playwright.async_api import Error as PlaywrightError

from fakes import FakePage
from position_scraper.config.settings import ScraperSettings
from position_scraper.core.scroll import (
    SCROLL_HEIGHT_SCRIPT,
    SCROLL_TO_BOTTOM_SCRIPT,
    SCROLL_TO_TOP_SCRIPT,
    ScrollStabilityDriver,
    ScrollState,
    advance,
    should_continue,
)

def test_unchanged_sample_increments_stability():
    state = advance(ScrollState(last_height=100, last_link_count=4, stable_count=1), 100, 4)
    assert state.stable_count == 2
    assert state.iterations == 1

def test_any_change_resets_stability():
    start = ScrollState(last_height=100, last_link_count=4, stable_count=2)
    assert advance(start, 120, 4).stable_count == 0
    # height static but links still streaming in
    assert advance(start, 100, 5).stable_count == 0

def test_loop_stops_on_threshold_or_budget():
    assert should_continue(ScrollState(stable_count=2, iterations=10), 50, 3)
    assert not should_continue(ScrollState(stable_count=3, iterations=10), 50, 3)
    assert not should_continue(ScrollState(stable_count=0, iterations=50), 50, 3)

def test_driver_stops_after_three_stable_samples():
    page = FakePage(heights=[1000, 2000, 3000, 3000, 3000, 3000], link_counts=[5, 10, 15, 15, 15, 15])
    state = asyncio.run(ScrollStabilityDriver(ScraperSettings()).stabilize(page))

    # three growing samples, then three stable ones
    assert state.iterations == 6
    assert state.stable_count == 3
    assert state.last_link_count == 15

def test_driver_respects_scroll_budget():
    heights = list(range(1000, 100000, 500))
    page = FakePage(heights=heights, link_counts=heights)
    state = asyncio.run(ScrollStabilityDriver(ScraperSettings(max_scrolls=7)).stabilize(page))
    assert state.iterations == 7
    assert state.stable_count == 0

def test_driver_finishes_at_bottom_then_top():
    page = FakePage(heights=[500], link_counts=[2])
    settings = ScraperSettings()
    asyncio.run(ScrollStabilityDriver(settings).stabilize(page))

    assert page.scripts[-2:] == [SCROLL_TO_BOTTOM_SCRIPT, SCROLL_TO_TOP_SCRIPT]
    assert page.waits[-2:] == [settings.bottom_settle_ms, settings.top_settle_ms]

def test_driver_never_raises_on_page_errors():
    page = FakePage(evaluate_error=PlaywrightError("Execution context was destroyed"))
    state = asyncio.run(ScrollStabilityDriver(ScraperSettings()).stabilize(page))
    assert state.iterations == 0

def test_driver_still_resets_after_a_failed_sample():
    page = FakePage(
        evaluate_error=PlaywrightError("Execution context was destroyed"),
        evaluate_error_script=SCROLL_HEIGHT_SCRIPT,
    )
    settings = ScraperSettings()
    state = asyncio.run(ScrollStabilityDriver(settings).stabilize(page))

    assert state.iterations == 0
    assert page.scripts[-2:] == [SCROLL_TO_BOTTOM_SCRIPT, SCROLL_TO_TOP_SCRIPT]
    assert page.waits[-2:] == [settings.bottom_settle_ms, settings.top_settle_ms]

if __name__ == "__main__":
    for name, test in list(globals().items()):
        if name.startswith("test_") and callable(test):
            test()
            print(f"+ {name}")
