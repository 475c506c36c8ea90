"""
Position Scraper

A Playwright-based scraping pipeline that extracts open trading positions
from lazily rendered prediction-market profile pages.
"""

__version__ = "1.0.0"
__author__ = "Position Scraper Team"
