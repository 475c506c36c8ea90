"""
Run the position scraper from the project root

Usage:
    python run_scraper.py "https://polymarket.com/@someone?tab=positions" [more URLs]
"""
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from position_scraper.main import main

if __name__ == "__main__":
    sys.exit(main())
