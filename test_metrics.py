"""
Tests for the outcome ratio calculation
"""
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from position_scraper.extractors.metrics import compute_outcome

def test_outcome_is_value_over_unit_price():
    assert compute_outcome("50¢", "$100") == "200.00"
    assert compute_outcome("45¢", "$900") == "2000.00"

def test_outcome_handles_thousands_separators_and_decimals():
    assert compute_outcome("25¢", "$5,423.50") == "21694.00"
    assert compute_outcome("12.5¢", "$10") == "80.00"

def test_outcome_always_has_two_decimals():
    assert compute_outcome("30¢", "$10") == "33.33"
    assert compute_outcome("99¢", "$0") == "0.00"

def test_outcome_empty_for_missing_or_zero_price():
    assert compute_outcome("", "$100") == ""
    assert compute_outcome("0¢", "$100") == ""
    assert compute_outcome("0.0¢", "$100") == ""

def test_outcome_empty_for_unparsable_input():
    assert compute_outcome("n/a", "$100") == ""
    assert compute_outcome("50¢", "") == ""
    assert compute_outcome("50¢", "—") == ""

def test_outcome_never_emits_non_finite_text():
    huge = "$" + "9" * 400
    result = compute_outcome("1¢", huge)
    assert result == ""
    assert "nan" not in result.lower() and "inf" not in result.lower()

if __name__ == "__main__":
    for name, test in list(globals().items()):
        if name.startswith("test_") and callable(test):
            test()
            print(f"+ {name}")
