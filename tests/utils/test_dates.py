"""
Tests for date helpers
"""
from datetime import datetime

from app.utils.dates import add_months, month_bucket, utcnow


class TestMonthBucket:
    def test_zero_padded(self):
        assert month_bucket(datetime(2025, 3, 31, 23, 59)) == "2025-03"

    def test_december(self):
        assert month_bucket(datetime(2025, 12, 1)) == "2025-12"


class TestAddMonths:
    """Calendar month arithmetic for reward expiry"""

    def test_plain_offset(self):
        assert add_months(datetime(2025, 11, 15, 12, 0), 6) == datetime(2026, 5, 15, 12, 0)

    def test_end_of_month_is_clamped(self):
        """Aug 31 plus six months lands on the last day of February"""
        assert add_months(datetime(2025, 8, 31), 6) == datetime(2026, 2, 28)
        assert add_months(datetime(2027, 8, 31), 6) == datetime(2028, 2, 29)

    def test_year_rollover(self):
        assert add_months(datetime(2025, 12, 10), 1) == datetime(2026, 1, 10)


def test_utcnow_is_naive():
    """Stored timestamps carry no tzinfo"""
    assert utcnow().tzinfo is None
