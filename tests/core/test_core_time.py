"""
Tests for core.time — Clock protocol and day arithmetic.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.time.clock import (
    FixedClock,
    SystemClock,
    add_days,
    get_default_clock,
    set_default_clock,
)

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


class TestClocks:
    def test_system_clock_is_utc(self):
        assert SystemClock().now_utc().tzinfo == timezone.utc

    def test_fixed_clock_rejects_naive(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2026, 1, 1))

    def test_fixed_clock_advance(self):
        clock = FixedClock(NOW)
        clock.advance(days=2, seconds=30)
        assert clock.now_utc() == NOW + timedelta(days=2, seconds=30)

    def test_default_clock_override(self):
        original = get_default_clock()
        set_default_clock(FixedClock(NOW))
        try:
            assert get_default_clock().now_utc() == NOW
        finally:
            set_default_clock(original)


class TestAddDays:
    def test_thirty_days(self):
        assert add_days(NOW, 30) == datetime(2026, 3, 31, 9, 0, 0, tzinfo=timezone.utc)

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            add_days(NOW, -1)
