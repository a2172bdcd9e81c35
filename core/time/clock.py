"""
DocFlow Core Time — Injectable Clock
======================================
Lifecycle services never call datetime.now() directly. They read time from
an injected Clock so status stamps and due dates are reproducible in tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


class SystemClock:
    """Production clock backed by the system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock pinned to one instant.

    Usage:
        clock = FixedClock(datetime(2026, 1, 1, tzinfo=timezone.utc))
        clock.advance(days=30)
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, *, days: int = 0, seconds: float = 0) -> None:
        self._fixed_dt = self._fixed_dt + timedelta(days=days, seconds=seconds)


_default_clock: Clock = SystemClock()


def set_default_clock(clock: Clock) -> None:
    """Replace the clock services fall back to when none is injected."""
    global _default_clock
    _default_clock = clock


def get_default_clock() -> Clock:
    return _default_clock


def add_days(moment: datetime, days: int) -> datetime:
    """Return moment shifted by a whole number of days."""
    if not isinstance(days, int) or days < 0:
        raise ValueError("days must be int >= 0.")
    return moment + timedelta(days=days)
