"""
DocFlow Core Time — Public API
================================
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    add_days,
    get_default_clock,
    set_default_clock,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "add_days",
    "get_default_clock",
    "set_default_clock",
]
