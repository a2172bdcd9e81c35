"""
DocFlow Money — Public API
============================
"""

from core.money.rounding import CENT, HUNDRED, ZERO, round2, to_decimal

__all__ = [
    "CENT",
    "HUNDRED",
    "ZERO",
    "round2",
    "to_decimal",
]
