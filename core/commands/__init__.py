"""
DocFlow Command Layer — Public API
====================================
Rejections are first-class: every refused operation carries a reason.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "RejectionReason",
    "ReasonCode",
]
