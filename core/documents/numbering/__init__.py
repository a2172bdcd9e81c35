"""
DocFlow Documents - Numbering Public API
==========================================
"""

from core.documents.numbering.counter import (
    InMemorySequenceCounter,
    SequenceCounter,
)
from core.documents.numbering.models import (
    NumberingPolicy,
    policy_from_rules,
)
from core.documents.numbering.service import NumberingService

__all__ = [
    "NumberingPolicy",
    "policy_from_rules",
    "SequenceCounter",
    "InMemorySequenceCounter",
    "NumberingService",
]
