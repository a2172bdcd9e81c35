"""
DocFlow Core Parties — Public API
===================================
"""

from core.parties.directory import InMemoryPartyDirectory, PartyDirectory
from core.parties.policies import (
    business_must_exist_policy,
    customer_must_exist_policy,
)

__all__ = [
    "PartyDirectory",
    "InMemoryPartyDirectory",
    "business_must_exist_policy",
    "customer_must_exist_policy",
]
