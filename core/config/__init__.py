"""
DocFlow Core Config — Public API
==================================
"""

from core.config.rules import (
    ConfigStore,
    DocumentRules,
    InMemoryConfigStore,
    rules_from_settings,
)

__all__ = [
    "DocumentRules",
    "ConfigStore",
    "InMemoryConfigStore",
    "rules_from_settings",
]
