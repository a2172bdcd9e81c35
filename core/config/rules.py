"""
DocFlow Core Config — Document Rules
======================================
Numbering prefixes, due-date defaults and lifecycle strictness come from
configuration, never from engine code. Businesses may override the
installation defaults individually.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Protocol
import uuid


# ══════════════════════════════════════════════════════════════
# DOCUMENT RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DocumentRules:
    """
    Per-business document configuration.

    enforce_status_transitions=False lets update_status write any known
    status regardless of the current one.
    """

    quotation_prefix: str = "QUOT-"
    quotation_padding: int = 3
    invoice_prefix: str = "INV-"
    invoice_padding: int = 5
    invoice_due_days: int = 30
    enforce_status_transitions: bool = True
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.quotation_prefix, str):
            raise ValueError("quotation_prefix must be a string.")
        if not isinstance(self.invoice_prefix, str):
            raise ValueError("invoice_prefix must be a string.")
        for name in ("quotation_padding", "invoice_padding"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be int >= 1.")
        if not isinstance(self.invoice_due_days, int) or self.invoice_due_days < 0:
            raise ValueError("invoice_due_days must be int >= 0.")
        if not self.currency or not isinstance(self.currency, str):
            raise ValueError("currency must be a non-empty string.")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> DocumentRules:
        """Build rules from a settings-style mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {
            key.lower(): value
            for key, value in (data or {}).items()
            if key.lower() in known
        }
        return cls(**values)


# ══════════════════════════════════════════════════════════════
# CONFIG STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class ConfigStore(Protocol):
    """Source of DocumentRules for a business."""

    def get_document_rules(self, business_id: uuid.UUID) -> DocumentRules:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY CONFIG STORE (for testing / bootstrap)
# ══════════════════════════════════════════════════════════════

class InMemoryConfigStore:
    """Installation defaults plus per-business overrides."""

    def __init__(self, defaults: Optional[DocumentRules] = None) -> None:
        self._defaults = defaults or DocumentRules()
        self._overrides: Dict[uuid.UUID, DocumentRules] = {}

    @property
    def defaults(self) -> DocumentRules:
        return self._defaults

    def set_document_rules(self, business_id: uuid.UUID, rules: DocumentRules) -> None:
        self._overrides[business_id] = rules

    def override(self, business_id: uuid.UUID, **changes: Any) -> DocumentRules:
        rules = replace(self.get_document_rules(business_id), **changes)
        self._overrides[business_id] = rules
        return rules

    def get_document_rules(self, business_id: uuid.UUID) -> DocumentRules:
        return self._overrides.get(business_id, self._defaults)


def rules_from_settings() -> DocumentRules:
    """
    Read installation defaults from settings.DOCFLOW.

    Without a Django settings module the built-in DocumentRules() apply.
    """
    from django.conf import ENVIRONMENT_VARIABLE, settings

    if not settings.configured and not os.environ.get(ENVIRONMENT_VARIABLE):
        return DocumentRules()
    return DocumentRules.from_mapping(getattr(settings, "DOCFLOW", None))
