"""
DocFlow Documents - Numbering Service
=======================================
next_id(business_id, doc_type) -> "QUOT-001", "INV-00001", ...
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from core.config.rules import ConfigStore, InMemoryConfigStore, rules_from_settings
from core.documents.numbering.counter import SequenceCounter
from core.documents.numbering.models import NumberingPolicy, policy_from_rules

logger = logging.getLogger("docflow.numbering")


class NumberingService:
    """Resolves the policy from config and draws the next sequence value."""

    def __init__(
        self,
        counter: SequenceCounter,
        config_store: Optional[ConfigStore] = None,
    ) -> None:
        self._counter = counter
        self._config_store = config_store or InMemoryConfigStore(rules_from_settings())

    def policy_for(self, business_id: uuid.UUID, doc_type: str) -> NumberingPolicy:
        rules = self._config_store.get_document_rules(business_id)
        return policy_from_rules(
            rules, business_id_str=str(business_id), doc_type=doc_type,
        )

    def next_id(self, business_id: uuid.UUID, doc_type: str) -> str:
        policy = self.policy_for(business_id, doc_type)
        sequence = self._counter.next_value(business_id, doc_type)
        number = policy.format_number(sequence)
        logger.debug(f"Issued {doc_type} number {number} for business {business_id}")
        return number
