"""
DocFlow Hooks — Notification Model
====================================
What a hook handler receives after a document state change has been
persisted. Handlers get a frozen copy; they cannot alter the document.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class HookNotification:
    """
    Fields:
        hook_name:    engine.domain.action (e.g. 'invoicing.document.paid')
        business_id:  Tenant boundary of the document
        document_id:  QUOT-001 / INV-00001
        actor_id:     Who triggered the change ('system' for coordinators)
        occurred_at:  Clock time of the change
        payload:      Document snapshot (to_dict form) and extra context
    """

    hook_name: str
    business_id: uuid.UUID
    document_id: str
    actor_id: Optional[str]
    occurred_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.hook_name or not isinstance(self.hook_name, str):
            raise ValueError("hook_name must be a non-empty string.")
        if not isinstance(self.business_id, uuid.UUID):
            raise ValueError("business_id must be UUID.")
        if not self.document_id or not isinstance(self.document_id, str):
            raise ValueError("document_id must be a non-empty string.")
