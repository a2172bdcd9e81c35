"""DocFlow Quotation Engine - hook names and notification builders."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.documents.models import Quotation
from core.hooks import HookNotification

QUOTATION_CREATED = "quotation.document.created"
QUOTATION_UPDATED = "quotation.document.updated"
QUOTATION_STATUS_CHANGED = "quotation.document.status_changed"
QUOTATION_REMOVED = "quotation.document.removed"

QUOTATION_HOOKS = (
    QUOTATION_CREATED,
    QUOTATION_UPDATED,
    QUOTATION_STATUS_CHANGED,
    QUOTATION_REMOVED,
)


def build_quotation_notification(
    hook_name: str,
    quotation: Quotation,
    *,
    actor_id: Optional[str],
    occurred_at: datetime,
    **extra,
) -> HookNotification:
    payload = {"quotation": quotation.to_dict()}
    payload.update(extra)
    return HookNotification(
        hook_name=hook_name,
        business_id=quotation.business_id,
        document_id=quotation.quotation_id,
        actor_id=actor_id,
        occurred_at=occurred_at,
        payload=payload,
    )
