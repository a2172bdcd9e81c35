"""DocFlow Invoicing Engine - hook names and notification builders."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.documents.models import Invoice
from core.hooks import HookNotification

INVOICE_CREATED = "invoicing.document.created"
INVOICE_UPDATED = "invoicing.document.updated"
INVOICE_STATUS_CHANGED = "invoicing.document.status_changed"
INVOICE_REMOVED = "invoicing.document.removed"
INVOICE_PAID = "invoicing.document.paid"
PAYMENT_RECORDED = "invoicing.payment.recorded"

INVOICE_HOOKS = (
    INVOICE_CREATED,
    INVOICE_UPDATED,
    INVOICE_STATUS_CHANGED,
    INVOICE_REMOVED,
    INVOICE_PAID,
    PAYMENT_RECORDED,
)


def build_invoice_notification(
    hook_name: str,
    invoice: Invoice,
    *,
    actor_id: Optional[str],
    occurred_at: datetime,
    **extra,
) -> HookNotification:
    payload = {"invoice": invoice.to_dict()}
    payload.update(extra)
    return HookNotification(
        hook_name=hook_name,
        business_id=invoice.business_id,
        document_id=invoice.invoice_id,
        actor_id=actor_id,
        occurred_at=occurred_at,
        payload=payload,
    )
