"""DocFlow Conversion Engine - hook names and notification builders."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.documents.models import Invoice, Quotation
from core.hooks import HookNotification

CONVERSION_QUOTATION_CONVERTED = "conversion.quotation.converted"

CONVERSION_HOOKS = (CONVERSION_QUOTATION_CONVERTED,)


def build_conversion_notification(
    quotation: Quotation,
    invoice: Invoice,
    *,
    actor_id: Optional[str],
    occurred_at: datetime,
) -> HookNotification:
    return HookNotification(
        hook_name=CONVERSION_QUOTATION_CONVERTED,
        business_id=quotation.business_id,
        document_id=quotation.quotation_id,
        actor_id=actor_id,
        occurred_at=occurred_at,
        payload={
            "quotation_id": quotation.quotation_id,
            "invoice_id": invoice.invoice_id,
            "invoice": invoice.to_dict(),
        },
    )
