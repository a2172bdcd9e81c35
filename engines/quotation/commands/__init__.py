"""DocFlow Quotation Engine - request commands."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from core.documents.models import QuotationStatus
from core.documents.requests import (
    normalize_financial_fields,
    request_error,
    validate_datetime,
    validate_text,
)
from core.financials.models import DISCOUNT_FLAT


@dataclass(frozen=True)
class QuotationCreateRequest:
    customer_id: str
    items: Any = ()
    discount: Any = 0
    discount_type: str = DISCOUNT_FLAT
    default_tax_rate: Any = None
    vat_rate: Any = 0
    wht_rate: Any = 0
    valid_until: Optional[datetime] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    currency: Optional[str] = None

    def __post_init__(self):
        validate_text("customer_id", self.customer_id, required=True)
        normalize_financial_fields(self, allow_withholding=False)
        validate_datetime("valid_until", self.valid_until)
        validate_text("notes", self.notes)
        validate_text("terms", self.terms)
        validate_text("currency", self.currency)


@dataclass(frozen=True)
class QuotationUpdateRequest:
    """Patch: None means keep the stored value."""

    customer_id: Optional[str] = None
    items: Any = None
    discount: Any = None
    discount_type: Optional[str] = None
    default_tax_rate: Any = None
    vat_rate: Any = None
    wht_rate: Any = None
    valid_until: Optional[datetime] = None
    notes: Optional[str] = None
    terms: Optional[str] = None

    def __post_init__(self):
        if self.customer_id is not None:
            validate_text("customer_id", self.customer_id, required=True)
        normalize_financial_fields(self, allow_withholding=False, partial=True)
        validate_datetime("valid_until", self.valid_until)
        validate_text("notes", self.notes)
        validate_text("terms", self.terms)

    @property
    def changes_financials(self) -> bool:
        return any(
            getattr(self, name) is not None
            for name in (
                "items", "discount", "discount_type",
                "default_tax_rate", "vat_rate", "wht_rate",
            )
        )


def coerce_quotation_status(status: Any) -> QuotationStatus:
    if isinstance(status, QuotationStatus):
        return status
    try:
        return QuotationStatus(status)
    except ValueError as exc:
        raise request_error(
            f"status '{status}' is not valid. "
            f"Must be one of: {[s.value for s in QuotationStatus]}"
        ) from exc
