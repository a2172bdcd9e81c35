"""DocFlow Invoicing Engine - request commands."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from core.documents.models import InvoiceStatus
from core.documents.requests import (
    normalize_financial_fields,
    request_error,
    validate_amount,
    validate_datetime,
    validate_text,
)
from core.financials.models import DISCOUNT_FLAT


@dataclass(frozen=True)
class InvoiceCreateRequest:
    customer_id: str
    items: Any = ()
    discount: Any = 0
    discount_type: str = DISCOUNT_FLAT
    default_tax_rate: Any = None
    vat_rate: Any = 0
    wht_rate: Any = 0
    quotation_id: Optional[str] = None
    issued_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    po_number: Optional[str] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    currency: Optional[str] = None

    def __post_init__(self):
        validate_text("customer_id", self.customer_id, required=True)
        normalize_financial_fields(self, allow_withholding=True)
        if self.quotation_id is not None:
            validate_text("quotation_id", self.quotation_id, required=True)
        validate_datetime("issued_date", self.issued_date)
        validate_datetime("due_date", self.due_date)
        if self.issued_date and self.due_date and self.due_date < self.issued_date:
            raise request_error("due_date must not be before issued_date.")
        for name in ("po_number", "notes", "terms", "currency"):
            validate_text(name, getattr(self, name))


@dataclass(frozen=True)
class InvoiceUpdateRequest:
    """Patch: None means keep the stored value."""

    customer_id: Optional[str] = None
    items: Any = None
    discount: Any = None
    discount_type: Optional[str] = None
    default_tax_rate: Any = None
    vat_rate: Any = None
    wht_rate: Any = None
    due_date: Optional[datetime] = None
    po_number: Optional[str] = None
    notes: Optional[str] = None
    terms: Optional[str] = None

    def __post_init__(self):
        if self.customer_id is not None:
            validate_text("customer_id", self.customer_id, required=True)
        normalize_financial_fields(self, allow_withholding=True, partial=True)
        validate_datetime("due_date", self.due_date)
        for name in ("po_number", "notes", "terms"):
            validate_text(name, getattr(self, name))

    @property
    def changes_financials(self) -> bool:
        return any(
            getattr(self, name) is not None
            for name in (
                "items", "discount", "discount_type",
                "default_tax_rate", "vat_rate", "wht_rate",
            )
        )


@dataclass(frozen=True)
class PaymentRequest:
    amount: Any
    method: str = "bank_transfer"
    reference: Optional[str] = None
    paid_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "amount", validate_amount("amount", self.amount))
        validate_text("method", self.method, required=True)
        validate_text("reference", self.reference)
        validate_datetime("paid_at", self.paid_at)


def coerce_invoice_status(status: Any) -> InvoiceStatus:
    if isinstance(status, InvoiceStatus):
        return status
    try:
        return InvoiceStatus(status)
    except ValueError as exc:
        raise request_error(
            f"status '{status}' is not valid. "
            f"Must be one of: {[s.value for s in InvoiceStatus]}"
        ) from exc
