"""
DocFlow Documents — Quotation & Invoice Records
=================================================
Immutable snapshots of the two financial documents.

RULES:
- Records are frozen. Lifecycle services derive a new snapshot with
  dataclasses.replace() and hand it to the store.
- Every record is scoped to exactly one business_id (tenant boundary).
- items holds the processed lines (raw LineItem + per-line breakdown).
- summary is derived from items and never stored on its own.
- A quotation produces at most one invoice (converted_to_invoice).

This file contains NO persistence logic.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from core.financials.models import (
    DISCOUNT_FLAT,
    CalculationWarning,
    FinancialSummary,
    LineItem,
    ProcessedLineItem,
)
from core.money import ZERO, to_decimal


DOCUMENT_QUOTATION = "QUOTATION"
DOCUMENT_INVOICE = "INVOICE"

VALID_DOCUMENT_TYPES = frozenset({DOCUMENT_QUOTATION, DOCUMENT_INVOICE})


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class QuotationStatus(Enum):
    """Quotation lifecycle status."""
    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    EXPIRED = "Expired"


class InvoiceStatus(Enum):
    """Invoice lifecycle status."""
    DRAFT = "Draft"
    SENT = "Sent"
    PARTIALLY_PAID = "PartiallyPaid"
    PAID = "Paid"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


# ══════════════════════════════════════════════════════════════
# SERIALIZATION HELPERS
# ══════════════════════════════════════════════════════════════

def _dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_dt(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _dec(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def _items_from_dicts(data) -> Tuple[ProcessedLineItem, ...]:
    return tuple(ProcessedLineItem.from_dict(row) for row in data or ())


def _warnings_from_dicts(data) -> Tuple[CalculationWarning, ...]:
    return tuple(
        CalculationWarning(
            code=row["code"],
            message=row["message"],
            item_index=row.get("item_index"),
        )
        for row in data or ()
    )


# ══════════════════════════════════════════════════════════════
# PAYMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Payment:
    """A payment received against an invoice."""
    amount: Decimal
    paid_at: datetime
    method: str
    reference: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "amount": str(self.amount),
            "paid_at": self.paid_at.isoformat(),
            "method": self.method,
            "reference": self.reference,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Payment:
        return cls(
            amount=to_decimal(data["amount"], ZERO),
            paid_at=_parse_dt(data["paid_at"]),
            method=data["method"],
            reference=data.get("reference"),
        )


# ══════════════════════════════════════════════════════════════
# QUOTATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Quotation:
    """
    A priced offer to a customer.

    Editable while Draft or Sent and not converted. Immutable once
    Accepted, converted, Rejected or Expired.
    """
    quotation_id: str
    business_id: uuid.UUID
    customer_id: str
    created_by: str
    created_at: datetime
    items: Tuple[ProcessedLineItem, ...] = ()
    summary: FinancialSummary = FinancialSummary()
    discount: Decimal = ZERO
    discount_type: str = DISCOUNT_FLAT
    default_tax_rate: Optional[Decimal] = None
    vat_rate: Decimal = ZERO
    wht_rate: Decimal = ZERO
    currency: str = "USD"
    status: QuotationStatus = QuotationStatus.DRAFT
    converted_to_invoice: bool = False
    invoice_id: Optional[str] = None
    valid_until: Optional[datetime] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    updated_at: Optional[datetime] = None
    sent_date: Optional[datetime] = None
    accepted_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None
    expired_date: Optional[datetime] = None
    calculation_warnings: Tuple[CalculationWarning, ...] = ()

    @property
    def document_number(self) -> str:
        return self.quotation_id

    @property
    def line_items(self) -> Tuple[LineItem, ...]:
        return tuple(line.item for line in self.items)

    @property
    def is_locked(self) -> bool:
        return self.converted_to_invoice or self.status in {
            QuotationStatus.ACCEPTED,
            QuotationStatus.REJECTED,
            QuotationStatus.EXPIRED,
        }

    def to_dict(self) -> dict:
        return {
            "quotation_id": self.quotation_id,
            "business_id": str(self.business_id),
            "customer_id": self.customer_id,
            "created_by": self.created_by,
            "created_at": _dt(self.created_at),
            "items": [line.to_dict() for line in self.items],
            "summary": self.summary.to_dict(),
            "discount": str(self.discount),
            "discount_type": self.discount_type,
            "default_tax_rate": _dec(self.default_tax_rate),
            "vat_rate": str(self.vat_rate),
            "wht_rate": str(self.wht_rate),
            "currency": self.currency,
            "status": self.status.value,
            "converted_to_invoice": self.converted_to_invoice,
            "invoice_id": self.invoice_id,
            "valid_until": _dt(self.valid_until),
            "notes": self.notes,
            "terms": self.terms,
            "updated_at": _dt(self.updated_at),
            "sent_date": _dt(self.sent_date),
            "accepted_date": _dt(self.accepted_date),
            "rejected_date": _dt(self.rejected_date),
            "expired_date": _dt(self.expired_date),
            "calculation_warnings": [w.to_dict() for w in self.calculation_warnings],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Quotation:
        return cls(
            quotation_id=data["quotation_id"],
            business_id=uuid.UUID(str(data["business_id"])),
            customer_id=data["customer_id"],
            created_by=data["created_by"],
            created_at=_parse_dt(data["created_at"]),
            items=_items_from_dicts(data.get("items")),
            summary=FinancialSummary.from_dict(data.get("summary") or {}),
            discount=to_decimal(data.get("discount"), ZERO),
            discount_type=data.get("discount_type", DISCOUNT_FLAT),
            default_tax_rate=to_decimal(data.get("default_tax_rate")),
            vat_rate=to_decimal(data.get("vat_rate"), ZERO),
            wht_rate=to_decimal(data.get("wht_rate"), ZERO),
            currency=data.get("currency", "USD"),
            status=QuotationStatus(data.get("status", QuotationStatus.DRAFT.value)),
            converted_to_invoice=bool(data.get("converted_to_invoice", False)),
            invoice_id=data.get("invoice_id"),
            valid_until=_parse_dt(data.get("valid_until")),
            notes=data.get("notes"),
            terms=data.get("terms"),
            updated_at=_parse_dt(data.get("updated_at")),
            sent_date=_parse_dt(data.get("sent_date")),
            accepted_date=_parse_dt(data.get("accepted_date")),
            rejected_date=_parse_dt(data.get("rejected_date")),
            expired_date=_parse_dt(data.get("expired_date")),
            calculation_warnings=_warnings_from_dicts(data.get("calculation_warnings")),
        )


# ══════════════════════════════════════════════════════════════
# INVOICE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Invoice:
    """
    A bill issued to a customer.

    quotation_id is a weak back-reference: lookup only, the invoice does
    not own the quotation. Paid is terminal for edits and deletion.
    """
    invoice_id: str
    business_id: uuid.UUID
    customer_id: str
    created_by: str
    created_at: datetime
    items: Tuple[ProcessedLineItem, ...] = ()
    summary: FinancialSummary = FinancialSummary()
    discount: Decimal = ZERO
    discount_type: str = DISCOUNT_FLAT
    default_tax_rate: Optional[Decimal] = None
    vat_rate: Decimal = ZERO
    wht_rate: Decimal = ZERO
    currency: str = "USD"
    status: InvoiceStatus = InvoiceStatus.DRAFT
    quotation_id: Optional[str] = None
    issued_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    payments: Tuple[Payment, ...] = ()
    amount_paid: Decimal = ZERO
    balance_due: Decimal = ZERO
    po_number: Optional[str] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    updated_at: Optional[datetime] = None
    sent_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None
    overdue_date: Optional[datetime] = None
    cancelled_date: Optional[datetime] = None
    calculation_warnings: Tuple[CalculationWarning, ...] = ()

    @property
    def document_number(self) -> str:
        return self.invoice_id

    @property
    def line_items(self) -> Tuple[LineItem, ...]:
        return tuple(line.item for line in self.items)

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    def to_dict(self) -> dict:
        return {
            "invoice_id": self.invoice_id,
            "business_id": str(self.business_id),
            "customer_id": self.customer_id,
            "created_by": self.created_by,
            "created_at": _dt(self.created_at),
            "items": [line.to_dict() for line in self.items],
            "summary": self.summary.to_dict(),
            "discount": str(self.discount),
            "discount_type": self.discount_type,
            "default_tax_rate": _dec(self.default_tax_rate),
            "vat_rate": str(self.vat_rate),
            "wht_rate": str(self.wht_rate),
            "currency": self.currency,
            "status": self.status.value,
            "quotation_id": self.quotation_id,
            "issued_date": _dt(self.issued_date),
            "due_date": _dt(self.due_date),
            "payments": [p.to_dict() for p in self.payments],
            "amount_paid": str(self.amount_paid),
            "balance_due": str(self.balance_due),
            "po_number": self.po_number,
            "notes": self.notes,
            "terms": self.terms,
            "updated_at": _dt(self.updated_at),
            "sent_date": _dt(self.sent_date),
            "paid_date": _dt(self.paid_date),
            "overdue_date": _dt(self.overdue_date),
            "cancelled_date": _dt(self.cancelled_date),
            "calculation_warnings": [w.to_dict() for w in self.calculation_warnings],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Invoice:
        return cls(
            invoice_id=data["invoice_id"],
            business_id=uuid.UUID(str(data["business_id"])),
            customer_id=data["customer_id"],
            created_by=data["created_by"],
            created_at=_parse_dt(data["created_at"]),
            items=_items_from_dicts(data.get("items")),
            summary=FinancialSummary.from_dict(data.get("summary") or {}),
            discount=to_decimal(data.get("discount"), ZERO),
            discount_type=data.get("discount_type", DISCOUNT_FLAT),
            default_tax_rate=to_decimal(data.get("default_tax_rate")),
            vat_rate=to_decimal(data.get("vat_rate"), ZERO),
            wht_rate=to_decimal(data.get("wht_rate"), ZERO),
            currency=data.get("currency", "USD"),
            status=InvoiceStatus(data.get("status", InvoiceStatus.DRAFT.value)),
            quotation_id=data.get("quotation_id"),
            issued_date=_parse_dt(data.get("issued_date")),
            due_date=_parse_dt(data.get("due_date")),
            payments=tuple(Payment.from_dict(p) for p in data.get("payments") or ()),
            amount_paid=to_decimal(data.get("amount_paid"), ZERO),
            balance_due=to_decimal(data.get("balance_due"), ZERO),
            po_number=data.get("po_number"),
            notes=data.get("notes"),
            terms=data.get("terms"),
            updated_at=_parse_dt(data.get("updated_at")),
            sent_date=_parse_dt(data.get("sent_date")),
            paid_date=_parse_dt(data.get("paid_date")),
            overdue_date=_parse_dt(data.get("overdue_date")),
            cancelled_date=_parse_dt(data.get("cancelled_date")),
            calculation_warnings=_warnings_from_dicts(data.get("calculation_warnings")),
        )
