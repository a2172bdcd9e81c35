"""DocFlow Invoicing Engine - policies."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.documents.models import Invoice, InvoiceStatus
from core.financials import FinancialSummary

INVOICE_TRANSITIONS = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset({
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.PARTIALLY_PAID: frozenset({
        InvoiceStatus.PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.OVERDUE: frozenset({
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}

PAYABLE_STATUSES = frozenset({
    InvoiceStatus.SENT,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.OVERDUE,
})


def invoice_must_exist_policy(
    invoice: Optional[Invoice], invoice_id: str,
) -> RejectionReason | None:
    if invoice is None:
        return RejectionReason(
            code=ReasonCode.INVOICE_NOT_FOUND,
            message=f"Invoice '{invoice_id}' not found.",
            policy_name="invoice_must_exist_policy",
        )
    return None


def invoice_must_not_be_paid_policy(invoice: Invoice) -> RejectionReason | None:
    if invoice.is_paid:
        return RejectionReason(
            code=ReasonCode.INVOICE_PAID,
            message=f"Invoice '{invoice.invoice_id}' is Paid and can no longer be changed.",
            policy_name="invoice_must_not_be_paid_policy",
        )
    return None


def invoice_transition_must_be_allowed_policy(
    invoice: Invoice,
    new_status: InvoiceStatus,
    *,
    enforce: bool = True,
) -> RejectionReason | None:
    if not enforce:
        return None
    if new_status not in INVOICE_TRANSITIONS[invoice.status]:
        return RejectionReason(
            code=ReasonCode.INVALID_STATUS_TRANSITION,
            message=(
                f"Invoice '{invoice.invoice_id}' cannot move from "
                f"{invoice.status.value} to {new_status.value}."
            ),
            policy_name="invoice_transition_must_be_allowed_policy",
        )
    return None


def invoice_must_accept_payments_policy(invoice: Invoice) -> RejectionReason | None:
    if invoice.status not in PAYABLE_STATUSES:
        return RejectionReason(
            code=ReasonCode.INVOICE_NOT_PAYABLE,
            message=(
                f"Invoice '{invoice.invoice_id}' is {invoice.status.value}; "
                f"payments are accepted only once it has been sent."
            ),
            policy_name="invoice_must_accept_payments_policy",
        )
    return None


def payment_must_not_exceed_balance_policy(
    invoice: Invoice, amount: Decimal,
) -> RejectionReason | None:
    if amount > invoice.balance_due:
        return RejectionReason(
            code=ReasonCode.INVALID_PAYMENT,
            message=(
                f"Payment {amount} exceeds the balance due {invoice.balance_due} "
                f"on invoice '{invoice.invoice_id}'."
            ),
            policy_name="payment_must_not_exceed_balance_policy",
        )
    return None


def invoice_total_must_cover_payments_policy(
    invoice: Invoice, summary: FinancialSummary,
) -> RejectionReason | None:
    if summary.net_receivable < invoice.amount_paid:
        return RejectionReason(
            code=ReasonCode.PAYMENTS_EXCEED_TOTAL,
            message=(
                f"Invoice '{invoice.invoice_id}' already has {invoice.amount_paid} paid; "
                f"net receivable {summary.net_receivable} would fall below it."
            ),
            policy_name="invoice_total_must_cover_payments_policy",
        )
    return None
