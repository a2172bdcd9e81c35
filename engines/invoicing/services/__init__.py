"""DocFlow Invoicing Engine - application service."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from functools import partial
from typing import Any, Optional, Tuple

from core.config.rules import ConfigStore, InMemoryConfigStore, rules_from_settings
from core.document_store import filter_documents, page_documents, status_stats
from core.document_store.protocol import DocumentStore
from core.documents.errors import raise_for_rejection
from core.documents.models import (
    DOCUMENT_INVOICE,
    Invoice,
    InvoiceStatus,
    Payment,
    QuotationStatus,
)
from core.documents.numbering import NumberingService
from core.documents.requests import (
    build_request,
    request_error,
    validate_discount,
    validate_text,
)
from core.financials import FinancialSummary, compute_financials
from core.hooks import HookRegistry, notify
from core.money import ZERO, round2
from core.parties import (
    PartyDirectory,
    business_must_exist_policy,
    customer_must_exist_policy,
)
from core.time.clock import Clock, add_days, get_default_clock
from engines.invoicing.commands import (
    InvoiceCreateRequest,
    InvoiceUpdateRequest,
    PaymentRequest,
    coerce_invoice_status,
)
from engines.invoicing.events import (
    INVOICE_CREATED,
    INVOICE_PAID,
    INVOICE_REMOVED,
    INVOICE_STATUS_CHANGED,
    INVOICE_UPDATED,
    PAYMENT_RECORDED,
    build_invoice_notification,
)
from engines.invoicing.policies import (
    invoice_must_accept_payments_policy,
    invoice_must_exist_policy,
    invoice_must_not_be_paid_policy,
    invoice_total_must_cover_payments_policy,
    invoice_transition_must_be_allowed_policy,
    payment_must_not_exceed_balance_policy,
)
from engines.quotation.policies import (
    quotation_must_exist_policy,
    quotation_must_not_be_converted_policy,
)

logger = logging.getLogger("docflow.invoicing")

STATUS_STAMPS = {
    InvoiceStatus.SENT: "sent_date",
    InvoiceStatus.PAID: "paid_date",
    InvoiceStatus.OVERDUE: "overdue_date",
    InvoiceStatus.CANCELLED: "cancelled_date",
}


def balance_due(summary: FinancialSummary, amount_paid: Decimal) -> Decimal:
    """What the customer still owes: net receivable less payments, never negative."""
    return round2(max(ZERO, summary.net_receivable - amount_paid))


class InvoiceService:
    """
    Create, edit, transition, pay and remove invoices.

    Creating an invoice from a quotation link marks that quotation
    converted in the same unit of work.
    """

    def __init__(
        self,
        *,
        store: DocumentStore,
        parties: PartyDirectory,
        numbering: NumberingService,
        config_store: Optional[ConfigStore] = None,
        hooks: Optional[HookRegistry] = None,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self._parties = parties
        self._numbering = numbering
        self._config_store = config_store or InMemoryConfigStore(rules_from_settings())
        self._hooks = hooks
        self._clock = clock or get_default_clock()

    # ── helpers ───────────────────────────────────────────────

    def _require_business(self, business_id: uuid.UUID) -> None:
        raise_for_rejection(business_must_exist_policy(business_id, self._parties))

    def _notify_after_commit(self, hook_name: str, invoice: Invoice, *,
                             actor_id: Optional[str], **extra) -> None:
        notification = build_invoice_notification(
            hook_name,
            invoice,
            actor_id=actor_id,
            occurred_at=self._clock.now_utc(),
            **extra,
        )
        self._store.on_commit(partial(notify, notification, self._hooks))

    def _load_for_write(self, business_id: uuid.UUID, invoice_id: str) -> Invoice:
        invoice = self._store.lock_invoice(business_id, invoice_id)
        raise_for_rejection(invoice_must_exist_policy(invoice, invoice_id))
        return invoice

    # ── commands ──────────────────────────────────────────────

    def create(self, request: Any, business_id: uuid.UUID, actor_id: str) -> Invoice:
        if isinstance(request, dict):
            request = build_request(InvoiceCreateRequest, request)
        validate_text("actor_id", actor_id, required=True)
        self._require_business(business_id)
        raise_for_rejection(
            customer_must_exist_policy(request.customer_id, business_id, self._parties)
        )

        rules = self._config_store.get_document_rules(business_id)
        result = compute_financials(
            request.items,
            discount=request.discount,
            discount_type=request.discount_type,
            default_tax_rate=request.default_tax_rate,
            vat_rate=request.vat_rate,
            wht_rate=request.wht_rate,
        )
        now = self._clock.now_utc()
        issued_date = request.issued_date or now

        with self._store.atomic():
            quotation = None
            if request.quotation_id is not None:
                quotation = self._store.lock_quotation(business_id, request.quotation_id)
                raise_for_rejection(
                    quotation_must_exist_policy(quotation, request.quotation_id)
                )
                raise_for_rejection(quotation_must_not_be_converted_policy(quotation))

            invoice = Invoice(
                invoice_id=self._numbering.next_id(business_id, DOCUMENT_INVOICE),
                business_id=business_id,
                customer_id=request.customer_id,
                created_by=actor_id,
                created_at=now,
                items=result.items,
                summary=result.summary,
                calculation_warnings=result.warnings,
                discount=request.discount,
                discount_type=request.discount_type,
                default_tax_rate=request.default_tax_rate,
                vat_rate=request.vat_rate,
                wht_rate=request.wht_rate,
                currency=request.currency or rules.currency,
                quotation_id=request.quotation_id,
                issued_date=issued_date,
                due_date=request.due_date or add_days(issued_date, rules.invoice_due_days),
                balance_due=balance_due(result.summary, ZERO),
                po_number=request.po_number,
                notes=request.notes,
                terms=request.terms,
                updated_at=now,
            )
            self._store.add_invoice(invoice)

            if quotation is not None:
                self._store.save_quotation(
                    replace(
                        quotation,
                        converted_to_invoice=True,
                        invoice_id=invoice.invoice_id,
                        status=QuotationStatus.ACCEPTED,
                        accepted_date=quotation.accepted_date or now,
                        updated_at=now,
                    )
                )
            self._notify_after_commit(INVOICE_CREATED, invoice, actor_id=actor_id)

        logger.info(
            f"Invoice {invoice.invoice_id} created for customer {invoice.customer_id} "
            f"(business {business_id}, net_receivable={invoice.summary.net_receivable}"
            f"{', from ' + request.quotation_id if request.quotation_id else ''})"
        )
        return invoice

    def update(self, invoice_id: str, patch: Any, business_id: uuid.UUID,
               *, actor_id: Optional[str] = None) -> Invoice:
        if isinstance(patch, dict):
            patch = build_request(InvoiceUpdateRequest, patch)
        self._require_business(business_id)
        if patch.customer_id is not None:
            raise_for_rejection(
                customer_must_exist_policy(patch.customer_id, business_id, self._parties)
            )

        with self._store.atomic():
            invoice = self._load_for_write(business_id, invoice_id)
            raise_for_rejection(invoice_must_not_be_paid_policy(invoice))

            now = self._clock.now_utc()
            changes = {
                name: getattr(patch, name)
                for name in ("customer_id", "due_date", "po_number", "notes", "terms")
                if getattr(patch, name) is not None
            }
            settled = False
            if patch.changes_financials:
                merged = {
                    name: getattr(patch, name) if getattr(patch, name) is not None
                    else getattr(invoice, name)
                    for name in (
                        "discount", "discount_type", "default_tax_rate",
                        "vat_rate", "wht_rate",
                    )
                }
                # Percentage cap is checked against the merged discount_type.
                merged["discount"] = validate_discount(merged["discount"], merged["discount_type"])
                items = patch.items if patch.items is not None else invoice.line_items
                result = compute_financials(items, **merged)
                raise_for_rejection(
                    invoice_total_must_cover_payments_policy(invoice, result.summary)
                )
                remaining = balance_due(result.summary, invoice.amount_paid)
                changes.update(merged)
                changes.update({
                    "items": result.items,
                    "summary": result.summary,
                    "calculation_warnings": result.warnings,
                    "balance_due": remaining,
                })
                if invoice.amount_paid > ZERO and remaining == ZERO:
                    settled = True
                    changes["status"] = InvoiceStatus.PAID
                    changes["paid_date"] = now

            updated = replace(invoice, updated_at=now, **changes)
            self._store.save_invoice(updated)
            self._notify_after_commit(INVOICE_UPDATED, updated, actor_id=actor_id)
            if settled:
                self._notify_after_commit(INVOICE_PAID, updated, actor_id=actor_id)

        logger.info(
            f"Invoice {invoice_id} updated (business {business_id}, "
            f"recalculated={patch.changes_financials})"
        )
        return updated

    def update_status(self, invoice_id: str, status: Any, business_id: uuid.UUID,
                      *, actor_id: Optional[str] = None) -> Invoice:
        new_status = coerce_invoice_status(status)
        self._require_business(business_id)
        rules = self._config_store.get_document_rules(business_id)

        with self._store.atomic():
            invoice = self._load_for_write(business_id, invoice_id)
            raise_for_rejection(
                invoice_transition_must_be_allowed_policy(
                    invoice,
                    new_status,
                    enforce=rules.enforce_status_transitions,
                )
            )
            now = self._clock.now_utc()
            changes = {"status": new_status, "updated_at": now}
            stamp = STATUS_STAMPS.get(new_status)
            if stamp is not None:
                changes[stamp] = now
            if new_status == InvoiceStatus.PAID:
                changes["amount_paid"] = invoice.summary.net_receivable
                changes["balance_due"] = ZERO

            updated = replace(invoice, **changes)
            self._store.save_invoice(updated)
            self._notify_after_commit(
                INVOICE_STATUS_CHANGED,
                updated,
                actor_id=actor_id,
                previous_status=invoice.status.value,
            )
            if new_status == InvoiceStatus.PAID:
                self._notify_after_commit(INVOICE_PAID, updated, actor_id=actor_id)

        logger.info(
            f"Invoice {invoice_id} status {invoice.status.value} → "
            f"{new_status.value} (business {business_id})"
        )
        return updated

    def record_payment(self, invoice_id: str, request: Any, business_id: uuid.UUID,
                       *, actor_id: Optional[str] = None) -> Invoice:
        if isinstance(request, dict):
            request = build_request(PaymentRequest, request)
        self._require_business(business_id)

        with self._store.atomic():
            invoice = self._load_for_write(business_id, invoice_id)
            raise_for_rejection(invoice_must_accept_payments_policy(invoice))
            raise_for_rejection(payment_must_not_exceed_balance_policy(invoice, request.amount))

            now = self._clock.now_utc()
            payment = Payment(
                amount=round2(request.amount),
                paid_at=request.paid_at or now,
                method=request.method,
                reference=request.reference,
            )
            amount_paid = round2(invoice.amount_paid + payment.amount)
            remaining = balance_due(invoice.summary, amount_paid)
            fully_paid = remaining == ZERO

            changes = {
                "payments": invoice.payments + (payment,),
                "amount_paid": amount_paid,
                "balance_due": remaining,
                "status": InvoiceStatus.PAID if fully_paid else InvoiceStatus.PARTIALLY_PAID,
                "updated_at": now,
            }
            if fully_paid:
                changes["paid_date"] = now

            updated = replace(invoice, **changes)
            self._store.save_invoice(updated)
            self._notify_after_commit(
                PAYMENT_RECORDED, updated, actor_id=actor_id, payment=payment.to_dict(),
            )
            if fully_paid:
                self._notify_after_commit(INVOICE_PAID, updated, actor_id=actor_id)

        logger.info(
            f"Payment {payment.amount} recorded on invoice {invoice_id} "
            f"(business {business_id}, balance_due={remaining})"
        )
        return updated

    def remove(self, invoice_id: str, business_id: uuid.UUID,
               *, actor_id: Optional[str] = None) -> None:
        self._require_business(business_id)
        with self._store.atomic():
            invoice = self._load_for_write(business_id, invoice_id)
            raise_for_rejection(invoice_must_not_be_paid_policy(invoice))
            self._store.delete_invoice(business_id, invoice_id)
            self._notify_after_commit(INVOICE_REMOVED, invoice, actor_id=actor_id)

        logger.info(f"Invoice {invoice_id} removed (business {business_id})")

    # ── queries ───────────────────────────────────────────────

    def get(self, invoice_id: str, business_id: uuid.UUID) -> Invoice:
        self._require_business(business_id)
        invoice = self._store.get_invoice(business_id, invoice_id)
        raise_for_rejection(invoice_must_exist_policy(invoice, invoice_id))
        return invoice

    def list(
        self,
        business_id: uuid.UUID,
        *,
        search: Optional[str] = None,
        status: Any = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Tuple[Tuple[Invoice, ...], Optional[str]]:
        """Return (page, next_cursor), oldest first."""
        self._require_business(business_id)
        wanted = coerce_invoice_status(status) if status is not None else None
        records = filter_documents(
            self._store.list_invoices(business_id), search=search, status=wanted,
        )
        try:
            return page_documents(records, limit=limit, cursor=cursor)
        except ValueError as exc:
            raise request_error(str(exc)) from exc

    def stats(self, business_id: uuid.UUID) -> dict:
        self._require_business(business_id)
        return status_stats(self._store.list_invoices(business_id), InvoiceStatus)
