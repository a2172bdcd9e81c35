"""
DocFlow Document Store — Django ORM Implementation
====================================================
Persists document snapshots in QuotationRecord / InvoiceRecord.

atomic() is transaction.atomic(). lock_* issues SELECT ... FOR UPDATE so
two conversions of the same quotation serialize on the row.
"""

from __future__ import annotations

import uuid
from typing import Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import F

from core.document_store.models import DocumentSequence, InvoiceRecord, QuotationRecord
from core.document_store.protocol import duplicate_number_error
from core.documents.models import Invoice, Quotation


class DjangoDocumentStore:

    def atomic(self):
        return transaction.atomic()

    def on_commit(self, callback) -> None:
        transaction.on_commit(callback)

    # ── Quotations ────────────────────────────────────────────

    @staticmethod
    def _quotation_fields(quotation: Quotation) -> dict:
        return {
            "customer_id": quotation.customer_id,
            "status": quotation.status.value,
            "converted_to_invoice": quotation.converted_to_invoice,
            "created_at": quotation.created_at,
            "document": quotation.to_dict(),
        }

    def get_quotation(self, business_id: uuid.UUID, quotation_id: str) -> Optional[Quotation]:
        row = QuotationRecord.objects.filter(
            business_id=business_id, quotation_id=quotation_id,
        ).first()
        return Quotation.from_dict(row.document) if row is not None else None

    def lock_quotation(self, business_id: uuid.UUID, quotation_id: str) -> Optional[Quotation]:
        row = (
            QuotationRecord.objects.select_for_update()
            .filter(business_id=business_id, quotation_id=quotation_id)
            .first()
        )
        return Quotation.from_dict(row.document) if row is not None else None

    def list_quotations(self, business_id: uuid.UUID) -> Tuple[Quotation, ...]:
        rows = QuotationRecord.objects.filter(business_id=business_id).order_by(
            "created_at", "quotation_id",
        )
        return tuple(Quotation.from_dict(row.document) for row in rows)

    def add_quotation(self, quotation: Quotation) -> None:
        try:
            with transaction.atomic():
                QuotationRecord.objects.create(
                    business_id=quotation.business_id,
                    quotation_id=quotation.quotation_id,
                    **self._quotation_fields(quotation),
                )
        except IntegrityError as exc:
            raise duplicate_number_error(quotation.quotation_id) from exc

    def save_quotation(self, quotation: Quotation) -> None:
        updated = QuotationRecord.objects.filter(
            business_id=quotation.business_id,
            quotation_id=quotation.quotation_id,
        ).update(**self._quotation_fields(quotation))
        if updated == 0:
            raise KeyError(f"Quotation {quotation.quotation_id} is not stored.")

    def delete_quotation(self, business_id: uuid.UUID, quotation_id: str) -> None:
        QuotationRecord.objects.filter(
            business_id=business_id, quotation_id=quotation_id,
        ).delete()

    # ── Invoices ──────────────────────────────────────────────

    @staticmethod
    def _invoice_fields(invoice: Invoice) -> dict:
        return {
            "customer_id": invoice.customer_id,
            "quotation_id": invoice.quotation_id,
            "status": invoice.status.value,
            "created_at": invoice.created_at,
            "document": invoice.to_dict(),
        }

    def get_invoice(self, business_id: uuid.UUID, invoice_id: str) -> Optional[Invoice]:
        row = InvoiceRecord.objects.filter(
            business_id=business_id, invoice_id=invoice_id,
        ).first()
        return Invoice.from_dict(row.document) if row is not None else None

    def lock_invoice(self, business_id: uuid.UUID, invoice_id: str) -> Optional[Invoice]:
        row = (
            InvoiceRecord.objects.select_for_update()
            .filter(business_id=business_id, invoice_id=invoice_id)
            .first()
        )
        return Invoice.from_dict(row.document) if row is not None else None

    def list_invoices(self, business_id: uuid.UUID) -> Tuple[Invoice, ...]:
        rows = InvoiceRecord.objects.filter(business_id=business_id).order_by(
            "created_at", "invoice_id",
        )
        return tuple(Invoice.from_dict(row.document) for row in rows)

    def add_invoice(self, invoice: Invoice) -> None:
        try:
            with transaction.atomic():
                InvoiceRecord.objects.create(
                    business_id=invoice.business_id,
                    invoice_id=invoice.invoice_id,
                    **self._invoice_fields(invoice),
                )
        except IntegrityError as exc:
            raise duplicate_number_error(invoice.invoice_id) from exc

    def save_invoice(self, invoice: Invoice) -> None:
        updated = InvoiceRecord.objects.filter(
            business_id=invoice.business_id,
            invoice_id=invoice.invoice_id,
        ).update(**self._invoice_fields(invoice))
        if updated == 0:
            raise KeyError(f"Invoice {invoice.invoice_id} is not stored.")

    def delete_invoice(self, business_id: uuid.UUID, invoice_id: str) -> None:
        InvoiceRecord.objects.filter(
            business_id=business_id, invoice_id=invoice_id,
        ).delete()


class DjangoSequenceCounter:
    """
    Row-locked counter in DocumentSequence.

    The increment runs as UPDATE ... SET last_value = last_value + 1 on a
    row held with SELECT ... FOR UPDATE, inside one transaction.
    """

    def next_value(self, business_id: uuid.UUID, doc_type: str) -> int:
        with transaction.atomic():
            row, _ = DocumentSequence.objects.select_for_update().get_or_create(
                business_id=business_id,
                doc_type=doc_type,
                defaults={"last_value": 0},
            )
            DocumentSequence.objects.filter(pk=row.pk).update(
                last_value=F("last_value") + 1,
            )
            row.refresh_from_db(fields=["last_value"])
            return row.last_value
