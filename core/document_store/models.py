"""
DocFlow Document Store — ORM Models
=====================================
Each row holds the full document snapshot (Quotation/Invoice.to_dict())
in `document`, plus the columns needed for scoping, locking and ordering.

RULES:
- (business_id, document number) is unique per table.
- Decimal amounts inside `document` are strings, never floats.
- DocumentSequence is the atomic per-business, per-doc-type counter.

This file contains NO business logic.
"""

import uuid

from django.db import models


class DocType(models.TextChoices):
    QUOTATION = "QUOTATION", "Quotation"
    INVOICE = "INVOICE", "Invoice"


class QuotationRecord(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    business_id = models.UUIDField(
        help_text="Business tenant boundary. Always required.",
    )

    quotation_id = models.CharField(
        max_length=64,
        help_text="Human-readable sequential number (e.g. QUOT-001).",
    )

    customer_id = models.CharField(max_length=255)

    status = models.CharField(max_length=20)

    converted_to_invoice = models.BooleanField(default=False)

    created_at = models.DateTimeField()

    document = models.JSONField(
        help_text="Quotation snapshot. Decimal values serialized as strings.",
    )

    class Meta:
        db_table = "docflow_quotations"
        ordering = ["created_at", "quotation_id"]
        constraints = [
            models.UniqueConstraint(
                fields=("business_id", "quotation_id"),
                name="uq_quot_biz_number",
            ),
        ]
        indexes = [
            models.Index(
                fields=["business_id", "created_at"],
                name="idx_quot_business_time",
            ),
            models.Index(
                fields=["business_id", "status"],
                name="idx_quot_business_status",
            ),
        ]

    def __str__(self):
        return f"{self.quotation_id} ({self.status})"


class InvoiceRecord(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    business_id = models.UUIDField(
        help_text="Business tenant boundary. Always required.",
    )

    invoice_id = models.CharField(
        max_length=64,
        help_text="Human-readable sequential number (e.g. INV-00001).",
    )

    customer_id = models.CharField(max_length=255)

    quotation_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        help_text="Weak back-reference to the source quotation number.",
    )

    status = models.CharField(max_length=20)

    created_at = models.DateTimeField()

    document = models.JSONField(
        help_text="Invoice snapshot. Decimal values serialized as strings.",
    )

    class Meta:
        db_table = "docflow_invoices"
        ordering = ["created_at", "invoice_id"]
        constraints = [
            models.UniqueConstraint(
                fields=("business_id", "invoice_id"),
                name="uq_inv_biz_number",
            ),
        ]
        indexes = [
            models.Index(
                fields=["business_id", "created_at"],
                name="idx_inv_business_time",
            ),
            models.Index(
                fields=["business_id", "status"],
                name="idx_inv_business_status",
            ),
            models.Index(
                fields=["business_id", "quotation_id"],
                name="idx_inv_business_quotation",
            ),
        ]

    def __str__(self):
        return f"{self.invoice_id} ({self.status})"


class DocumentSequence(models.Model):

    business_id = models.UUIDField()

    doc_type = models.CharField(max_length=20, choices=DocType.choices)

    last_value = models.PositiveIntegerField(
        default=0,
        help_text="Last number handed out. The next document gets last_value + 1.",
    )

    class Meta:
        db_table = "docflow_document_sequences"
        constraints = [
            models.UniqueConstraint(
                fields=("business_id", "doc_type"),
                name="uq_seq_biz_doc_type",
            ),
        ]

    def __str__(self):
        return f"{self.business_id}:{self.doc_type}={self.last_value}"
