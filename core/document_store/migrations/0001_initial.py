import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="QuotationRecord",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "business_id",
                    models.UUIDField(help_text="Business tenant boundary. Always required."),
                ),
                (
                    "quotation_id",
                    models.CharField(
                        help_text="Human-readable sequential number (e.g. QUOT-001).",
                        max_length=64,
                    ),
                ),
                ("customer_id", models.CharField(max_length=255)),
                ("status", models.CharField(max_length=20)),
                ("converted_to_invoice", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField()),
                (
                    "document",
                    models.JSONField(
                        help_text="Quotation snapshot. Decimal values serialized as strings.",
                    ),
                ),
            ],
            options={
                "db_table": "docflow_quotations",
                "ordering": ["created_at", "quotation_id"],
                "indexes": [
                    models.Index(
                        fields=["business_id", "created_at"],
                        name="idx_quot_business_time",
                    ),
                    models.Index(
                        fields=["business_id", "status"],
                        name="idx_quot_business_status",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("business_id", "quotation_id"),
                        name="uq_quot_biz_number",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceRecord",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "business_id",
                    models.UUIDField(help_text="Business tenant boundary. Always required."),
                ),
                (
                    "invoice_id",
                    models.CharField(
                        help_text="Human-readable sequential number (e.g. INV-00001).",
                        max_length=64,
                    ),
                ),
                ("customer_id", models.CharField(max_length=255)),
                (
                    "quotation_id",
                    models.CharField(
                        blank=True,
                        help_text="Weak back-reference to the source quotation number.",
                        max_length=64,
                        null=True,
                    ),
                ),
                ("status", models.CharField(max_length=20)),
                ("created_at", models.DateTimeField()),
                (
                    "document",
                    models.JSONField(
                        help_text="Invoice snapshot. Decimal values serialized as strings.",
                    ),
                ),
            ],
            options={
                "db_table": "docflow_invoices",
                "ordering": ["created_at", "invoice_id"],
                "indexes": [
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
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("business_id", "invoice_id"),
                        name="uq_inv_biz_number",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DocumentSequence",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("business_id", models.UUIDField()),
                (
                    "doc_type",
                    models.CharField(
                        choices=[("QUOTATION", "Quotation"), ("INVOICE", "Invoice")],
                        max_length=20,
                    ),
                ),
                (
                    "last_value",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Last number handed out. The next document gets last_value + 1.",
                    ),
                ),
            ],
            options={
                "db_table": "docflow_document_sequences",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("business_id", "doc_type"),
                        name="uq_seq_biz_doc_type",
                    ),
                ],
            },
        ),
    ]
