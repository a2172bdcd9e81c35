"""DocFlow Invoicing Engine tests — lifecycle, payments, quotation links."""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.config.rules import InMemoryConfigStore
from core.document_store import InMemoryDocumentStore
from core.documents import (
    ConflictError,
    InvalidStateError,
    InvoiceStatus,
    NotFoundError,
    QuotationStatus,
    ValidationError,
)
from core.documents.numbering import InMemorySequenceCounter, NumberingService
from core.hooks import HookRegistry
from core.parties import InMemoryPartyDirectory
from core.time.clock import FixedClock

BIZ = uuid.uuid4()
CUSTOMER = "cust-001"
NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)

ITEMS = [
    {"description": "Consulting", "quantity": 2, "unit_price": 100},
    {"description": "Travel", "quantity": 1, "unit_price": 50},
]


class Wiring:
    def __init__(self, config=None):
        from engines.invoicing.services import InvoiceService
        from engines.quotation.services import QuotationService

        self.parties = InMemoryPartyDirectory()
        self.parties.add_customer(BIZ, CUSTOMER)
        self.config = config or InMemoryConfigStore()
        self.store = InMemoryDocumentStore()
        self.clock = FixedClock(NOW)
        self.hooks = HookRegistry()
        self.fired = []
        from engines.invoicing.events import INVOICE_HOOKS

        for name in INVOICE_HOOKS:
            self.hooks.register(name, self.fired.append, "test")

        shared = dict(
            store=self.store,
            parties=self.parties,
            numbering=NumberingService(InMemorySequenceCounter(), self.config),
            config_store=self.config,
            hooks=self.hooks,
            clock=self.clock,
        )
        self.invoices = InvoiceService(**shared)
        self.quotations = QuotationService(**shared)

    def create(self, **overrides):
        data = {
            "customer_id": CUSTOMER,
            "items": ITEMS,
            "discount": 10,
            "vat_rate": 10,
            "wht_rate": 5,
        }
        data.update(overrides)
        return self.invoices.create(data, BIZ, "user-1")

    def create_sent(self, **overrides):
        invoice = self.create(**overrides)
        return self.invoices.update_status(invoice.invoice_id, "Sent", BIZ)

    def hook_names(self):
        return [n.hook_name for n in self.fired]


class TestInvoiceRequests:
    def test_withholding_override_allowed(self):
        from engines.invoicing.commands import InvoiceCreateRequest

        request = InvoiceCreateRequest(
            customer_id=CUSTOMER,
            items=[{"quantity": 1, "unit_price": 100, "subject_to_withholding": False}],
        )
        assert request.items[0].subject_to_withholding is False

    def test_due_before_issue_rejected(self):
        from engines.invoicing.commands import InvoiceCreateRequest

        with pytest.raises(ValidationError, match="due_date"):
            InvoiceCreateRequest(
                customer_id=CUSTOMER,
                issued_date=NOW,
                due_date=NOW - timedelta(days=1),
            )

    def test_naive_datetime_rejected(self):
        from engines.invoicing.commands import InvoiceCreateRequest

        with pytest.raises(ValidationError, match="timezone-aware"):
            InvoiceCreateRequest(customer_id=CUSTOMER, issued_date=datetime(2026, 3, 1))

    @pytest.mark.parametrize("amount", [0, -5, "abc"])
    def test_payment_amount_must_be_positive(self, amount):
        from engines.invoicing.commands import PaymentRequest

        with pytest.raises(ValidationError) as exc_info:
            PaymentRequest(amount=amount)
        assert exc_info.value.code == "INVALID_PAYMENT"


class TestInvoiceCreate:
    def test_create_defaults(self):
        w = Wiring()
        invoice = w.create()

        assert invoice.invoice_id == "INV-00001"
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.issued_date == NOW
        assert invoice.due_date == NOW + timedelta(days=30)
        assert invoice.summary.net_receivable == Decimal("252.00")
        assert invoice.balance_due == Decimal("252.00")
        assert invoice.amount_paid == Decimal("0")
        assert w.hook_names() == ["invoicing.document.created"]

    def test_due_days_from_rules(self):
        config = InMemoryConfigStore()
        config.override(BIZ, invoice_due_days=14)
        invoice = Wiring(config).create()
        assert invoice.due_date == NOW + timedelta(days=14)

    def test_explicit_dates_kept(self):
        issued = NOW - timedelta(days=3)
        invoice = Wiring().create(issued_date=issued)
        assert invoice.issued_date == issued
        assert invoice.due_date == issued + timedelta(days=30)

    def test_exempt_line_reduces_withholding(self):
        invoice = Wiring().create(
            items=[
                {"quantity": 1, "unit_price": 100},
                {"quantity": 1, "unit_price": 100, "subject_to_withholding": False},
            ],
            discount=0,
            vat_rate=0,
        )
        assert invoice.summary.withholding_tax_amount == Decimal("5.00")
        assert invoice.summary.net_receivable == Decimal("195.00")

    def test_unknown_customer(self):
        with pytest.raises(NotFoundError):
            Wiring().create(customer_id="nobody")


class TestInvoiceFromQuotationLink:
    def test_link_marks_quotation_converted(self):
        w = Wiring()
        quotation = w.quotations.create({"customer_id": CUSTOMER, "items": ITEMS}, BIZ, "user-1")
        invoice = w.create(quotation_id=quotation.quotation_id)

        stored = w.quotations.get(quotation.quotation_id, BIZ)
        assert invoice.quotation_id == "QUOT-001"
        assert stored.converted_to_invoice is True
        assert stored.invoice_id == invoice.invoice_id
        assert stored.status == QuotationStatus.ACCEPTED
        assert stored.accepted_date == NOW

    def test_second_link_conflicts(self):
        w = Wiring()
        quotation = w.quotations.create({"customer_id": CUSTOMER, "items": ITEMS}, BIZ, "user-1")
        w.create(quotation_id=quotation.quotation_id)

        with pytest.raises(ConflictError):
            w.create(quotation_id=quotation.quotation_id)
        assert len(w.store.list_invoices(BIZ)) == 1

    def test_missing_quotation_writes_nothing(self):
        w = Wiring()
        with pytest.raises(NotFoundError):
            w.create(quotation_id="QUOT-404")
        assert w.store.list_invoices(BIZ) == ()
        assert w.hook_names() == []


class TestInvoiceUpdate:
    def test_recompute_keeps_payments(self):
        w = Wiring()
        w.create_sent()
        w.invoices.record_payment("INV-00001", {"amount": "100"}, BIZ)
        updated = w.invoices.update("INV-00001", {"wht_rate": 0}, BIZ)

        assert updated.summary.net_receivable == Decimal("264.00")
        assert updated.amount_paid == Decimal("100.00")
        assert updated.balance_due == Decimal("164.00")

    def test_paid_invoice_is_frozen(self):
        w = Wiring()
        w.create_sent()
        w.invoices.update_status("INV-00001", "Paid", BIZ)
        with pytest.raises(InvalidStateError) as exc_info:
            w.invoices.update("INV-00001", {"notes": "x"}, BIZ)
        assert exc_info.value.code == "INVOICE_PAID"

    def test_discount_type_patch_checks_stored_discount(self):
        w = Wiring()
        w.create(discount=150)
        with pytest.raises(ValidationError, match="percentage discount"):
            w.invoices.update("INV-00001", {"discount_type": "percentage"}, BIZ)
        stored = w.invoices.get("INV-00001", BIZ)
        assert stored.discount_type == "flat"
        assert stored.summary.discount_amount == Decimal("150.00")

    def test_discount_patch_checks_stored_percentage_type(self):
        w = Wiring()
        w.create(discount_type="percentage")
        with pytest.raises(ValidationError, match="percentage discount"):
            w.invoices.update("INV-00001", {"discount": 150}, BIZ)

    def test_edit_below_amount_paid_refused(self):
        w = Wiring()
        w.create_sent()
        w.invoices.record_payment("INV-00001", {"amount": 200}, BIZ)
        with pytest.raises(InvalidStateError) as exc_info:
            w.invoices.update(
                "INV-00001",
                {"items": [{"description": "Consulting", "quantity": 1, "unit_price": 100}]},
                BIZ,
            )
        assert exc_info.value.code == "PAYMENTS_EXCEED_TOTAL"
        stored = w.invoices.get("INV-00001", BIZ)
        assert stored.balance_due == Decimal("52.00")
        assert w.invoices.record_payment("INV-00001", {"amount": 52}, BIZ).status == InvoiceStatus.PAID

    def test_edit_down_to_amount_paid_settles_invoice(self):
        w = Wiring()
        w.create_sent()
        w.invoices.record_payment("INV-00001", {"amount": 100}, BIZ)
        w.clock.advance(days=1)
        updated = w.invoices.update(
            "INV-00001",
            {
                "items": [{"description": "Consulting", "quantity": 1, "unit_price": 100}],
                "discount": 0,
                "vat_rate": 0,
                "wht_rate": 0,
            },
            BIZ,
        )
        assert updated.summary.net_receivable == Decimal("100.00")
        assert updated.balance_due == Decimal("0.00")
        assert updated.status == InvoiceStatus.PAID
        assert updated.paid_date == NOW + timedelta(days=1)
        assert w.hook_names()[-2:] == ["invoicing.document.updated", "invoicing.document.paid"]

    def test_po_number_patch(self):
        w = Wiring()
        w.create()
        assert w.invoices.update("INV-00001", {"po_number": "PO-7"}, BIZ).po_number == "PO-7"


class TestInvoiceStatus:
    def test_mark_paid_settles_balance(self):
        w = Wiring()
        w.create_sent()
        paid = w.invoices.update_status("INV-00001", InvoiceStatus.PAID, BIZ)

        assert paid.paid_date == NOW
        assert paid.balance_due == Decimal("0")
        assert paid.amount_paid == paid.summary.net_receivable
        assert w.hook_names()[-2:] == [
            "invoicing.document.status_changed",
            "invoicing.document.paid",
        ]

    def test_paid_is_terminal(self):
        w = Wiring()
        w.create_sent()
        w.invoices.update_status("INV-00001", "Paid", BIZ)
        with pytest.raises(InvalidStateError):
            w.invoices.update_status("INV-00001", "Overdue", BIZ)

    def test_draft_cannot_be_paid_directly(self):
        w = Wiring()
        w.create()
        with pytest.raises(InvalidStateError):
            w.invoices.update_status("INV-00001", "Paid", BIZ)

    def test_overdue_and_cancelled_stamps(self):
        w = Wiring()
        w.create_sent()
        w.clock.advance(days=31)
        overdue = w.invoices.update_status("INV-00001", "Overdue", BIZ)
        cancelled = w.invoices.update_status("INV-00001", "Cancelled", BIZ)
        assert overdue.overdue_date == NOW + timedelta(days=31)
        assert cancelled.cancelled_date == NOW + timedelta(days=31)


class TestPayments:
    def test_partial_then_full(self):
        w = Wiring()
        w.create_sent()
        partial = w.invoices.record_payment(
            "INV-00001", {"amount": 100, "method": "mpesa", "reference": "QK12"}, BIZ,
        )
        assert partial.status == InvoiceStatus.PARTIALLY_PAID
        assert partial.balance_due == Decimal("152.00")
        assert partial.payments[0].method == "mpesa"
        assert partial.payments[0].paid_at == NOW

        paid = w.invoices.record_payment("INV-00001", {"amount": "152.00"}, BIZ)
        assert paid.status == InvoiceStatus.PAID
        assert paid.balance_due == Decimal("0.00")
        assert paid.amount_paid == Decimal("252.00")
        assert paid.paid_date == NOW
        assert len(paid.payments) == 2
        assert w.hook_names()[-2:] == ["invoicing.payment.recorded", "invoicing.document.paid"]

    def test_overpayment_rejected(self):
        w = Wiring()
        w.create_sent()
        with pytest.raises(ValidationError) as exc_info:
            w.invoices.record_payment("INV-00001", {"amount": "252.01"}, BIZ)
        assert exc_info.value.code == "INVALID_PAYMENT"
        assert w.invoices.get("INV-00001", BIZ).amount_paid == Decimal("0")

    def test_draft_not_payable(self):
        w = Wiring()
        w.create()
        with pytest.raises(InvalidStateError) as exc_info:
            w.invoices.record_payment("INV-00001", {"amount": 10}, BIZ)
        assert exc_info.value.code == "INVOICE_NOT_PAYABLE"

    def test_overdue_invoice_accepts_payment(self):
        w = Wiring()
        w.create_sent()
        w.invoices.update_status("INV-00001", "Overdue", BIZ)
        assert w.invoices.record_payment("INV-00001", {"amount": 1}, BIZ).status == InvoiceStatus.PARTIALLY_PAID


class TestInvoiceRemoveAndQueries:
    def test_remove_draft(self):
        w = Wiring()
        w.create()
        w.invoices.remove("INV-00001", BIZ)
        with pytest.raises(NotFoundError):
            w.invoices.get("INV-00001", BIZ)

    def test_paid_cannot_be_removed(self):
        w = Wiring()
        w.create_sent()
        w.invoices.update_status("INV-00001", "Paid", BIZ)
        with pytest.raises(InvalidStateError):
            w.invoices.remove("INV-00001", BIZ)

    def test_remove_keeps_quotation_converted(self):
        w = Wiring()
        quotation = w.quotations.create({"customer_id": CUSTOMER, "items": ITEMS}, BIZ, "user-1")
        invoice = w.create(quotation_id=quotation.quotation_id)
        w.invoices.remove(invoice.invoice_id, BIZ)
        assert w.quotations.get(quotation.quotation_id, BIZ).converted_to_invoice is True

    def test_list_and_stats(self):
        w = Wiring()
        w.create()
        w.clock.advance(seconds=1)
        w.create_sent(po_number="PO-55")

        page, cursor = w.invoices.list(BIZ, status="Sent")
        assert [i.invoice_id for i in page] == ["INV-00002"]
        assert cursor is None
        assert len(w.invoices.list(BIZ, search="inv-0000")[0]) == 2

        stats = w.invoices.stats(BIZ)
        assert stats["total_count"] == 2
        assert stats["by_status"]["Sent"]["total"] == Decimal("264.00")
        assert stats["by_status"]["PartiallyPaid"]["count"] == 0
