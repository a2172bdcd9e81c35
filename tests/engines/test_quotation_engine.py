"""DocFlow Quotation Engine tests — requests, lifecycle, listing."""

import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.config.rules import InMemoryConfigStore
from core.document_store import InMemoryDocumentStore
from core.documents import (
    InvalidStateError,
    NotFoundError,
    QuotationStatus,
    ValidationError,
)
from core.documents.numbering import InMemorySequenceCounter, NumberingService
from core.hooks import HookRegistry
from core.parties import InMemoryPartyDirectory
from core.time.clock import FixedClock, get_default_clock, set_default_clock

BIZ = uuid.uuid4()
CUSTOMER = "cust-001"
NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)

ITEMS = [
    {"description": "Desk", "quantity": 2, "unit_price": 100, "unit_cost": 60},
    {"description": "Lamp", "quantity": 1, "unit_price": 50, "unit_cost": 20},
]


def _wire(config=None):
    from engines.quotation.services import QuotationService

    parties = InMemoryPartyDirectory()
    parties.add_customer(BIZ, CUSTOMER)
    config = config or InMemoryConfigStore()
    hooks = HookRegistry()
    fired = []
    for name in (
        "quotation.document.created",
        "quotation.document.updated",
        "quotation.document.status_changed",
        "quotation.document.removed",
    ):
        hooks.register(name, fired.append, "test")
    clock = FixedClock(NOW)
    service = QuotationService(
        store=InMemoryDocumentStore(),
        parties=parties,
        numbering=NumberingService(InMemorySequenceCounter(), config),
        config_store=config,
        hooks=hooks,
        clock=clock,
    )
    return service, fired, clock


def _create(service, **overrides):
    data = {"customer_id": CUSTOMER, "items": ITEMS, "discount": 10, "vat_rate": 10}
    data.update(overrides)
    return service.create(data, BIZ, "user-1")


class TestQuotationRequests:
    def test_non_positive_quantity_rejected(self):
        from engines.quotation.commands import QuotationCreateRequest

        with pytest.raises(ValidationError, match="quantity"):
            QuotationCreateRequest(customer_id=CUSTOMER, items=[{"quantity": 0, "unit_price": 5}])

    def test_rate_out_of_range_rejected(self):
        from engines.quotation.commands import QuotationCreateRequest

        with pytest.raises(ValidationError, match="vat_rate"):
            QuotationCreateRequest(customer_id=CUSTOMER, vat_rate=120)

    def test_withholding_override_refused_on_quotation(self):
        from engines.quotation.commands import QuotationCreateRequest

        with pytest.raises(ValidationError, match="withholding"):
            QuotationCreateRequest(
                customer_id=CUSTOMER,
                items=[{"quantity": 1, "unit_price": 5, "wht_rate": 2}],
            )

    def test_unknown_field_rejected(self):
        service, _, _ = _wire()
        with pytest.raises(ValidationError, match="Unknown fields"):
            _create(service, colour="blue")

    def test_validation_error_is_value_error(self):
        from engines.quotation.commands import QuotationCreateRequest

        with pytest.raises(ValueError):
            QuotationCreateRequest(customer_id="")

    def test_update_request_tracks_financial_changes(self):
        from engines.quotation.commands import QuotationUpdateRequest

        assert QuotationUpdateRequest(notes="x").changes_financials is False
        assert QuotationUpdateRequest(vat_rate=16).changes_financials is True


class TestQuotationCreate:
    def test_create_computes_and_numbers(self):
        service, fired, _ = _wire()
        quotation = _create(service)

        assert quotation.quotation_id == "QUOT-001"
        assert quotation.status == QuotationStatus.DRAFT
        assert quotation.summary.subtotal == Decimal("250.00")
        assert quotation.summary.grand_total == Decimal("264.00")
        assert quotation.summary.total_cost == Decimal("140.00")
        assert quotation.converted_to_invoice is False
        assert quotation.created_at == NOW
        assert [n.hook_name for n in fired] == ["quotation.document.created"]
        assert service.get("QUOT-001", BIZ) == quotation

    def test_sequential_numbers(self):
        service, _, _ = _wire()
        assert _create(service).quotation_id == "QUOT-001"
        assert _create(service).quotation_id == "QUOT-002"

    def test_concurrent_creates_get_distinct_numbers(self):
        service, _, _ = _wire()
        with ThreadPoolExecutor(max_workers=8) as pool:
            created = list(pool.map(lambda _: _create(service), range(40)))
        numbers = {q.quotation_id for q in created}
        assert len(numbers) == 40
        assert len(service.list(BIZ, limit=50)[0]) == 40

    def test_empty_items_allowed(self):
        service, _, _ = _wire()
        quotation = _create(service, items=[])
        assert quotation.summary.grand_total == Decimal("0.00")

    def test_unknown_business(self):
        service, _, _ = _wire()
        with pytest.raises(NotFoundError) as exc_info:
            service.create({"customer_id": CUSTOMER}, uuid.uuid4(), "user-1")
        assert exc_info.value.code == "BUSINESS_NOT_FOUND"

    def test_customer_of_other_business(self):
        service, _, _ = _wire()
        with pytest.raises(NotFoundError) as exc_info:
            _create(service, customer_id="cust-999")
        assert exc_info.value.code == "CUSTOMER_NOT_FOUND"

    def test_currency_defaults_from_rules(self):
        config = InMemoryConfigStore()
        config.override(BIZ, currency="KES")
        service, _, _ = _wire(config)
        assert _create(service).currency == "KES"

    def test_default_clock_used_when_none_injected(self):
        from engines.quotation.services import QuotationService

        later = datetime(2026, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
        parties = InMemoryPartyDirectory()
        parties.add_customer(BIZ, CUSTOMER)
        original = get_default_clock()
        set_default_clock(FixedClock(later))
        try:
            service = QuotationService(
                store=InMemoryDocumentStore(),
                parties=parties,
                numbering=NumberingService(InMemorySequenceCounter()),
            )
            quotation = _create(service)
        finally:
            set_default_clock(original)
        assert quotation.created_at == later
        assert quotation.updated_at == later


class TestQuotationUpdate:
    def test_patch_recomputes_with_merged_rates(self):
        service, fired, _ = _wire()
        _create(service)
        updated = service.update("QUOT-001", {"vat_rate": 0}, BIZ)

        assert updated.discount == Decimal("10")
        assert updated.summary.vat_amount == Decimal("0.00")
        assert updated.summary.grand_total == Decimal("240.00")
        assert fired[-1].hook_name == "quotation.document.updated"

    def test_text_only_patch_keeps_summary(self):
        service, _, _ = _wire()
        original = _create(service)
        updated = service.update("QUOT-001", {"notes": "Delivery in May"}, BIZ)
        assert updated.notes == "Delivery in May"
        assert updated.summary == original.summary

    def test_sent_quotation_still_editable(self):
        service, _, _ = _wire()
        _create(service)
        service.update_status("QUOT-001", "Sent", BIZ)
        assert service.update("QUOT-001", {"discount": 0}, BIZ).summary.discount_amount == Decimal("0.00")

    def test_discount_type_patch_checks_stored_discount(self):
        service, _, _ = _wire()
        _create(service, discount=150)
        with pytest.raises(ValidationError, match="percentage discount"):
            service.update("QUOT-001", {"discount_type": "percentage"}, BIZ)
        assert service.get("QUOT-001", BIZ).summary.discount_amount == Decimal("150.00")

    def test_discount_patch_checks_stored_percentage_type(self):
        service, _, _ = _wire()
        _create(service, discount_type="percentage")
        with pytest.raises(ValidationError, match="percentage discount"):
            service.update("QUOT-001", {"discount": "100.01"}, BIZ)

    @pytest.mark.parametrize("terminal", ["Accepted", "Rejected", "Expired"])
    def test_terminal_quotation_locked(self, terminal):
        service, _, _ = _wire()
        _create(service)
        service.update_status("QUOT-001", "Sent", BIZ)
        service.update_status("QUOT-001", terminal, BIZ)
        with pytest.raises(InvalidStateError) as exc_info:
            service.update("QUOT-001", {"notes": "late change"}, BIZ)
        assert exc_info.value.code == "QUOTATION_LOCKED"

    def test_missing_quotation(self):
        service, _, _ = _wire()
        with pytest.raises(NotFoundError):
            service.update("QUOT-404", {"notes": "x"}, BIZ)


class TestQuotationStatus:
    def test_transitions_stamp_dates(self):
        service, fired, clock = _wire()
        _create(service)
        sent = service.update_status("QUOT-001", QuotationStatus.SENT, BIZ)
        clock.advance(days=2)
        accepted = service.update_status("QUOT-001", "Accepted", BIZ)

        assert sent.sent_date == NOW
        assert accepted.accepted_date == clock.now_utc()
        assert fired[-1].payload["previous_status"] == "Sent"

    def test_draft_cannot_jump_to_accepted(self):
        service, _, _ = _wire()
        _create(service)
        with pytest.raises(InvalidStateError) as exc_info:
            service.update_status("QUOT-001", "Accepted", BIZ)
        assert exc_info.value.code == "INVALID_STATUS_TRANSITION"

    def test_permissive_rules_allow_any_status(self):
        config = InMemoryConfigStore()
        config.override(BIZ, enforce_status_transitions=False)
        service, _, _ = _wire(config)
        _create(service)
        assert service.update_status("QUOT-001", "Accepted", BIZ).status == QuotationStatus.ACCEPTED

    def test_unknown_status(self):
        service, _, _ = _wire()
        _create(service)
        with pytest.raises(ValidationError):
            service.update_status("QUOT-001", "Archived", BIZ)


class TestQuotationRemove:
    def test_remove_draft(self):
        service, fired, _ = _wire()
        _create(service)
        service.remove("QUOT-001", BIZ)
        assert fired[-1].hook_name == "quotation.document.removed"
        with pytest.raises(NotFoundError):
            service.get("QUOT-001", BIZ)

    def test_accepted_cannot_be_removed(self):
        service, _, _ = _wire()
        _create(service)
        service.update_status("QUOT-001", "Sent", BIZ)
        service.update_status("QUOT-001", "Accepted", BIZ)
        with pytest.raises(InvalidStateError):
            service.remove("QUOT-001", BIZ)


class TestQuotationQueries:
    def test_list_search_status_and_paging(self):
        service, _, clock = _wire()
        for _ in range(3):
            _create(service)
            clock.advance(seconds=1)
        service.update_status("QUOT-002", "Sent", BIZ)

        page, cursor = service.list(BIZ, limit=2)
        assert [q.quotation_id for q in page] == ["QUOT-001", "QUOT-002"]
        rest, cursor = service.list(BIZ, limit=2, cursor=cursor)
        assert [q.quotation_id for q in rest] == ["QUOT-003"]
        assert cursor is None

        sent, _ = service.list(BIZ, status="Sent")
        assert [q.quotation_id for q in sent] == ["QUOT-002"]
        assert len(service.list(BIZ, search="lamp")[0]) == 3

    def test_bad_cursor_is_validation_error(self):
        service, _, _ = _wire()
        with pytest.raises(ValidationError):
            service.list(BIZ, cursor="@@@")

    def test_stats(self):
        service, _, _ = _wire()
        _create(service)
        _create(service)
        stats = service.stats(BIZ)
        assert stats["total_count"] == 2
        assert stats["total_value"] == Decimal("528.00")
        assert stats["by_status"]["Draft"]["count"] == 2
