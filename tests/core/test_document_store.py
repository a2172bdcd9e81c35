"""
Tests for core.document_store — in-memory store transactions and paging.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from core.document_store import (
    DocumentCursorError,
    InMemoryDocumentStore,
    filter_documents,
    page_documents,
    status_stats,
)
from core.document_store.paging import decode_cursor, encode_cursor
from core.documents import ConflictError, QuotationStatus
from core.documents.models import Quotation
from core.financials import LineItem, compute_financials

BIZ = uuid.uuid4()
NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


def _quotation(number, *, minutes=0, customer_id="cust-1", status=QuotationStatus.DRAFT,
               description="Office chair", grand_total="0"):
    result = compute_financials([LineItem(description=description, unit_price=grand_total)])
    return Quotation(
        quotation_id=number,
        business_id=BIZ,
        customer_id=customer_id,
        created_by="user-1",
        created_at=NOW + timedelta(minutes=minutes),
        items=result.items,
        summary=result.summary,
        status=status,
    )


# ── Transactions ─────────────────────────────────────────────

class TestInMemoryAtomic:
    def test_rollback_restores_state(self):
        store = InMemoryDocumentStore()
        store.add_quotation(_quotation("QUOT-001"))

        with pytest.raises(RuntimeError):
            with store.atomic():
                store.add_quotation(_quotation("QUOT-002"))
                store.delete_quotation(BIZ, "QUOT-001")
                raise RuntimeError("boom")

        assert store.get_quotation(BIZ, "QUOT-001") is not None
        assert store.get_quotation(BIZ, "QUOT-002") is None

    def test_on_commit_runs_after_outermost_block(self):
        store = InMemoryDocumentStore()
        calls = []
        with store.atomic():
            with store.atomic():
                store.on_commit(lambda: calls.append("inner"))
            assert calls == []
        assert calls == ["inner"]

    def test_on_commit_dropped_on_rollback(self):
        store = InMemoryDocumentStore()
        calls = []
        with pytest.raises(RuntimeError):
            with store.atomic():
                store.on_commit(lambda: calls.append("x"))
                raise RuntimeError("boom")
        assert calls == []

    def test_on_commit_outside_atomic_runs_immediately(self):
        store = InMemoryDocumentStore()
        calls = []
        store.on_commit(lambda: calls.append("now"))
        assert calls == ["now"]

    def test_duplicate_number_is_conflict(self):
        store = InMemoryDocumentStore()
        store.add_quotation(_quotation("QUOT-001"))
        with pytest.raises(ConflictError):
            store.add_quotation(_quotation("QUOT-001"))

    def test_save_requires_existing_record(self):
        with pytest.raises(KeyError):
            InMemoryDocumentStore().save_quotation(_quotation("QUOT-009"))

    def test_list_scoped_and_ordered(self):
        store = InMemoryDocumentStore()
        store.add_quotation(_quotation("QUOT-002", minutes=5))
        store.add_quotation(_quotation("QUOT-001", minutes=1))
        other = _quotation("QUOT-001")
        store.add_quotation(replace(other, business_id=uuid.uuid4()))

        listed = store.list_quotations(BIZ)
        assert [q.quotation_id for q in listed] == ["QUOT-001", "QUOT-002"]


# ── Listing helpers ──────────────────────────────────────────

class TestPaging:
    def _records(self, count):
        return tuple(_quotation(f"QUOT-{i:03d}", minutes=i) for i in range(1, count + 1))

    def test_pages_follow_cursor(self):
        records = self._records(5)
        first, cursor = page_documents(records, limit=2)
        second, cursor = page_documents(records, limit=2, cursor=cursor)
        third, cursor = page_documents(records, limit=2, cursor=cursor)

        assert [r.quotation_id for r in first] == ["QUOT-001", "QUOT-002"]
        assert [r.quotation_id for r in second] == ["QUOT-003", "QUOT-004"]
        assert [r.quotation_id for r in third] == ["QUOT-005"]
        assert cursor is None

    def test_limit_bounds(self):
        with pytest.raises(ValueError):
            page_documents((), limit=0)
        with pytest.raises(ValueError):
            page_documents((), limit=201)

    def test_cursor_round_trip_and_garbage(self):
        assert decode_cursor(encode_cursor(NOW, "INV-00001")) == (NOW, "INV-00001")
        with pytest.raises(DocumentCursorError):
            decode_cursor("%%%")

    def test_search_matches_number_customer_and_items(self):
        records = (
            _quotation("QUOT-001", customer_id="acme"),
            _quotation("QUOT-002", description="Standing desk"),
        )
        assert len(filter_documents(records, search="ACME")) == 1
        assert len(filter_documents(records, search="desk")) == 1
        assert len(filter_documents(records, search="quot-00")) == 2

    def test_status_filter(self):
        records = (
            _quotation("QUOT-001", status=QuotationStatus.SENT),
            _quotation("QUOT-002"),
        )
        assert [r.quotation_id for r in filter_documents(records, status=QuotationStatus.SENT)] == ["QUOT-001"]

    def test_status_stats(self):
        records = (
            _quotation("QUOT-001", status=QuotationStatus.SENT, grand_total="100"),
            _quotation("QUOT-002", status=QuotationStatus.SENT, grand_total="50.50"),
            _quotation("QUOT-003", grand_total="10"),
        )
        stats = status_stats(records, QuotationStatus)
        assert stats["total_count"] == 3
        assert str(stats["total_value"]) == "160.50"
        assert stats["by_status"]["Sent"]["count"] == 2
        assert stats["by_status"]["Rejected"]["count"] == 0
