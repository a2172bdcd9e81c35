"""
DocFlow Document Store — In-Memory Implementation
===================================================
Thread-safe store for tests and bootstrap.

One re-entrant lock guards all state. atomic() holds the lock for the
whole block and restores the pre-block snapshot if the block raises, so a
conversion that fails on its second write leaves nothing behind.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from core.document_store.protocol import duplicate_number_error
from core.documents.models import Invoice, Quotation


def _ordered(records) -> tuple:
    return tuple(sorted(records, key=lambda r: (r.created_at, r.document_number)))


class InMemoryDocumentStore:

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._quotations: Dict[Tuple[uuid.UUID, str], Quotation] = {}
        self._invoices: Dict[Tuple[uuid.UUID, str], Invoice] = {}
        self._depth = 0
        self._pending: List[Callable[[], None]] = []

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            quotations = dict(self._quotations)
            invoices = dict(self._invoices)
            pending_mark = len(self._pending)
            self._depth += 1
            try:
                yield
            except BaseException:
                self._quotations = quotations
                self._invoices = invoices
                del self._pending[pending_mark:]
                raise
            finally:
                self._depth -= 1
            callbacks: List[Callable[[], None]] = []
            if self._depth == 0:
                callbacks, self._pending = self._pending, []
        for callback in callbacks:
            callback()

    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run callback once the outermost atomic() block commits."""
        with self._lock:
            if self._depth > 0:
                self._pending.append(callback)
                return
        callback()

    # ── Quotations ────────────────────────────────────────────

    def get_quotation(self, business_id: uuid.UUID, quotation_id: str) -> Optional[Quotation]:
        with self._lock:
            return self._quotations.get((business_id, quotation_id))

    def lock_quotation(self, business_id: uuid.UUID, quotation_id: str) -> Optional[Quotation]:
        return self.get_quotation(business_id, quotation_id)

    def list_quotations(self, business_id: uuid.UUID) -> Tuple[Quotation, ...]:
        with self._lock:
            return _ordered(
                q for (biz, _), q in self._quotations.items() if biz == business_id
            )

    def add_quotation(self, quotation: Quotation) -> None:
        key = (quotation.business_id, quotation.quotation_id)
        with self._lock:
            if key in self._quotations:
                raise duplicate_number_error(quotation.quotation_id)
            self._quotations[key] = quotation

    def save_quotation(self, quotation: Quotation) -> None:
        key = (quotation.business_id, quotation.quotation_id)
        with self._lock:
            if key not in self._quotations:
                raise KeyError(f"Quotation {quotation.quotation_id} is not stored.")
            self._quotations[key] = quotation

    def delete_quotation(self, business_id: uuid.UUID, quotation_id: str) -> None:
        with self._lock:
            self._quotations.pop((business_id, quotation_id), None)

    # ── Invoices ──────────────────────────────────────────────

    def get_invoice(self, business_id: uuid.UUID, invoice_id: str) -> Optional[Invoice]:
        with self._lock:
            return self._invoices.get((business_id, invoice_id))

    def lock_invoice(self, business_id: uuid.UUID, invoice_id: str) -> Optional[Invoice]:
        return self.get_invoice(business_id, invoice_id)

    def list_invoices(self, business_id: uuid.UUID) -> Tuple[Invoice, ...]:
        with self._lock:
            return _ordered(
                inv for (biz, _), inv in self._invoices.items() if biz == business_id
            )

    def add_invoice(self, invoice: Invoice) -> None:
        key = (invoice.business_id, invoice.invoice_id)
        with self._lock:
            if key in self._invoices:
                raise duplicate_number_error(invoice.invoice_id)
            self._invoices[key] = invoice

    def save_invoice(self, invoice: Invoice) -> None:
        key = (invoice.business_id, invoice.invoice_id)
        with self._lock:
            if key not in self._invoices:
                raise KeyError(f"Invoice {invoice.invoice_id} is not stored.")
            self._invoices[key] = invoice

    def delete_invoice(self, business_id: uuid.UUID, invoice_id: str) -> None:
        with self._lock:
            self._invoices.pop((business_id, invoice_id), None)
