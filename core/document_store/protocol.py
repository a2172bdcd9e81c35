"""
DocFlow Document Store — Protocol
===================================
What the lifecycle services need from persistence.

Rules:
- Every read and write is scoped by business_id.
- add_* refuses an existing document number (ConflictError).
- save_* replaces an existing snapshot.
- atomic() groups writes into one all-or-nothing unit.
- on_commit() defers hook delivery until the outermost unit commits.
- lock_* re-reads a document under a write lock; only meaningful inside
  atomic().
"""

from __future__ import annotations

import uuid
from typing import Callable, ContextManager, Optional, Protocol, Tuple

from core.commands.rejection import ReasonCode, RejectionReason
from core.documents.errors import ConflictError
from core.documents.models import Invoice, Quotation


class DocumentStore(Protocol):

    def atomic(self) -> ContextManager[None]:
        ...  # pragma: no cover

    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run callback after the enclosing unit of work commits (now if none)."""
        ...  # pragma: no cover

    # ── Quotations ────────────────────────────────────────────
    def get_quotation(self, business_id: uuid.UUID, quotation_id: str) -> Optional[Quotation]:
        ...  # pragma: no cover

    def lock_quotation(self, business_id: uuid.UUID, quotation_id: str) -> Optional[Quotation]:
        ...  # pragma: no cover

    def list_quotations(self, business_id: uuid.UUID) -> Tuple[Quotation, ...]:
        """Ordered by (created_at, quotation_id)."""
        ...  # pragma: no cover

    def add_quotation(self, quotation: Quotation) -> None:
        ...  # pragma: no cover

    def save_quotation(self, quotation: Quotation) -> None:
        ...  # pragma: no cover

    def delete_quotation(self, business_id: uuid.UUID, quotation_id: str) -> None:
        ...  # pragma: no cover

    # ── Invoices ──────────────────────────────────────────────
    def get_invoice(self, business_id: uuid.UUID, invoice_id: str) -> Optional[Invoice]:
        ...  # pragma: no cover

    def lock_invoice(self, business_id: uuid.UUID, invoice_id: str) -> Optional[Invoice]:
        ...  # pragma: no cover

    def list_invoices(self, business_id: uuid.UUID) -> Tuple[Invoice, ...]:
        """Ordered by (created_at, invoice_id)."""
        ...  # pragma: no cover

    def add_invoice(self, invoice: Invoice) -> None:
        ...  # pragma: no cover

    def save_invoice(self, invoice: Invoice) -> None:
        ...  # pragma: no cover

    def delete_invoice(self, business_id: uuid.UUID, invoice_id: str) -> None:
        ...  # pragma: no cover


def duplicate_number_error(document_id: str) -> ConflictError:
    return ConflictError.from_rejection(
        RejectionReason(
            code=ReasonCode.DUPLICATE_DOCUMENT_NUMBER,
            message=f"Document number {document_id} is already in use.",
            policy_name="document_store",
        )
    )
