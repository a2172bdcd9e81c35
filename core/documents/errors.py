"""
DocFlow Documents — Errors
============================
Typed errors surfaced to callers of the document lifecycles.

    DocumentEngineError
    ├── NotFoundError       business, customer, quotation or invoice missing
    ├── ConflictError       already converted, duplicate numbering
    ├── InvalidStateError   operation not allowed in the current status
    └── ValidationError     malformed request at the API boundary

The calculator never raises these. It sanitizes and warns instead.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


class DocumentEngineError(Exception):
    """Base error for document lifecycle operations."""

    default_code = "DOCUMENT_ENGINE_ERROR"

    def __init__(self, message: str, *, reason: Optional[RejectionReason] = None):
        self.reason = reason
        super().__init__(message)

    @property
    def code(self) -> str:
        if self.reason is not None:
            return self.reason.code
        return self.default_code

    @classmethod
    def from_rejection(cls, reason: RejectionReason) -> "DocumentEngineError":
        return cls(reason.message, reason=reason)


class NotFoundError(DocumentEngineError):
    """A referenced business, customer or document does not exist."""

    default_code = "NOT_FOUND"


class ConflictError(DocumentEngineError):
    """The operation collides with an existing link or number."""

    default_code = "CONFLICT"


class InvalidStateError(DocumentEngineError):
    """The document's status does not allow this operation."""

    default_code = ReasonCode.INVALID_STATUS_TRANSITION


class ValidationError(DocumentEngineError, ValueError):
    """Malformed input rejected before it reaches the calculator."""

    default_code = ReasonCode.INVALID_REQUEST


REJECTION_ERROR_TYPES = {
    ReasonCode.BUSINESS_NOT_FOUND: NotFoundError,
    ReasonCode.CUSTOMER_NOT_FOUND: NotFoundError,
    ReasonCode.QUOTATION_NOT_FOUND: NotFoundError,
    ReasonCode.INVOICE_NOT_FOUND: NotFoundError,
    ReasonCode.QUOTATION_ALREADY_CONVERTED: ConflictError,
    ReasonCode.DUPLICATE_DOCUMENT_NUMBER: ConflictError,
    ReasonCode.QUOTATION_LOCKED: InvalidStateError,
    ReasonCode.QUOTATION_NOT_CONVERTIBLE: InvalidStateError,
    ReasonCode.INVOICE_PAID: InvalidStateError,
    ReasonCode.INVOICE_NOT_PAYABLE: InvalidStateError,
    ReasonCode.INVALID_STATUS_TRANSITION: InvalidStateError,
    ReasonCode.PAYMENTS_EXCEED_TOTAL: InvalidStateError,
    ReasonCode.INVALID_LINE_ITEM: ValidationError,
    ReasonCode.INVALID_PAYMENT: ValidationError,
    ReasonCode.INVALID_REQUEST: ValidationError,
}


def raise_for_rejection(reason: Optional[RejectionReason]) -> None:
    """Raise the typed error mapped to reason.code. No-op for None."""
    if reason is None:
        return
    error_type = REJECTION_ERROR_TYPES.get(reason.code, DocumentEngineError)
    raise error_type.from_rejection(reason)
