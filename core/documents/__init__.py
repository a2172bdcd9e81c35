"""
DocFlow Documents — Public API
================================
Document types, statuses, numbering and the error taxonomy shared by the
quotation and invoice lifecycles.
"""

from core.documents.errors import (
    ConflictError,
    DocumentEngineError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    raise_for_rejection,
)
from core.documents.models import (
    DOCUMENT_INVOICE,
    DOCUMENT_QUOTATION,
    VALID_DOCUMENT_TYPES,
    InvoiceStatus,
    QuotationStatus,
)

__all__ = [
    "DOCUMENT_QUOTATION",
    "DOCUMENT_INVOICE",
    "VALID_DOCUMENT_TYPES",
    "QuotationStatus",
    "InvoiceStatus",
    "DocumentEngineError",
    "NotFoundError",
    "ConflictError",
    "InvalidStateError",
    "ValidationError",
    "raise_for_rejection",
]
