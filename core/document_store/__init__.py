"""
DocFlow Document Store — Public API
=====================================
The ORM implementation (django_store) is imported directly by callers
that run inside a configured Django project.
"""

from core.document_store.memory import InMemoryDocumentStore
from core.document_store.paging import (
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    DocumentCursorError,
    filter_documents,
    page_documents,
    status_stats,
)
from core.document_store.protocol import DocumentStore

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "DocumentCursorError",
    "DEFAULT_PAGE_LIMIT",
    "MAX_PAGE_LIMIT",
    "filter_documents",
    "page_documents",
    "status_stats",
]
