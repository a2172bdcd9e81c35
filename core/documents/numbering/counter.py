"""
DocFlow Documents - Sequence Counters
=======================================
Atomic per-business, per-doc-type increment-and-return.

Doctrine:
- Counter is a dependency injection point (testable, swappable).
- Two concurrent callers can never observe the same value.
- The ORM-backed counter lives in core.document_store.
"""

from __future__ import annotations

import threading
import uuid
from typing import Dict, Protocol, Tuple


class SequenceCounter(Protocol):
    def next_value(self, business_id: uuid.UUID, doc_type: str) -> int:
        """Atomically advance the counter and return the new value (1-based)."""
        ...


class InMemorySequenceCounter:
    """
    Thread-safe in-memory counter.
    Used in tests and bootstrap.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: Dict[Tuple[uuid.UUID, str], int] = {}

    def next_value(self, business_id: uuid.UUID, doc_type: str) -> int:
        key = (business_id, doc_type)
        with self._lock:
            value = self._values.get(key, 0) + 1
            self._values[key] = value
        return value

    def current_value(self, business_id: uuid.UUID, doc_type: str) -> int:
        with self._lock:
            return self._values.get((business_id, doc_type), 0)

    def seed(self, business_id: uuid.UUID, doc_type: str, value: int) -> None:
        """Start numbering after value (e.g. when importing existing documents)."""
        if not isinstance(value, int) or value < 0:
            raise ValueError("value must be int >= 0.")
        with self._lock:
            self._values[(business_id, doc_type)] = value
