"""
DocFlow Core Parties — Business & Customer Directory
======================================================
Existence checks for the tenant (business) and its customers.

The directory is owned by another service (accounts, CRM). Document
lifecycles only ask two questions of it, so it is consumed through a
protocol and never imported as a concrete model.
"""

from __future__ import annotations

import threading
import uuid
from typing import Dict, Protocol, Set


class PartyDirectory(Protocol):
    """Collaborator answering tenant and customer existence."""

    def business_exists(self, business_id: uuid.UUID) -> bool:
        ...  # pragma: no cover

    def customer_exists(self, customer_id: str, business_id: uuid.UUID) -> bool:
        """True only if customer_id belongs to business_id."""
        ...  # pragma: no cover


class InMemoryPartyDirectory:
    """Thread-safe in-memory directory for tests and bootstrap."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._customers: Dict[uuid.UUID, Set[str]] = {}

    def add_business(self, business_id: uuid.UUID) -> None:
        with self._lock:
            self._customers.setdefault(business_id, set())

    def add_customer(self, business_id: uuid.UUID, customer_id: str) -> None:
        if not customer_id or not isinstance(customer_id, str):
            raise ValueError("customer_id must be a non-empty string.")
        with self._lock:
            self._customers.setdefault(business_id, set()).add(customer_id)

    def remove_customer(self, business_id: uuid.UUID, customer_id: str) -> None:
        with self._lock:
            self._customers.get(business_id, set()).discard(customer_id)

    def business_exists(self, business_id: uuid.UUID) -> bool:
        with self._lock:
            return business_id in self._customers

    def customer_exists(self, customer_id: str, business_id: uuid.UUID) -> bool:
        with self._lock:
            return customer_id in self._customers.get(business_id, set())
