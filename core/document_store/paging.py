"""
DocFlow Document Store - Listing, Paging & Stats
==================================================
Read helpers shared by the quotation and invoice services. Operate on the
ordered tuples returned by DocumentStore.list_*().
"""

from __future__ import annotations

import base64
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Tuple, TypeVar

from core.money import ZERO, round2

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 200

T = TypeVar("T")


class DocumentCursorError(ValueError):
    pass


def _cursor_sort_key(record) -> tuple[datetime, str]:
    return (record.created_at, record.document_number)


def encode_cursor(created_at: datetime, document_number: str) -> str:
    raw = f"{created_at.isoformat()}|{document_number}"
    encoded = base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    if not isinstance(cursor, str) or not cursor.strip():
        raise DocumentCursorError("cursor must be a non-empty string.")

    token = cursor.strip()
    padding = "=" * ((4 - len(token) % 4) % 4)
    try:
        decoded = base64.urlsafe_b64decode((token + padding).encode("ascii")).decode(
            "utf-8"
        )
    except (ValueError, UnicodeError) as exc:
        raise DocumentCursorError("cursor is not valid base64.") from exc

    parts = decoded.split("|", 1)
    if len(parts) != 2 or not parts[1]:
        raise DocumentCursorError("cursor payload format is invalid.")
    created_at_raw, document_number = parts

    try:
        created_at = datetime.fromisoformat(created_at_raw)
    except ValueError as exc:
        raise DocumentCursorError("cursor created_at value is invalid.") from exc
    if created_at.tzinfo is None:
        raise DocumentCursorError("cursor created_at value must include timezone.")
    return created_at, document_number


def matches_search(record, search: Optional[str]) -> bool:
    """Case-insensitive match on number, customer, notes and item descriptions."""
    if not search or not search.strip():
        return True
    needle = search.strip().lower()
    haystack = [record.document_number, record.customer_id, record.notes or ""]
    haystack.extend(item.description for item in record.line_items)
    return any(needle in (value or "").lower() for value in haystack)


def filter_documents(
    records: Iterable[T],
    *,
    search: Optional[str] = None,
    status=None,
) -> Tuple[T, ...]:
    return tuple(
        r for r in records
        if (status is None or r.status == status) and matches_search(r, search)
    )


def page_documents(
    records: Sequence[T],
    *,
    limit: int = DEFAULT_PAGE_LIMIT,
    cursor: Optional[str] = None,
) -> tuple[tuple[T, ...], Optional[str]]:
    """Return (page, next_cursor). next_cursor is None on the last page."""
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise ValueError("limit must be int.")
    if limit < 1:
        raise ValueError("limit must be >= 1.")
    if limit > MAX_PAGE_LIMIT:
        raise ValueError(f"limit must be <= {MAX_PAGE_LIMIT}.")

    start_key: Optional[tuple[datetime, str]] = None
    if cursor is not None:
        start_key = decode_cursor(cursor)

    filtered = [
        r for r in records
        if start_key is None or _cursor_sort_key(r) > start_key
    ]

    page_items = tuple(filtered[:limit])
    if not page_items or len(filtered) <= limit:
        return page_items, None

    tail = page_items[-1]
    return page_items, encode_cursor(tail.created_at, tail.document_number)


def status_stats(records: Iterable, statuses: Iterable) -> dict:
    """
    Count and grand-total sum per status.

    Returns:
        {
            'total_count': int,
            'total_value': Decimal,
            'by_status': {status_value: {'count': int, 'total': Decimal}},
        }
    """
    by_status = {s.value: {"count": 0, "total": ZERO} for s in statuses}
    total_count = 0
    total_value: Decimal = ZERO
    for record in records:
        bucket = by_status.setdefault(record.status.value, {"count": 0, "total": ZERO})
        bucket["count"] += 1
        bucket["total"] += record.summary.grand_total
        total_count += 1
        total_value += record.summary.grand_total
    for bucket in by_status.values():
        bucket["total"] = round2(bucket["total"])
    return {
        "total_count": total_count,
        "total_value": round2(total_value),
        "by_status": by_status,
    }
