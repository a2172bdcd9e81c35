"""
DocFlow Documents — Request Boundary Validation
=================================================
Malformed input is refused here with ValidationError, before it reaches
the calculator. The calculator stays tolerant for callers that skip this
layer (imports, recalculation of stored data).
"""

from __future__ import annotations

from dataclasses import fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Tuple

from core.commands.rejection import ReasonCode, RejectionReason
from core.documents.errors import ValidationError
from core.financials.models import VALID_DISCOUNT_TYPES, LineItem, coerce_line_items
from core.money import HUNDRED, ZERO, to_decimal


def _invalid(code: str, message: str, policy_name: str) -> ValidationError:
    return ValidationError.from_rejection(
        RejectionReason(code=code, message=message, policy_name=policy_name)
    )


def _item_error(index: int, message: str) -> ValidationError:
    return _invalid(
        ReasonCode.INVALID_LINE_ITEM,
        f"items[{index}]: {message}",
        "line_items_must_be_well_formed",
    )


def request_error(message: str) -> ValidationError:
    return _invalid(ReasonCode.INVALID_REQUEST, message, "request_must_be_well_formed")


def _is_percent(value: Decimal) -> bool:
    return ZERO <= value <= HUNDRED


def validate_line_items(items: Any, *, allow_withholding: bool) -> Tuple[LineItem, ...]:
    """
    Coerce items (LineItem or dict) and refuse malformed lines.

    allow_withholding=False refuses per-item withholding overrides, which
    only invoices carry.
    """
    if items is None:
        return ()
    if isinstance(items, (str, bytes, dict)):
        raise request_error("items must be a list of line items.")
    try:
        coerced = coerce_line_items(items)
    except TypeError as exc:
        raise request_error(str(exc)) from exc

    for index, item in enumerate(coerced):
        quantity = to_decimal(item.quantity)
        if quantity is None or quantity <= ZERO:
            raise _item_error(index, "quantity must be a number > 0.")
        for name in ("unit_price", "unit_cost"):
            value = to_decimal(getattr(item, name))
            if value is None or value < ZERO:
                raise _item_error(index, f"{name} must be a number >= 0.")
        for name in ("vat_rate", "tax_rate", "discount_percent", "wht_rate"):
            raw = getattr(item, name)
            if raw is None:
                continue
            value = to_decimal(raw)
            if value is None or not _is_percent(value):
                raise _item_error(index, f"{name} must be between 0 and 100.")
        if item.has_withholding_override and not allow_withholding:
            raise _item_error(index, "withholding overrides are only allowed on invoices.")
    return coerced


def validate_percent(name: str, value: Any, *, optional: bool = False) -> Optional[Decimal]:
    if value is None and optional:
        return None
    converted = to_decimal(value)
    if converted is None or not _is_percent(converted):
        raise request_error(f"{name} must be a number between 0 and 100.")
    return converted


def validate_discount(discount: Any, discount_type: str) -> Decimal:
    if discount_type not in VALID_DISCOUNT_TYPES:
        raise request_error(
            f"discount_type '{discount_type}' is not valid. "
            f"Must be one of: {sorted(VALID_DISCOUNT_TYPES)}"
        )
    converted = to_decimal(discount)
    if converted is None or converted < ZERO:
        raise request_error("discount must be a number >= 0.")
    if discount_type == "percentage" and converted > HUNDRED:
        raise request_error("percentage discount must be <= 100.")
    return converted


def validate_text(name: str, value: Any, *, required: bool = False) -> Optional[str]:
    if value is None and not required:
        return None
    if not isinstance(value, str) or (required and not value.strip()):
        raise request_error(f"{name} must be a non-empty string.")
    return value


def validate_datetime(name: str, value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, datetime) or value.tzinfo is None:
        raise request_error(f"{name} must be a timezone-aware datetime.")
    return value


def validate_amount(name: str, value: Any) -> Decimal:
    converted = to_decimal(value)
    if converted is None or converted <= ZERO:
        raise _invalid(
            ReasonCode.INVALID_PAYMENT,
            f"{name} must be a number > 0.",
            "payment_amount_must_be_positive",
        )
    return converted


_RATE_FIELDS = ("vat_rate", "wht_rate")


def normalize_financial_fields(request: Any, *, allow_withholding: bool, partial: bool = False) -> None:
    """
    Validate and normalize the financial fields of a frozen request in place.

    partial=True (update patches) leaves None fields untouched, meaning
    "keep the stored value".
    """
    def _set(name: str, value: Any) -> None:
        object.__setattr__(request, name, value)

    if request.items is not None or not partial:
        _set("items", validate_line_items(request.items, allow_withholding=allow_withholding))

    if request.discount_type is not None and request.discount_type not in VALID_DISCOUNT_TYPES:
        raise request_error(
            f"discount_type '{request.discount_type}' is not valid. "
            f"Must be one of: {sorted(VALID_DISCOUNT_TYPES)}"
        )
    if request.discount is not None or not partial:
        discount_type = request.discount_type or "flat"
        _set("discount", validate_discount(request.discount or 0, discount_type))

    _set(
        "default_tax_rate",
        validate_percent("default_tax_rate", request.default_tax_rate, optional=True),
    )
    for name in _RATE_FIELDS:
        value = getattr(request, name)
        if value is None and partial:
            continue
        _set(name, validate_percent(name, value if value is not None else 0))


def build_request(request_type: type, data: dict) -> Any:
    """Build a request dataclass from a plain dict, refusing unknown keys."""
    known = {f.name for f in fields(request_type)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise request_error(f"Unknown fields for {request_type.__name__}: {unknown}.")
    try:
        return request_type(**data)
    except TypeError as exc:
        raise request_error(str(exc)) from exc
