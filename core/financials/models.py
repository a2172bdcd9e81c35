"""
DocFlow Financials — Value Objects
====================================
Line items, summaries and calculation diagnostics.

RULES:
- All amounts and rates are Decimal (see core.money).
- Value objects are frozen. A document replaces its item tuple, it never
  edits an item in place.
- A FinancialSummary is derived data. It is stored with its document and
  never on its own.
- Storage boundary uses to_dict()/from_dict(); Decimals travel as strings.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Optional, Tuple

from core.money import ZERO, to_decimal


# ══════════════════════════════════════════════════════════════
# WARNING CODES
# ══════════════════════════════════════════════════════════════

WARN_ITEM_DROPPED_QUANTITY = "ITEM_DROPPED_QUANTITY"
WARN_NEGATIVE_UNIT_PRICE = "NEGATIVE_UNIT_PRICE"
WARN_NEGATIVE_UNIT_COST = "NEGATIVE_UNIT_COST"
WARN_INVALID_ITEM_RATE = "INVALID_ITEM_RATE"
WARN_INVALID_RATE = "INVALID_RATE"
WARN_NEGATIVE_DISCOUNT = "NEGATIVE_DISCOUNT"
WARN_UNKNOWN_DISCOUNT_TYPE = "UNKNOWN_DISCOUNT_TYPE"
WARN_NO_VALID_ITEMS = "NO_VALID_ITEMS"

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FLAT = "flat"
VALID_DISCOUNT_TYPES = frozenset({DISCOUNT_PERCENTAGE, DISCOUNT_FLAT})


def _decimal_or_raw(value: Any) -> Any:
    converted = to_decimal(value)
    return value if converted is None else converted


def _optional_decimal(value: Any) -> Any:
    if value is None:
        return None
    return _decimal_or_raw(value)


def _dump(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value


# ══════════════════════════════════════════════════════════════
# LINE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineItem:
    """
    One priced line on a quotation or invoice.

    Fields:
        description:            Free text shown on the document.
        quantity:               Units sold (> 0 for a valid line).
        unit_price:             Selling price per unit (>= 0).
        unit_cost:              Purchase cost per unit (>= 0).
        discount_percent:       Informational line discount, 0-100.
        vat_rate:               Line VAT rate, 0-100.
        tax_rate:               Item-level sales tax rate, 0-100. Falls back
                                to the document default tax rate.
        wht_rate:               Invoice-only withholding override, 0-100.
        subject_to_withholding: Invoice-only flag. False exempts the line.
        product_id:             Optional catalogue reference.

    No validation here: dirty values are allowed through so the calculator
    can sanitize and report them. Request objects validate at the boundary.
    """

    description: str = ""
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = ZERO
    unit_cost: Decimal = ZERO
    discount_percent: Optional[Decimal] = None
    vat_rate: Decimal = ZERO
    tax_rate: Optional[Decimal] = None
    wht_rate: Optional[Decimal] = None
    subject_to_withholding: Optional[bool] = None
    product_id: Optional[str] = None

    @property
    def has_withholding_override(self) -> bool:
        return self.wht_rate is not None or self.subject_to_withholding is not None

    def to_dict(self) -> dict:
        return {f.name: _dump(getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> LineItem:
        subject = data.get("subject_to_withholding")
        return cls(
            description=str(data.get("description") or ""),
            quantity=_decimal_or_raw(data.get("quantity", 1)),
            unit_price=_decimal_or_raw(data.get("unit_price", 0)),
            unit_cost=_decimal_or_raw(data.get("unit_cost", 0)),
            discount_percent=_optional_decimal(data.get("discount_percent")),
            vat_rate=_decimal_or_raw(data.get("vat_rate", 0)),
            tax_rate=_optional_decimal(data.get("tax_rate")),
            wht_rate=_optional_decimal(data.get("wht_rate")),
            subject_to_withholding=None if subject is None else bool(subject),
            product_id=data.get("product_id"),
        )


def coerce_line_items(items: Any) -> Tuple[LineItem, ...]:
    """Accept LineItem objects or plain dicts; return a tuple of LineItem."""
    if not items:
        return ()
    result = []
    for item in items:
        if isinstance(item, LineItem):
            result.append(item)
        elif isinstance(item, dict):
            result.append(LineItem.from_dict(item))
        else:
            raise TypeError(
                f"line item must be LineItem or dict, got {type(item).__name__}."
            )
    return tuple(result)


# ══════════════════════════════════════════════════════════════
# FINANCIAL SUMMARY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FinancialSummary:
    """
    Document-level figures produced by compute_financials().

    grand_total, net_receivable, vat_amount and withholding_tax_amount are
    clamped at zero. Profit, margin and markup are signed (a loss is
    negative).
    """

    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    vat_amount: Decimal = ZERO
    withholding_tax_amount: Decimal = ZERO
    grand_total: Decimal = ZERO
    net_receivable: Decimal = ZERO
    total_cost: Decimal = ZERO
    gross_profit: Decimal = ZERO
    net_profit: Decimal = ZERO
    gross_margin: Decimal = ZERO
    net_margin: Decimal = ZERO
    markup: Decimal = ZERO

    @classmethod
    def zero(cls) -> FinancialSummary:
        return cls()

    def to_dict(self) -> dict:
        return {f.name: str(getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> FinancialSummary:
        values = {}
        for f in fields(cls):
            values[f.name] = to_decimal(data.get(f.name), ZERO)
        return cls(**values)


# ══════════════════════════════════════════════════════════════
# DIAGNOSTICS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CalculationWarning:
    """A sanitization event. Never fatal, always reported."""

    code: str
    message: str
    item_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "item_index": self.item_index,
        }


# ══════════════════════════════════════════════════════════════
# PROCESSED LINE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProcessedLineItem:
    """A sanitized LineItem plus its per-line breakdown (all rounded)."""

    item: LineItem
    amount: Decimal
    item_tax: Decimal
    total_with_tax: Decimal
    withholding_rate: Decimal
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    margin: Decimal
    markup: Decimal

    def to_dict(self) -> dict:
        data = self.item.to_dict()
        data.update({
            "amount": str(self.amount),
            "item_tax": str(self.item_tax),
            "total_with_tax": str(self.total_with_tax),
            "withholding_rate": str(self.withholding_rate),
            "revenue": str(self.revenue),
            "cost": str(self.cost),
            "profit": str(self.profit),
            "margin": str(self.margin),
            "markup": str(self.markup),
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ProcessedLineItem:
        return cls(
            item=LineItem.from_dict(data),
            amount=to_decimal(data.get("amount"), ZERO),
            item_tax=to_decimal(data.get("item_tax"), ZERO),
            total_with_tax=to_decimal(data.get("total_with_tax"), ZERO),
            withholding_rate=to_decimal(data.get("withholding_rate"), ZERO),
            revenue=to_decimal(data.get("revenue"), ZERO),
            cost=to_decimal(data.get("cost"), ZERO),
            profit=to_decimal(data.get("profit"), ZERO),
            margin=to_decimal(data.get("margin"), ZERO),
            markup=to_decimal(data.get("markup"), ZERO),
        )


@dataclass(frozen=True)
class FinancialResult:
    """Return value of compute_financials(): summary + annotations + warnings."""

    summary: FinancialSummary
    items: Tuple[ProcessedLineItem, ...] = ()
    warnings: Tuple[CalculationWarning, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def sanitized_items(self) -> Tuple[LineItem, ...]:
        return tuple(p.item for p in self.items)
