"""
DocFlow Financials — Calculator
=================================
Pure computation: line items + document rates → FinancialSummary.

Order of operations (each step depends on the previous one):
     1. Sanitize items (drop quantity <= 0, clamp negative price/cost to 0)
     2. Clamp document rates outside [0, 100] to 0
     3. subtotal       = Σ quantity × unit_price
     4. tax_amount     = Σ quantity × unit_price × (item rate | default | 0) / 100
     5. discount       = subtotal × discount / 100  (percentage)
                         discount                   (flat, may exceed subtotal)
     6. vat_amount     = (subtotal − discount) × vat_rate / 100
     7. withholding    = (subtotal − discount) × wht_rate / 100
     8. grand_total    = max(0, subtotal + tax + vat − discount)
     9. net_receivable = max(0, grand_total − withholding)
    10. total_cost     = Σ quantity × unit_cost
    11. gross_profit   = (subtotal − discount) − total_cost
    12. net_profit     = (subtotal − discount − withholding) − total_cost
    13. margins/markup (0 when the denominator is not positive)
    14. round2 every output field

RULES:
- Never raises on bad numeric data. It degrades and reports: every
  sanitization becomes a CalculationWarning in the result and a log line.
- Intermediate values are never rounded.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from core.financials.line_items import line_figures, process_line_items
from core.financials.models import (
    DISCOUNT_FLAT,
    DISCOUNT_PERCENTAGE,
    VALID_DISCOUNT_TYPES,
    WARN_INVALID_ITEM_RATE,
    WARN_INVALID_RATE,
    WARN_ITEM_DROPPED_QUANTITY,
    WARN_NEGATIVE_DISCOUNT,
    WARN_NEGATIVE_UNIT_COST,
    WARN_NEGATIVE_UNIT_PRICE,
    WARN_NO_VALID_ITEMS,
    WARN_UNKNOWN_DISCOUNT_TYPE,
    CalculationWarning,
    FinancialResult,
    FinancialSummary,
    LineItem,
    coerce_line_items,
)
from core.money import HUNDRED, ZERO, round2, to_decimal

logger = logging.getLogger("docflow.financials")


class _Diagnostics:
    def __init__(self) -> None:
        self.warnings: List[CalculationWarning] = []

    def warn(self, code: str, message: str, item_index: Optional[int] = None) -> None:
        self.warnings.append(
            CalculationWarning(code=code, message=message, item_index=item_index)
        )
        prefix = f"Item {item_index + 1}: " if item_index is not None else ""
        logger.warning(f"[{code}] {prefix}{message}")


def _is_valid_rate(rate: Optional[Decimal]) -> bool:
    return rate is not None and ZERO <= rate <= HUNDRED


def _clamp_rate(value: Any, name: str, diagnostics: _Diagnostics) -> Decimal:
    if value is None:
        return ZERO
    rate = to_decimal(value)
    if not _is_valid_rate(rate):
        diagnostics.warn(
            WARN_INVALID_RATE,
            f"{name} '{value}' is outside [0, 100], using 0.",
        )
        return ZERO
    return rate


def _clamp_item_rate(
    item: LineItem,
    index: int,
    name: str,
    fallback: Optional[Decimal],
    diagnostics: _Diagnostics,
) -> Optional[Decimal]:
    raw = getattr(item, name)
    if raw is None:
        return None
    rate = to_decimal(raw)
    if _is_valid_rate(rate):
        return rate
    replacement = "document default" if fallback is None else str(fallback)
    diagnostics.warn(
        WARN_INVALID_ITEM_RATE,
        f"invalid {name} '{raw}', using {replacement}.",
        index,
    )
    return fallback


def sanitize_items(
    items: Iterable[LineItem],
    diagnostics: _Diagnostics,
) -> List[LineItem]:
    sanitized: List[LineItem] = []
    for index, item in enumerate(items):
        quantity = to_decimal(item.quantity)
        if quantity is None or quantity <= 0:
            diagnostics.warn(
                WARN_ITEM_DROPPED_QUANTITY,
                f"quantity '{item.quantity}' is not positive, item dropped.",
                index,
            )
            continue

        unit_price = to_decimal(item.unit_price)
        if unit_price is None or unit_price < 0:
            diagnostics.warn(
                WARN_NEGATIVE_UNIT_PRICE,
                f"unit_price '{item.unit_price}' is invalid, using 0.",
                index,
            )
            unit_price = ZERO

        unit_cost = to_decimal(item.unit_cost)
        if unit_cost is None or unit_cost < 0:
            diagnostics.warn(
                WARN_NEGATIVE_UNIT_COST,
                f"unit_cost '{item.unit_cost}' is invalid, using 0.",
                index,
            )
            unit_cost = ZERO

        vat_rate = _clamp_item_rate(item, index, "vat_rate", ZERO, diagnostics)
        sanitized.append(
            replace(
                item,
                quantity=quantity,
                unit_price=unit_price,
                unit_cost=unit_cost,
                vat_rate=ZERO if vat_rate is None else vat_rate,
                tax_rate=_clamp_item_rate(item, index, "tax_rate", None, diagnostics),
                discount_percent=_clamp_item_rate(
                    item, index, "discount_percent", ZERO, diagnostics
                ),
                wht_rate=_clamp_item_rate(item, index, "wht_rate", ZERO, diagnostics),
            )
        )
    return sanitized


def _discount_amount(
    subtotal: Decimal,
    discount: Any,
    discount_type: str,
    diagnostics: _Diagnostics,
) -> Decimal:
    value = to_decimal(discount, ZERO)
    if value < 0:
        diagnostics.warn(
            WARN_NEGATIVE_DISCOUNT,
            f"discount '{discount}' is negative, using 0.",
        )
        value = ZERO

    if discount_type not in VALID_DISCOUNT_TYPES:
        diagnostics.warn(
            WARN_UNKNOWN_DISCOUNT_TYPE,
            f"discount_type '{discount_type}' is unknown, treating as {DISCOUNT_FLAT}.",
        )
    if discount_type == DISCOUNT_PERCENTAGE:
        return subtotal * value / HUNDRED
    return value


def _withholding_amount(
    amounts: List[Decimal],
    rates: List[Decimal],
    subtotal: Decimal,
    discount_amount: Decimal,
    wht_rate: Decimal,
) -> Decimal:
    taxable = subtotal - discount_amount
    if all(rate == wht_rate for rate in rates):
        return taxable * wht_rate / HUNDRED
    # Per-line overrides: allocate the document discount pro rata.
    if subtotal <= 0:
        return ZERO
    total = ZERO
    for amount, rate in zip(amounts, rates):
        share = amount - discount_amount * amount / subtotal
        total += share * rate / HUNDRED
    return total


def compute_financials(
    items: Any,
    discount: Any = 0,
    discount_type: str = DISCOUNT_FLAT,
    default_tax_rate: Optional[Any] = None,
    vat_rate: Any = 0,
    wht_rate: Any = 0,
) -> FinancialResult:
    """
    Compute the financial summary for a document.

    Args:
        items:            LineItem objects or dicts.
        discount:         Document discount (percent or flat amount).
        discount_type:    "percentage" or "flat".
        default_tax_rate: Item sales tax rate when an item has none.
        vat_rate:         Document VAT rate, applied after discount.
        wht_rate:         Document withholding rate, applied after discount.

    Returns:
        FinancialResult with the rounded summary, processed lines and the
        list of sanitization warnings.
    """
    diagnostics = _Diagnostics()
    sanitized = sanitize_items(coerce_line_items(items), diagnostics)

    default_tax = _clamp_rate(default_tax_rate, "default_tax_rate", diagnostics)
    vat = _clamp_rate(vat_rate, "vat_rate", diagnostics)
    wht = _clamp_rate(wht_rate, "wht_rate", diagnostics)

    if not sanitized:
        if diagnostics.warnings:
            diagnostics.warn(WARN_NO_VALID_ITEMS, "no valid items, summary is zero.")
        return FinancialResult(
            summary=FinancialSummary.zero(),
            items=(),
            warnings=tuple(diagnostics.warnings),
        )

    figures = [
        line_figures(item, default_tax_rate=default_tax, wht_rate=wht)
        for item in sanitized
    ]
    amounts = [f.amount for f in figures]

    subtotal = sum(amounts, ZERO)
    tax_amount = sum((f.item_tax for f in figures), ZERO)
    discount_amount = _discount_amount(subtotal, discount, discount_type, diagnostics)

    taxable = subtotal - discount_amount
    vat_amount = max(ZERO, taxable * vat / HUNDRED)
    withholding = max(
        ZERO,
        _withholding_amount(
            amounts,
            [f.withholding_rate for f in figures],
            subtotal,
            discount_amount,
            wht,
        ),
    )

    grand_total = max(ZERO, subtotal + tax_amount + vat_amount - discount_amount)
    net_receivable = max(ZERO, grand_total - withholding)

    total_cost = sum((f.cost for f in figures), ZERO)
    gross_revenue = subtotal - discount_amount
    gross_profit = gross_revenue - total_cost
    net_revenue = gross_revenue - withholding
    net_profit = net_revenue - total_cost

    gross_margin = gross_profit / gross_revenue * HUNDRED if gross_revenue > 0 else ZERO
    net_margin = net_profit / net_revenue * HUNDRED if net_revenue > 0 else ZERO
    markup = gross_profit / total_cost * HUNDRED if total_cost > 0 else ZERO

    summary = FinancialSummary(
        subtotal=round2(subtotal),
        discount_amount=round2(discount_amount),
        tax_amount=round2(tax_amount),
        vat_amount=round2(vat_amount),
        withholding_tax_amount=round2(withholding),
        grand_total=round2(grand_total),
        net_receivable=round2(net_receivable),
        total_cost=round2(total_cost),
        gross_profit=round2(gross_profit),
        net_profit=round2(net_profit),
        gross_margin=round2(gross_margin),
        net_margin=round2(net_margin),
        markup=round2(markup),
    )
    logger.debug(
        f"Calculated: subtotal={summary.subtotal}, vat={summary.vat_amount}, "
        f"wht={summary.withholding_tax_amount}, grand_total={summary.grand_total}, "
        f"net_receivable={summary.net_receivable}, net_margin={summary.net_margin}%"
    )

    return FinancialResult(
        summary=summary,
        items=process_line_items(sanitized, default_tax_rate=default_tax, wht_rate=wht),
        warnings=tuple(diagnostics.warnings),
    )
