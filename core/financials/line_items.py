"""
DocFlow Financials — Line Item Processor
==========================================
Per-line breakdown: amount, item tax, total with tax, and profit figures.

The processed lines are stored on the document so that PDF rendering and
reporting read them instead of recomputing. Margin and markup use the same
formulas as the document summary, at line granularity:

    margin = profit / revenue * 100   (0 when revenue <= 0)
    markup = profit / cost * 100      (0 when cost <= 0)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, NamedTuple, Optional, Tuple

from core.financials.models import LineItem, ProcessedLineItem
from core.money import HUNDRED, ZERO, round2, to_decimal


class LineFigures(NamedTuple):
    """Unrounded per-line figures. The calculator sums these."""

    amount: Decimal
    item_tax: Decimal
    cost: Decimal
    withholding_rate: Decimal


def effective_tax_rate(item: LineItem, default_tax_rate: Any = None) -> Decimal:
    # A zero item rate falls through to the document default.
    item_rate = to_decimal(item.tax_rate)
    if item_rate:
        return item_rate
    return to_decimal(default_tax_rate, ZERO) or ZERO


def effective_withholding_rate(item: LineItem, wht_rate: Any = 0) -> Decimal:
    if item.subject_to_withholding is False:
        return ZERO
    override = to_decimal(item.wht_rate)
    if override is not None:
        return override
    return to_decimal(wht_rate, ZERO)


def line_figures(
    item: LineItem,
    *,
    default_tax_rate: Any = None,
    wht_rate: Any = 0,
) -> LineFigures:
    quantity = to_decimal(item.quantity, ZERO)
    amount = quantity * to_decimal(item.unit_price, ZERO)
    item_tax = amount * effective_tax_rate(item, default_tax_rate) / HUNDRED
    cost = quantity * to_decimal(item.unit_cost, ZERO)
    return LineFigures(
        amount=amount,
        item_tax=item_tax,
        cost=cost,
        withholding_rate=effective_withholding_rate(item, wht_rate),
    )


def process_line_item(
    item: LineItem,
    *,
    default_tax_rate: Optional[Any] = None,
    wht_rate: Any = 0,
) -> ProcessedLineItem:
    figures = line_figures(
        item,
        default_tax_rate=default_tax_rate,
        wht_rate=wht_rate,
    )
    revenue = figures.amount
    profit = revenue - figures.cost
    margin = profit / revenue * HUNDRED if revenue > 0 else ZERO
    markup = profit / figures.cost * HUNDRED if figures.cost > 0 else ZERO

    return ProcessedLineItem(
        item=item,
        amount=round2(figures.amount),
        item_tax=round2(figures.item_tax),
        total_with_tax=round2(figures.amount + figures.item_tax),
        withholding_rate=round2(figures.withholding_rate),
        revenue=round2(revenue),
        cost=round2(figures.cost),
        profit=round2(profit),
        margin=round2(margin),
        markup=round2(markup),
    )


def process_line_items(
    items: Iterable[LineItem],
    *,
    default_tax_rate: Optional[Any] = None,
    wht_rate: Any = 0,
) -> Tuple[ProcessedLineItem, ...]:
    return tuple(
        process_line_item(
            item,
            default_tax_rate=default_tax_rate,
            wht_rate=wht_rate,
        )
        for item in items
    )
