"""
DocFlow Financials — Public API
=================================
Deterministic document arithmetic: line items in, summary out.
"""

from core.financials.calculator import compute_financials
from core.financials.line_items import (
    effective_tax_rate,
    effective_withholding_rate,
    process_line_item,
    process_line_items,
)
from core.financials.models import (
    DISCOUNT_FLAT,
    DISCOUNT_PERCENTAGE,
    VALID_DISCOUNT_TYPES,
    CalculationWarning,
    FinancialResult,
    FinancialSummary,
    LineItem,
    ProcessedLineItem,
    coerce_line_items,
)

__all__ = [
    "compute_financials",
    "process_line_item",
    "process_line_items",
    "effective_tax_rate",
    "effective_withholding_rate",
    "DISCOUNT_FLAT",
    "DISCOUNT_PERCENTAGE",
    "VALID_DISCOUNT_TYPES",
    "CalculationWarning",
    "FinancialResult",
    "FinancialSummary",
    "LineItem",
    "ProcessedLineItem",
    "coerce_line_items",
]
