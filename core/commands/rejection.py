"""
DocFlow Command Layer — Rejection Model
==========================================
Structured rejection reasons for denied document operations.

Policies return a RejectionReason (or None). Services turn a reason into
the matching typed error from core.documents.errors.

Every rejection must be:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Traceable to the policy that produced it (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a rejected operation.

    Fields:
        code:        Machine-readable rejection code (e.g. 'QUOTATION_CONVERTED').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Not found ─────────────────────────────────────────────
    BUSINESS_NOT_FOUND = "BUSINESS_NOT_FOUND"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    QUOTATION_NOT_FOUND = "QUOTATION_NOT_FOUND"
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"

    # ── Conflict ──────────────────────────────────────────────
    QUOTATION_ALREADY_CONVERTED = "QUOTATION_ALREADY_CONVERTED"
    DUPLICATE_DOCUMENT_NUMBER = "DUPLICATE_DOCUMENT_NUMBER"

    # ── Invalid state ─────────────────────────────────────────
    QUOTATION_LOCKED = "QUOTATION_LOCKED"
    QUOTATION_NOT_CONVERTIBLE = "QUOTATION_NOT_CONVERTIBLE"
    INVOICE_PAID = "INVOICE_PAID"
    INVOICE_NOT_PAYABLE = "INVOICE_NOT_PAYABLE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    PAYMENTS_EXCEED_TOTAL = "PAYMENTS_EXCEED_TOTAL"

    # ── Validation ────────────────────────────────────────────
    INVALID_LINE_ITEM = "INVALID_LINE_ITEM"
    INVALID_PAYMENT = "INVALID_PAYMENT"
    INVALID_REQUEST = "INVALID_REQUEST"
