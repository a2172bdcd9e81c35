"""DocFlow Quotation Engine - policies."""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.documents.models import Quotation, QuotationStatus

QUOTATION_TRANSITIONS = {
    QuotationStatus.DRAFT: frozenset({QuotationStatus.SENT}),
    QuotationStatus.SENT: frozenset({
        QuotationStatus.ACCEPTED,
        QuotationStatus.REJECTED,
        QuotationStatus.EXPIRED,
    }),
    QuotationStatus.ACCEPTED: frozenset(),
    QuotationStatus.REJECTED: frozenset(),
    QuotationStatus.EXPIRED: frozenset(),
}

CONVERTIBLE_STATUSES = frozenset({QuotationStatus.SENT, QuotationStatus.ACCEPTED})


def quotation_must_exist_policy(
    quotation: Optional[Quotation], quotation_id: str,
) -> RejectionReason | None:
    if quotation is None:
        return RejectionReason(
            code=ReasonCode.QUOTATION_NOT_FOUND,
            message=f"Quotation '{quotation_id}' not found.",
            policy_name="quotation_must_exist_policy",
        )
    return None


def quotation_must_not_be_converted_policy(quotation: Quotation) -> RejectionReason | None:
    if quotation.converted_to_invoice:
        return RejectionReason(
            code=ReasonCode.QUOTATION_ALREADY_CONVERTED,
            message=(
                f"Quotation '{quotation.quotation_id}' was already converted "
                f"to invoice '{quotation.invoice_id}'."
            ),
            policy_name="quotation_must_not_be_converted_policy",
        )
    return None


def quotation_must_be_editable_policy(quotation: Quotation) -> RejectionReason | None:
    if quotation.is_locked:
        state = "converted" if quotation.converted_to_invoice else quotation.status.value
        return RejectionReason(
            code=ReasonCode.QUOTATION_LOCKED,
            message=f"Quotation '{quotation.quotation_id}' is {state} and can no longer be edited.",
            policy_name="quotation_must_be_editable_policy",
        )
    return None


def quotation_must_be_removable_policy(quotation: Quotation) -> RejectionReason | None:
    if quotation.converted_to_invoice or quotation.status == QuotationStatus.ACCEPTED:
        return RejectionReason(
            code=ReasonCode.QUOTATION_LOCKED,
            message=f"Quotation '{quotation.quotation_id}' is accepted or converted and cannot be removed.",
            policy_name="quotation_must_be_removable_policy",
        )
    return None


def quotation_transition_must_be_allowed_policy(
    quotation: Quotation,
    new_status: QuotationStatus,
    *,
    enforce: bool = True,
) -> RejectionReason | None:
    if not enforce:
        return None
    if new_status not in QUOTATION_TRANSITIONS[quotation.status]:
        return RejectionReason(
            code=ReasonCode.INVALID_STATUS_TRANSITION,
            message=(
                f"Quotation '{quotation.quotation_id}' cannot move from "
                f"{quotation.status.value} to {new_status.value}."
            ),
            policy_name="quotation_transition_must_be_allowed_policy",
        )
    return None


def quotation_must_be_convertible_policy(quotation: Quotation) -> RejectionReason | None:
    if quotation.status not in CONVERTIBLE_STATUSES:
        return RejectionReason(
            code=ReasonCode.QUOTATION_NOT_CONVERTIBLE,
            message=(
                f"Quotation '{quotation.quotation_id}' is {quotation.status.value}; "
                f"only Sent or Accepted quotations can be converted."
            ),
            policy_name="quotation_must_be_convertible_policy",
        )
    return None
