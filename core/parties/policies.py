"""DocFlow Core Parties - existence policies shared by both lifecycles."""

from __future__ import annotations

import uuid

from core.commands.rejection import ReasonCode, RejectionReason
from core.parties.directory import PartyDirectory


def business_must_exist_policy(
    business_id: uuid.UUID, parties: PartyDirectory,
) -> RejectionReason | None:
    if not parties.business_exists(business_id):
        return RejectionReason(
            code=ReasonCode.BUSINESS_NOT_FOUND,
            message=f"Business '{business_id}' not found.",
            policy_name="business_must_exist_policy",
        )
    return None


def customer_must_exist_policy(
    customer_id: str, business_id: uuid.UUID, parties: PartyDirectory,
) -> RejectionReason | None:
    if not parties.customer_exists(customer_id, business_id):
        return RejectionReason(
            code=ReasonCode.CUSTOMER_NOT_FOUND,
            message=f"Customer '{customer_id}' not found in business '{business_id}'.",
            policy_name="customer_must_exist_policy",
        )
    return None
