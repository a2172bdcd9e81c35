"""DocFlow Conversion Engine - policies."""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import RejectionReason
from core.documents.models import Quotation
from engines.quotation.policies import (
    quotation_must_be_convertible_policy,
    quotation_must_exist_policy,
    quotation_must_not_be_converted_policy,
)


def conversion_must_be_allowed_policy(
    quotation: Optional[Quotation], quotation_id: str,
) -> RejectionReason | None:
    """First failing check wins: missing, then already converted, then status."""
    rejection = quotation_must_exist_policy(quotation, quotation_id)
    if rejection is not None:
        return rejection
    for policy in (
        quotation_must_not_be_converted_policy,
        quotation_must_be_convertible_policy,
    ):
        rejection = policy(quotation)
        if rejection is not None:
            return rejection
    return None
