"""DocFlow Quotation Engine - application service."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from functools import partial
from typing import Any, Optional, Tuple

from core.config.rules import ConfigStore, InMemoryConfigStore, rules_from_settings
from core.document_store import filter_documents, page_documents, status_stats
from core.document_store.protocol import DocumentStore
from core.documents.errors import raise_for_rejection
from core.documents.models import DOCUMENT_QUOTATION, Quotation, QuotationStatus
from core.documents.numbering import NumberingService
from core.documents.requests import (
    build_request,
    request_error,
    validate_discount,
    validate_text,
)
from core.financials import compute_financials
from core.hooks import HookRegistry, notify
from core.parties import (
    PartyDirectory,
    business_must_exist_policy,
    customer_must_exist_policy,
)
from core.time.clock import Clock, get_default_clock
from engines.quotation.commands import (
    QuotationCreateRequest,
    QuotationUpdateRequest,
    coerce_quotation_status,
)
from engines.quotation.events import (
    QUOTATION_CREATED,
    QUOTATION_REMOVED,
    QUOTATION_STATUS_CHANGED,
    QUOTATION_UPDATED,
    build_quotation_notification,
)
from engines.quotation.policies import (
    quotation_must_be_editable_policy,
    quotation_must_be_removable_policy,
    quotation_must_exist_policy,
    quotation_transition_must_be_allowed_policy,
)

logger = logging.getLogger("docflow.quotation")

STATUS_STAMPS = {
    QuotationStatus.SENT: "sent_date",
    QuotationStatus.ACCEPTED: "accepted_date",
    QuotationStatus.REJECTED: "rejected_date",
    QuotationStatus.EXPIRED: "expired_date",
}


def _financial_changes(result) -> dict:
    return {
        "items": result.items,
        "summary": result.summary,
        "calculation_warnings": result.warnings,
    }


class QuotationService:
    """
    Create, edit, transition and remove quotations for one installation.

    Collaborators are injected: store (persistence), parties (tenant and
    customer existence), numbering (sequential ids), hooks (side effects
    fired after commit) and clock (status stamps).
    """

    def __init__(
        self,
        *,
        store: DocumentStore,
        parties: PartyDirectory,
        numbering: NumberingService,
        config_store: Optional[ConfigStore] = None,
        hooks: Optional[HookRegistry] = None,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self._parties = parties
        self._numbering = numbering
        self._config_store = config_store or InMemoryConfigStore(rules_from_settings())
        self._hooks = hooks
        self._clock = clock or get_default_clock()

    # ── helpers ───────────────────────────────────────────────

    def _require_business(self, business_id: uuid.UUID) -> None:
        raise_for_rejection(business_must_exist_policy(business_id, self._parties))

    def _notify_after_commit(self, hook_name: str, quotation: Quotation, *,
                             actor_id: Optional[str], **extra) -> None:
        notification = build_quotation_notification(
            hook_name,
            quotation,
            actor_id=actor_id,
            occurred_at=self._clock.now_utc(),
            **extra,
        )
        self._store.on_commit(partial(notify, notification, self._hooks))

    def _load_for_write(self, business_id: uuid.UUID, quotation_id: str) -> Quotation:
        quotation = self._store.lock_quotation(business_id, quotation_id)
        raise_for_rejection(quotation_must_exist_policy(quotation, quotation_id))
        return quotation

    # ── commands ──────────────────────────────────────────────

    def create(self, request: Any, business_id: uuid.UUID, actor_id: str) -> Quotation:
        if isinstance(request, dict):
            request = build_request(QuotationCreateRequest, request)
        validate_text("actor_id", actor_id, required=True)
        self._require_business(business_id)
        raise_for_rejection(
            customer_must_exist_policy(request.customer_id, business_id, self._parties)
        )

        rules = self._config_store.get_document_rules(business_id)
        result = compute_financials(
            request.items,
            discount=request.discount,
            discount_type=request.discount_type,
            default_tax_rate=request.default_tax_rate,
            vat_rate=request.vat_rate,
            wht_rate=request.wht_rate,
        )
        now = self._clock.now_utc()

        with self._store.atomic():
            quotation = Quotation(
                quotation_id=self._numbering.next_id(business_id, DOCUMENT_QUOTATION),
                business_id=business_id,
                customer_id=request.customer_id,
                created_by=actor_id,
                created_at=now,
                discount=request.discount,
                discount_type=request.discount_type,
                default_tax_rate=request.default_tax_rate,
                vat_rate=request.vat_rate,
                wht_rate=request.wht_rate,
                currency=request.currency or rules.currency,
                valid_until=request.valid_until,
                notes=request.notes,
                terms=request.terms,
                updated_at=now,
                **_financial_changes(result),
            )
            self._store.add_quotation(quotation)
            self._notify_after_commit(QUOTATION_CREATED, quotation, actor_id=actor_id)

        logger.info(
            f"Quotation {quotation.quotation_id} created for customer "
            f"{quotation.customer_id} (business {business_id}, "
            f"grand_total={quotation.summary.grand_total})"
        )
        return quotation

    def update(self, quotation_id: str, patch: Any, business_id: uuid.UUID,
               *, actor_id: Optional[str] = None) -> Quotation:
        if isinstance(patch, dict):
            patch = build_request(QuotationUpdateRequest, patch)
        self._require_business(business_id)
        if patch.customer_id is not None:
            raise_for_rejection(
                customer_must_exist_policy(patch.customer_id, business_id, self._parties)
            )

        with self._store.atomic():
            quotation = self._load_for_write(business_id, quotation_id)
            raise_for_rejection(quotation_must_be_editable_policy(quotation))

            changes = {
                name: getattr(patch, name)
                for name in ("customer_id", "valid_until", "notes", "terms")
                if getattr(patch, name) is not None
            }
            if patch.changes_financials:
                merged = {
                    name: getattr(patch, name) if getattr(patch, name) is not None
                    else getattr(quotation, name)
                    for name in (
                        "discount", "discount_type", "default_tax_rate",
                        "vat_rate", "wht_rate",
                    )
                }
                merged["discount"] = validate_discount(merged["discount"], merged["discount_type"])
                items = patch.items if patch.items is not None else quotation.line_items
                result = compute_financials(items, **merged)
                changes.update(merged)
                changes.update(_financial_changes(result))

            updated = replace(quotation, updated_at=self._clock.now_utc(), **changes)
            self._store.save_quotation(updated)
            self._notify_after_commit(QUOTATION_UPDATED, updated, actor_id=actor_id)

        logger.info(
            f"Quotation {quotation_id} updated (business {business_id}, "
            f"recalculated={patch.changes_financials})"
        )
        return updated

    def update_status(self, quotation_id: str, status: Any, business_id: uuid.UUID,
                      *, actor_id: Optional[str] = None) -> Quotation:
        new_status = coerce_quotation_status(status)
        self._require_business(business_id)
        rules = self._config_store.get_document_rules(business_id)

        with self._store.atomic():
            quotation = self._load_for_write(business_id, quotation_id)
            raise_for_rejection(
                quotation_transition_must_be_allowed_policy(
                    quotation,
                    new_status,
                    enforce=rules.enforce_status_transitions,
                )
            )
            now = self._clock.now_utc()
            changes = {"status": new_status, "updated_at": now}
            stamp = STATUS_STAMPS.get(new_status)
            if stamp is not None:
                changes[stamp] = now

            updated = replace(quotation, **changes)
            self._store.save_quotation(updated)
            self._notify_after_commit(
                QUOTATION_STATUS_CHANGED,
                updated,
                actor_id=actor_id,
                previous_status=quotation.status.value,
            )

        logger.info(
            f"Quotation {quotation_id} status {quotation.status.value} → "
            f"{new_status.value} (business {business_id})"
        )
        return updated

    def remove(self, quotation_id: str, business_id: uuid.UUID,
               *, actor_id: Optional[str] = None) -> None:
        self._require_business(business_id)
        with self._store.atomic():
            quotation = self._load_for_write(business_id, quotation_id)
            raise_for_rejection(quotation_must_be_removable_policy(quotation))
            self._store.delete_quotation(business_id, quotation_id)
            self._notify_after_commit(QUOTATION_REMOVED, quotation, actor_id=actor_id)

        logger.info(f"Quotation {quotation_id} removed (business {business_id})")

    # ── queries ───────────────────────────────────────────────

    def get(self, quotation_id: str, business_id: uuid.UUID) -> Quotation:
        self._require_business(business_id)
        quotation = self._store.get_quotation(business_id, quotation_id)
        raise_for_rejection(quotation_must_exist_policy(quotation, quotation_id))
        return quotation

    def list(
        self,
        business_id: uuid.UUID,
        *,
        search: Optional[str] = None,
        status: Any = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Tuple[Tuple[Quotation, ...], Optional[str]]:
        """Return (page, next_cursor), oldest first."""
        self._require_business(business_id)
        wanted = coerce_quotation_status(status) if status is not None else None
        records = filter_documents(
            self._store.list_quotations(business_id), search=search, status=wanted,
        )
        try:
            return page_documents(records, limit=limit, cursor=cursor)
        except ValueError as exc:
            raise request_error(str(exc)) from exc

    def stats(self, business_id: uuid.UUID) -> dict:
        self._require_business(business_id)
        return status_stats(self._store.list_quotations(business_id), QuotationStatus)
