"""
DocFlow Conversion Engine - quotation → invoice.

The invoice write and the quotation flip share one store.atomic() block.
The quotation is read under lock inside that block, so of two concurrent
conversions exactly one passes the converted check.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from functools import partial
from typing import Optional

from core.config.rules import ConfigStore, InMemoryConfigStore, rules_from_settings
from core.document_store.protocol import DocumentStore
from core.documents.errors import raise_for_rejection
from core.documents.models import DOCUMENT_INVOICE, Invoice, QuotationStatus
from core.documents.numbering import NumberingService
from core.hooks import HookRegistry, notify
from core.money import ZERO
from core.parties import PartyDirectory, business_must_exist_policy
from core.time.clock import Clock, add_days, get_default_clock
from engines.conversion.events import build_conversion_notification
from engines.conversion.policies import conversion_must_be_allowed_policy
from engines.invoicing.services import balance_due

logger = logging.getLogger("docflow.conversion")


class ConversionCoordinator:

    def __init__(
        self,
        *,
        store: DocumentStore,
        numbering: NumberingService,
        parties: Optional[PartyDirectory] = None,
        config_store: Optional[ConfigStore] = None,
        hooks: Optional[HookRegistry] = None,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self._numbering = numbering
        self._parties = parties
        self._config_store = config_store or InMemoryConfigStore(rules_from_settings())
        self._hooks = hooks
        self._clock = clock or get_default_clock()

    def convert_to_invoice(
        self,
        quotation_id: str,
        business_id: uuid.UUID,
        actor_id: str = "system",
    ) -> Invoice:
        if self._parties is not None:
            raise_for_rejection(business_must_exist_policy(business_id, self._parties))
        rules = self._config_store.get_document_rules(business_id)

        with self._store.atomic():
            quotation = self._store.lock_quotation(business_id, quotation_id)
            raise_for_rejection(conversion_must_be_allowed_policy(quotation, quotation_id))

            now = self._clock.now_utc()
            # Items and summary are carried over as priced; no recompute.
            invoice = Invoice(
                invoice_id=self._numbering.next_id(business_id, DOCUMENT_INVOICE),
                business_id=business_id,
                customer_id=quotation.customer_id,
                created_by=actor_id,
                created_at=now,
                items=quotation.items,
                summary=quotation.summary,
                calculation_warnings=quotation.calculation_warnings,
                discount=quotation.discount,
                discount_type=quotation.discount_type,
                default_tax_rate=quotation.default_tax_rate,
                vat_rate=quotation.vat_rate,
                wht_rate=quotation.wht_rate,
                currency=quotation.currency,
                quotation_id=quotation.quotation_id,
                issued_date=now,
                due_date=add_days(now, rules.invoice_due_days),
                balance_due=balance_due(quotation.summary, ZERO),
                notes=quotation.notes,
                terms=quotation.terms,
                updated_at=now,
            )
            self._store.add_invoice(invoice)
            converted = replace(
                quotation,
                converted_to_invoice=True,
                invoice_id=invoice.invoice_id,
                status=QuotationStatus.ACCEPTED,
                accepted_date=quotation.accepted_date or now,
                updated_at=now,
            )
            self._store.save_quotation(converted)

            notification = build_conversion_notification(
                converted, invoice, actor_id=actor_id, occurred_at=now,
            )
            self._store.on_commit(partial(notify, notification, self._hooks))

        logger.info(
            f"Quotation {quotation_id} converted to invoice {invoice.invoice_id} "
            f"(business {business_id}, net_receivable={invoice.summary.net_receivable})"
        )
        return invoice
