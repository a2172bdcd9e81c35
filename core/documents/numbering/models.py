"""
DocFlow Documents - Numbering Models
======================================
NumberingPolicy: how a sequence position becomes a document number.

Doctrine:
- Same policy + sequence position → same document number (deterministic).
- Padding is a minimum width. Sequence 1000 under padding 3 is "1000".
- The sequence itself lives in a SequenceCounter, never here.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.config.rules import DocumentRules
from core.documents.models import DOCUMENT_INVOICE, DOCUMENT_QUOTATION, VALID_DOCUMENT_TYPES


@dataclass(frozen=True)
class NumberingPolicy:
    """
    Declares how document numbers are formatted.

    Fields:
        business_id_str: the business this policy belongs to (str form of UUID)
        doc_type: QUOTATION or INVOICE
        prefix: prepended before the sequence (e.g. "QUOT-", "INV-")
        padding: minimum digit width for the sequence number (e.g. 5 → "00001")
        suffix: appended after the sequence
    """
    business_id_str: str
    doc_type: str
    prefix: str = ""
    padding: int = 5
    suffix: str = ""

    def __post_init__(self):
        if not self.business_id_str or not isinstance(self.business_id_str, str):
            raise ValueError("business_id_str must be a non-empty string.")
        if self.doc_type not in VALID_DOCUMENT_TYPES:
            raise ValueError(
                f"doc_type '{self.doc_type}' is not valid. "
                f"Must be one of: {sorted(VALID_DOCUMENT_TYPES)}"
            )
        if not isinstance(self.prefix, str):
            raise ValueError("prefix must be a string.")
        if not isinstance(self.suffix, str):
            raise ValueError("suffix must be a string.")
        if not isinstance(self.padding, int) or self.padding < 1:
            raise ValueError("padding must be int >= 1.")

    def format_number(self, sequence: int) -> str:
        """
        Format a document number from a sequence position.

        Returns:
            e.g. "INV-00042"
        """
        if not isinstance(sequence, int) or sequence < 1:
            raise ValueError("sequence must be int >= 1.")
        padded = str(sequence).zfill(self.padding)
        return f"{self.prefix}{padded}{self.suffix}"


def policy_from_rules(
    rules: DocumentRules,
    *,
    business_id_str: str,
    doc_type: str,
) -> NumberingPolicy:
    """Resolve the numbering policy for doc_type from a business's rules."""
    if doc_type == DOCUMENT_QUOTATION:
        prefix, padding = rules.quotation_prefix, rules.quotation_padding
    elif doc_type == DOCUMENT_INVOICE:
        prefix, padding = rules.invoice_prefix, rules.invoice_padding
    else:
        raise ValueError(f"doc_type '{doc_type}' has no numbering rules.")
    return NumberingPolicy(
        business_id_str=business_id_str,
        doc_type=doc_type,
        prefix=prefix,
        padding=padding,
    )
