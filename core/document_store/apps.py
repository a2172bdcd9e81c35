"""
DocFlow Core — Document Store App Configuration
=================================================
ORM persistence for quotations, invoices and their number sequences.

This app:
- Persists document snapshots (JSON) with indexed lookup columns
- Holds the per-business, per-doc-type sequence counters

This app does NOT:
- Compute financial figures
- Decide lifecycle transitions
"""

from django.apps import AppConfig


class DocumentStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.document_store"
    label = "document_store"
    verbose_name = "DocFlow Document Store"
