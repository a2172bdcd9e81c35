"""
DocFlow – Django Settings (Infrastructure Only)
=================================================
Django hosts the persistence layer (core.document_store) and the LOGGING
config. The DOCFLOW dict seeds the DocumentRules of every service built
without an explicit config_store (core.config.rules.rules_from_settings).
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("DOCFLOW_SECRET_KEY", "docflow-dev-key-replace-before-deployment")

DEBUG = os.environ.get("DOCFLOW_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # ── DocFlow Modules ───────────────────────────────────
    "core.document_store",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite by default; DOCFLOW_DB_NAME points it at another file.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DOCFLOW_DB_NAME", str(BASE_DIR / "db.sqlite3")),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
# Document tables use UUIDs explicitly. This is a Django fallback only.
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "docflow": {
            "handlers": ["console"],
            "level": os.environ.get("DOCFLOW_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}

# ── DocFlow Engine Defaults ───────────────────────────────────
# Per-business overrides live in the ConfigStore.
DOCFLOW = {
    "QUOTATION_PREFIX": "QUOT-",
    "QUOTATION_PADDING": 3,
    "INVOICE_PREFIX": "INV-",
    "INVOICE_PADDING": 5,
    "INVOICE_DUE_DAYS": 30,
    "ENFORCE_STATUS_TRANSITIONS": True,
    "CURRENCY": "USD",
}
