"""
DocFlow Hooks — Public API
============================
Side-effect notifications fired after a document change commits.
Handler failures are logged and never roll back the change.
"""

from core.hooks.dispatcher import notify
from core.hooks.errors import (
    DuplicateHookHandlerError,
    HookError,
    InvalidHookNameFormat,
)
from core.hooks.models import HookNotification
from core.hooks.registry import HookRegistry

__all__ = [
    "HookNotification",
    "HookRegistry",
    "notify",
    "HookError",
    "InvalidHookNameFormat",
    "DuplicateHookHandlerError",
]
