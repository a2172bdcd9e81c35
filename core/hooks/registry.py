"""
DocFlow Hooks — Handler Registry
==================================
Controls which side-effect handlers (activity log, email, inventory) hear
which document hooks.

Rules:
- Hook names follow engine.domain.action format
- Multiple handlers per hook allowed
- Duplicate handler for same hook forbidden
- In-memory only, thread-safe
"""

import logging
from threading import Lock
from typing import Callable

from core.hooks.errors import (
    DuplicateHookHandlerError,
    HookError,
    InvalidHookNameFormat,
)

logger = logging.getLogger("docflow.hooks")


class HookRegistry:
    """
    In-memory registry of hook handlers.

    Each entry maps a hook_name to a list of (handler, subscriber) tuples.
    """

    def __init__(self):
        self._handlers: dict[str, list[tuple[Callable, str]]] = {}
        self._lock = Lock()

    @staticmethod
    def _validate_hook_name_format(hook_name: str) -> None:
        if not hook_name or not isinstance(hook_name, str):
            raise InvalidHookNameFormat(hook_name or "")

        parts = hook_name.strip().split(".")
        if len(parts) < 3 or not all(parts):
            raise InvalidHookNameFormat(hook_name)

    def register(self, hook_name: str, handler: Callable, subscriber: str) -> None:
        """
        Register a handler for a hook.

        Raises:
            InvalidHookNameFormat:     Bad hook name format
            DuplicateHookHandlerError: Handler already registered
        """
        self._validate_hook_name_format(hook_name)

        if not callable(handler):
            raise HookError(f"Handler must be callable, got {type(handler)}.")

        handler_name = getattr(handler, "__qualname__", str(handler))

        with self._lock:
            handlers = self._handlers.setdefault(hook_name, [])
            for existing_handler, _ in handlers:
                if existing_handler is handler:
                    raise DuplicateHookHandlerError(hook_name, handler_name)
            handlers.append((handler, subscriber))

        logger.info(f"Hook handler registered: {handler_name} → {hook_name} ({subscriber})")

    def get_handlers(self, hook_name: str) -> list[tuple[Callable, str]]:
        """Empty list when nobody listens (not an error)."""
        with self._lock:
            return list(self._handlers.get(hook_name, []))

    def handler_count(self, hook_name: str) -> int:
        with self._lock:
            return len(self._handlers.get(hook_name, []))
