"""
DocFlow Hooks — Dispatcher
============================
Fire-and-forget delivery of a HookNotification after the document change
has been persisted.

Dispatch behavior:
1. Look up handlers by hook_name
2. Execute handlers sequentially
3. Catch and log each handler failure
4. Continue to the next handler
5. NEVER roll back the document change

This function NEVER raises.
"""

import logging
from typing import Optional

from core.hooks.models import HookNotification
from core.hooks.registry import HookRegistry

logger = logging.getLogger("docflow.hooks")


def notify(notification: HookNotification, registry: Optional[HookRegistry]) -> dict:
    """
    Deliver notification to every registered handler.

    Returns:
        {
            'hook_name': str,
            'document_id': str,
            'handlers_notified': int,
            'handlers_failed': int,
            'failures': list[dict]
        }
    """
    result = {
        "hook_name": notification.hook_name,
        "document_id": notification.document_id,
        "handlers_notified": 0,
        "handlers_failed": 0,
        "failures": [],
    }

    if registry is None:
        return result

    handlers = registry.get_handlers(notification.hook_name)
    if not handlers:
        logger.debug(
            f"No handlers for hook '{notification.hook_name}' "
            f"({notification.document_id})"
        )
        return result

    for handler, subscriber in handlers:
        handler_name = getattr(handler, "__qualname__", str(handler))
        try:
            handler(notification)
            result["handlers_notified"] += 1
        except Exception as exc:
            result["handlers_failed"] += 1
            result["failures"].append({
                "handler": handler_name,
                "subscriber": subscriber,
                "error": str(exc),
                "error_type": type(exc).__name__,
            })
            logger.error(
                f"Hook handler failed: {handler_name} for "
                f"{notification.hook_name} ({notification.document_id}): {exc}",
                exc_info=True,
            )

    return result
