"""
DocFlow Hooks — Errors
========================
Raised at registration time only. Dispatch never raises.
"""


class HookError(Exception):
    """Base error for hook registration."""
    pass


class InvalidHookNameFormat(HookError):
    """Hook name does not follow engine.domain.action format."""

    def __init__(self, hook_name: str):
        self.hook_name = hook_name
        super().__init__(
            f"Hook name '{hook_name}' does not follow "
            f"engine.domain.action format."
        )


class DuplicateHookHandlerError(HookError):
    """Same handler already registered for this hook."""

    def __init__(self, hook_name: str, handler_name: str):
        self.hook_name = hook_name
        self.handler_name = handler_name
        super().__init__(
            f"Handler '{handler_name}' already registered "
            f"for hook '{hook_name}'."
        )
