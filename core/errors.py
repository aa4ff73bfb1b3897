"""
FOS Core — Engine Errors
==========================
Error types raised by the pricing and fulfillment engines.

Pure calculators never raise for normal edge cases (zero discount,
zero points, fee-table miss). These errors are for contract
violations the caller must see.
"""


class EngineError(Exception):
    """Base error for all FOS engine operations."""
    pass


class ValidationError(EngineError, ValueError):
    """Input failed structural validation."""

    def __init__(self, field: str, detail: str):
        self.field = field
        self.detail = detail
        super().__init__(f"Invalid {field}: {detail}")


class IneligibleRedemptionError(EngineError):
    """Point redemption requested that the customer cannot make."""

    def __init__(self, requested: int, allowed: int, reason: str):
        self.requested = requested
        self.allowed = allowed
        self.reason = reason
        super().__init__(
            f"Cannot redeem {requested} points (allowed: {allowed}): {reason}"
        )


class InvalidStateTransitionError(EngineError):
    """Workflow transition not permitted from the current state."""

    def __init__(self, workflow: str, from_state: str, to_state: str,
                 allowed=()):
        self.workflow = workflow
        self.from_state = from_state
        self.to_state = to_state
        self.allowed = tuple(sorted(allowed))
        super().__init__(
            f"Invalid {workflow} transition: {from_state} → {to_state}. "
            f"Allowed: {list(self.allowed)}."
        )


class ImmutableEntryError(EngineError):
    """Attempt to edit or delete a system-derived record."""

    def __init__(self, entry_id: str, origin: str, action: str = "edit"):
        self.entry_id = entry_id
        self.origin = origin
        self.action = action
        super().__init__(
            f"Cannot {action} '{entry_id}': derived from {origin}."
        )


class PermissionDeniedError(EngineError):
    """Viewer lacks the role or branch membership for the action."""

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)
