"""
Domain errors raised by the ledger and progress engines.

Each error carries a machine-readable ``code`` and an HTTP status used by
the adapter in ``skillverse.core.error_handlers``.
"""

from typing import Any, Dict, Optional


class LedgerError(Exception):
    """Base class for all expected, user-facing ledger outcomes."""

    code = "ledger_error"
    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    @property
    def extra(self) -> Dict[str, Any]:
        """Structured fields added to the error response."""
        return {}


class NotFoundError(LedgerError):
    """A course, lesson, enrollment or user does not exist."""

    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, resource_id: Any = None, message: Optional[str] = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(message or f"{resource} not found")


class InvalidStateError(LedgerError):
    """The action targets something that is not eligible, e.g. an unpublished course."""

    code = "invalid_state"


class ConflictError(LedgerError):
    """The action would duplicate an existing record."""

    code = "conflict"
    status_code = 409


class InsufficientFundsError(LedgerError):
    """Balance is below the points required for the action."""

    code = "insufficient_funds"

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            f"Not enough points. You need {required} points but only have {available}."
        )

    @property
    def extra(self) -> Dict[str, Any]:
        return {"required": self.required, "available": self.available}


class InternalError(LedgerError):
    """The transaction did not commit. Details are only logged server-side."""

    code = "internal_error"
    status_code = 500
