"""Typed exceptions for the timesheet review core.

Every error carries a machine-readable ``code``, a human-readable
``message`` and structured ``details``. ``details["guard"]`` names the
check that failed so callers can render an actionable message instead of
a generic failure.

    ReviewError (base)
    |
    +-- PermissionDenied     guard failed before any remote call
    +-- InvalidTransition    state machine guard failed
    +-- ValidationFailed     week warnings at submit, short rejection reason
    +-- EmptyBatch           bulk action with no timesheet ids
    +-- RemoteFailure        the remote call itself failed

Only RemoteFailure is ever produced after a remote call; the others are
raised locally before the network is touched.
"""

from typing import Any, Dict, List, Optional


class ReviewError(Exception):
    """Base class for all review core errors."""

    code: str = "REVIEW_ERROR"

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details: Dict[str, Any] = details
        super().__init__(message)

    @property
    def guard(self) -> Optional[str]:
        """Name of the guard that failed, if known."""
        return self.details.get("guard")

    def describe(self) -> str:
        """Return a one-line description used in batch failure reports."""
        return f"{type(self).__name__}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logs and API responses."""
        return {"code": self.code, "message": self.message, "details": self.details}


class PermissionDenied(ReviewError):
    """The actor is not allowed to perform the operation."""

    code = "PERMISSION_DENIED"


class InvalidTransition(ReviewError):
    """The timesheet is not in a state the transition may start from."""

    code = "INVALID_TRANSITION"


class ValidationFailed(ReviewError):
    """Input failed validation (week warnings, entry bounds, reason length)."""

    code = "VALIDATION_FAILED"

    def __init__(self, message: str, warnings: Optional[List[str]] = None, **details):
        super().__init__(message, **details)
        self.warnings: List[str] = list(warnings or [])
        if self.warnings:
            self.details["warnings"] = self.warnings

    def describe(self) -> str:
        if not self.warnings:
            return super().describe()
        return f"{super().describe()} ({'; '.join(self.warnings)})"


class EmptyBatch(ReviewError):
    """A bulk action was requested without any timesheet ids."""

    code = "EMPTY_BATCH"

    def __init__(self, message: str = "No timesheets selected", **details):
        details.setdefault("guard", "non_empty_batch")
        super().__init__(message, **details)


class RemoteFailure(ReviewError):
    """The remote timesheet API call failed.

    The description is opaque to the core; it is never retried here since
    blindly repeating an approve or reject could apply it twice.
    """

    code = "REMOTE_FAILURE"

    def __init__(self, message: str, operation: Optional[str] = None, **details):
        if operation:
            details["operation"] = operation
        details.setdefault("guard", "remote_call")
        super().__init__(message, **details)
        self.operation = operation
