from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from slotguard.services.conflict_rules import ConflictReport


class AppError(Exception):
    """Base class for all application exceptions."""
    retryable = False

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when a proposed schedule entry is structurally invalid."""
    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message, status_code=400, details={"errors": errors or []})
        self.errors = errors or []


class ConflictError(AppError):
    """Raised when a proposed entry collides with persisted entries.

    Carries the whole report so callers can render every reason, not just the first.
    """
    def __init__(self, report: "ConflictReport"):
        summary = ", ".join(reason.message for reason in report.reasons)
        super().__init__(
            f"Schedule conflicts detected: {summary}",
            status_code=409,
            details=report.to_dict(),
        )
        self.report = report


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)


class StoreUnavailableError(AppError):
    """Transient schedule store failure. Safe to retry with backoff."""
    retryable = True

    def __init__(self, message: str = "Schedule store is temporarily unavailable, try again"):
        super().__init__(message, status_code=503, details={"retryable": True})


class StoreTimeoutError(StoreUnavailableError):
    """The store did not answer within the request deadline."""
    def __init__(self, message: str = "Schedule store timed out, try again"):
        super().__init__(message)


class RaceLossError(AppError):
    """The store rejected a write that had passed in-process validation.

    Never reaches the API layer; the validator translates it into a ConflictError.
    """
    def __init__(self):
        super().__init__("Slot was claimed by a concurrent writer", status_code=409)
