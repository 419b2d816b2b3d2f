from __future__ import annotations

from typing import Any, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``errors`` carries per-item details (``{"index": i, "error": "..."}``)
    when a whole batch was rejected.
    """

    def __init__(self, message: str, *, errors: Optional[Sequence[dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class NotFoundError(DomainError):
    """Raised when a subject or course reference does not resolve."""


class PeriodLocked(DomainError):
    """Raised when a write targets a closed month."""

    def __init__(self, period_month: str):
        super().__init__(f"Month {period_month} is closed; re-open it before recording changes")
        self.period_month = period_month


class SourceUnavailable(DomainError):
    """Raised when the backing store cannot be reached."""


class StoreTimeout(SourceUnavailable):
    """Raised when a backing store call exceeds its time budget."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
