"""Error types raised by the visit scheduling services.

Purpose:
- Provide typed exceptions for the booking workflow (capacity, validation,
  expired amendments, migration failures).
- Carry an HTTP-oriented ``status_code`` so the server layer can translate
  them into responses without knowing every subclass.

Usage:
- Catch ``VisitSchedulerError`` for general failures and inspect
  ``status_code`` or ``details``.
"""

from __future__ import annotations

from typing import Any, Optional


class VisitSchedulerError(Exception):
    """Base error for visit scheduler failures.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code associated with the failure.
        details: Optional structured context.
    """

    status_code: int = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ItemNotFoundError(VisitSchedulerError):
    status_code = 404


class VisitNotFoundError(ItemNotFoundError):
    def __init__(self, reference: str) -> None:
        super().__init__(f"Visit reference {reference} not found", details={"reference": reference})


class ApplicationNotFoundError(ItemNotFoundError):
    def __init__(self, reference: str) -> None:
        super().__init__(f"Application reference {reference} not found", details={"reference": reference})


class PrisonNotFoundError(ItemNotFoundError):
    def __init__(self, prison_code: str) -> None:
        super().__init__(f"Prison code {prison_code} not found", details={"prison_code": prison_code})


class VisitValidationError(VisitSchedulerError):
    """Booking or amendment request failed business validation."""


class OverCapacityError(VisitSchedulerError):
    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message, details=details)


class ApplicationExpiredError(VisitSchedulerError):
    def __init__(self, reference: str) -> None:
        super().__init__(f"Application {reference} has expired", details={"reference": reference})


class ExpiredVisitAmendError(VisitSchedulerError):
    """Raised when a visit in the past is changed or cancelled."""


class PrisonNotSupportedError(VisitSchedulerError):
    def __init__(self, prison_code: str) -> None:
        super().__init__(f"Prison with code {prison_code} is not supported", details={"prison_code": prison_code})


class VisitToMigrateError(VisitSchedulerError):
    """Legacy visit could not be migrated."""


class MigrateVisitInFutureError(VisitToMigrateError):
    pass


class MatchSessionTemplateToMigratedVisitError(VisitToMigrateError):
    pass
