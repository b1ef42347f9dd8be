"""
Visit I/O models for API requests.

Covers booking an application and cancelling a booked visit.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..base import BaseSchema
from ..domain.enums import ApplicationMethodType, OutcomeStatus, UserType


class BookingRequest(BaseSchema):
    """Schema for booking an application."""

    actioned_by: str
    application_method_type: ApplicationMethodType = ApplicationMethodType.NOT_KNOWN
    allow_over_booking: bool = False
    user_type: UserType = UserType.STAFF
    is_request_booking: bool = Field(default=False, description="Hold the booking for staff approval")


class Outcome(BaseSchema):
    outcome_status: OutcomeStatus
    text: Optional[str] = None


class CancelVisit(BaseSchema):
    """Schema for cancelling a visit."""

    cancel_outcome: Outcome
    actioned_by: str
    user_type: UserType = UserType.STAFF
    application_method_type: ApplicationMethodType = ApplicationMethodType.NOT_KNOWN
