"""
Application I/O models for API requests.

Applications reserve a session slot ahead of booking. These models define the
contract for creating an application and for moving an unfinished one to a
different slot.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field

from ..base import BaseSchema
from ..domain.enums import UserType, VisitRestriction
from ..domain.models import Contact, Visitor, VisitorSupport


class CreateApplication(BaseSchema):
    """Schema for reserving a slot through a new application."""

    prisoner_id: str = Field(description="Prisoner number")
    session_template_reference: str = Field(description="Session template the slot belongs to")
    session_date: date = Field(description="Date of the session")
    application_restriction: VisitRestriction = Field(description="Open or closed visit")
    visit_contact: Optional[Contact] = None
    visitors: List[Visitor] = Field(min_length=1, description="Visitors attending")
    visitor_support: Optional[VisitorSupport] = None
    actioned_by: str = Field(description="User creating the application")
    user_type: UserType = UserType.STAFF
    allow_over_booking: bool = False


class ChangeApplication(BaseSchema):
    """Schema for changing an unfinished application."""

    session_template_reference: str
    session_date: date
    application_restriction: Optional[VisitRestriction] = None
    visit_contact: Optional[Contact] = None
    visitors: Optional[List[Visitor]] = None
    visitor_support: Optional[VisitorSupport] = None
    allow_over_booking: bool = False
