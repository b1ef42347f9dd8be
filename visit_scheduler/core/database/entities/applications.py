"""
Application entity models.

An application is the in-progress form of a booking. It holds a session slot
while the visitor details are completed, and is accepted when the visit is
booked.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from visit_scheduler.core.models.domain import (
    ApplicationStatus,
    UserType,
    VisitRestriction,
    VisitStatus,
    VisitType,
)

from ..base import Base, now


class ApplicationRow(Base, table=True):
    """Entity for a visit application.

    Table: vs_applications
    """

    __tablename__ = "vs_applications"

    id: Optional[int] = Field(default=None, primary_key=True)
    reference: Optional[str] = Field(default=None, max_length=40, unique=True, index=True)
    prison_id: int = Field(foreign_key="vs_prisons.id", index=True)
    prisoner_id: str = Field(max_length=80, index=True)
    session_slot_id: int = Field(foreign_key="vs_session_slots.id", index=True)

    # Reservation
    reserved_slot: bool = Field(default=True)
    visit_type: VisitType = Field(default=VisitType.SOCIAL)
    restriction: VisitRestriction
    reservation_status: VisitStatus = Field(default=VisitStatus.RESERVED)
    application_status: ApplicationStatus = Field(default=ApplicationStatus.IN_PROGRESS, index=True)
    completed: bool = Field(default=False)

    user_type: UserType = Field(default=UserType.STAFF)
    created_by: str = Field(max_length=255)

    # Set once the application has been booked, or when it amends an existing visit
    visit_id: Optional[int] = Field(default=None, foreign_key="vs_visits.id", index=True)

    contact: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    visitors: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    support: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    create_timestamp: datetime = Field(default_factory=now)
    modify_timestamp: datetime = Field(default_factory=now, sa_column_kwargs={"onupdate": now}, index=True)

    def __repr__(self) -> str:
        return f"ApplicationRow(id={self.id}, reference={self.reference}, status={self.application_status})"
