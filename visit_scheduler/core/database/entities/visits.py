"""
Visit entity models.

This module contains the database entity for a booked (or cancelled) visit.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from visit_scheduler.core.models.domain import (
    OutcomeStatus,
    UserType,
    VisitRestriction,
    VisitStatus,
    VisitSubStatus,
    VisitType,
)

from ..base import Base, now


class VisitRow(Base, table=True):
    """Entity for a visit.

    Table: vs_visits
    """

    __tablename__ = "vs_visits"

    id: Optional[int] = Field(default=None, primary_key=True)
    reference: Optional[str] = Field(default=None, max_length=40, unique=True, index=True)
    prison_id: int = Field(foreign_key="vs_prisons.id", index=True)
    prisoner_id: str = Field(max_length=80, index=True)
    session_slot_id: int = Field(foreign_key="vs_session_slots.id", index=True)

    visit_type: VisitType = Field(default=VisitType.SOCIAL)
    visit_room: str = Field(max_length=255)
    visit_restriction: VisitRestriction

    visit_status: VisitStatus = Field(index=True)
    visit_sub_status: VisitSubStatus = Field(index=True)
    outcome_status: Optional[OutcomeStatus] = Field(default=None)
    user_type: UserType = Field(default=UserType.STAFF)

    main_contact_name: Optional[str] = Field(default=None, max_length=255)
    main_contact_phone: Optional[str] = Field(default=None, max_length=40)
    main_contact_email: Optional[str] = Field(default=None, max_length=255)

    visitors: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    support: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    notes: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    legacy_lead_visitor_id: Optional[int] = Field(default=None)

    create_timestamp: datetime = Field(default_factory=now)
    modify_timestamp: datetime = Field(default_factory=now, sa_column_kwargs={"onupdate": now})

    def __repr__(self) -> str:
        return f"VisitRow(id={self.id}, reference={self.reference}, status={self.visit_status})"
