"""
Session template entity models.

A session template is the recurring definition visits are booked against:
day of week, times, capacities and which prisoners may use it. Eligibility
groups are stored as JSON documents on the template row.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from visit_scheduler.core.models.domain import DayOfWeek, VisitType

from ..base import Base, now


class SessionTemplateRow(Base, table=True):
    """Entity for a recurring visit session.

    Table: vs_session_templates
    """

    __tablename__ = "vs_session_templates"

    id: Optional[int] = Field(default=None, primary_key=True)
    reference: Optional[str] = Field(default=None, max_length=40, unique=True, index=True)
    prison_id: int = Field(foreign_key="vs_prisons.id", index=True)

    name: str = Field(default="", max_length=100)
    visit_room: str = Field(max_length=255)
    visit_type: VisitType = Field(default=VisitType.SOCIAL)

    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    valid_from_date: date
    valid_to_date: Optional[date] = Field(default=None)

    open_capacity: int = Field(default=0)
    closed_capacity: int = Field(default=0)
    weekly_frequency: int = Field(default=1)
    active: bool = Field(default=True, index=True)

    include_location_group_type: bool = Field(default=True)
    include_category_group_type: bool = Field(default=True)
    include_incentive_group_type: bool = Field(default=True)

    location_groups: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    category_groups: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    incentive_groups: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    exclude_dates: List[str] = Field(default_factory=list, sa_type=JSON)

    create_timestamp: datetime = Field(default_factory=now)
    modify_timestamp: datetime = Field(default_factory=now, sa_column_kwargs={"onupdate": now})

    def __repr__(self) -> str:
        return f"SessionTemplateRow(id={self.id}, reference={self.reference}, day_of_week={self.day_of_week})"
