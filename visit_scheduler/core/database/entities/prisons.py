"""
Prison entity models.

A prison holds the booking policy that applies to all of its sessions: how
far ahead visits can be booked and how many visitors may attend.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Set

from sqlmodel import JSON, Field

from ..base import Base, now


class PrisonRow(Base, table=True):
    """Entity for a prison and its booking policy.

    Table: vs_prisons
    """

    __tablename__ = "vs_prisons"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(max_length=6, unique=True, index=True)
    active: bool = Field(default=True)

    # Booking window, in days from today
    policy_notice_days_min: int = Field(default=2)
    policy_notice_days_max: int = Field(default=28)
    update_policy_notice_days_min: int = Field(default=0)

    max_total_visitors: int = Field(default=6)

    # ISO dates on which no visits take place
    exclude_dates: List[str] = Field(default_factory=list, sa_type=JSON)

    create_timestamp: datetime = Field(default_factory=now)
    modify_timestamp: datetime = Field(default_factory=now, sa_column_kwargs={"onupdate": now})

    @property
    def excluded_dates(self) -> Set[date]:
        return {date.fromisoformat(d) for d in self.exclude_dates}

    def __repr__(self) -> str:
        return f"PrisonRow(id={self.id}, code={self.code})"
