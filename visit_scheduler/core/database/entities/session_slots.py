"""
Session slot entity models.

A session slot is one dated occurrence of a session template, or an ad-hoc
slot for a migrated visit that did not map onto any template. Applications
and visits reference slots, which is what capacity is counted against.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, now


class SessionSlotRow(Base, table=True):
    """Entity for a dated session slot.

    Table: vs_session_slots
    """

    __tablename__ = "vs_session_slots"
    __table_args__ = (UniqueConstraint("session_template_reference", "slot_date", name="uq_slot_template_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    reference: Optional[str] = Field(default=None, max_length=40, unique=True, index=True)
    session_template_reference: Optional[str] = Field(default=None, max_length=40, index=True)
    prison_id: int = Field(foreign_key="vs_prisons.id", index=True)

    slot_date: date = Field(index=True)
    slot_start: datetime
    slot_end: datetime

    create_timestamp: datetime = Field(default_factory=now)

    def __repr__(self) -> str:
        return f"SessionSlotRow(id={self.id}, reference={self.reference}, slot_start={self.slot_start})"
