"""
Event audit entity models.

Every visit state transition writes an audit row, giving the visit history
shown to staff.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, Text

from visit_scheduler.core.models.domain import ApplicationMethodType, EventAuditType, UserType

from ..base import Base, now


class EventAuditRow(Base, table=True):
    """Entity for visit audit events.

    Table: vs_event_audit
    """

    __tablename__ = "vs_event_audit"

    id: Optional[int] = Field(default=None, primary_key=True)
    booking_reference: Optional[str] = Field(default=None, max_length=40, index=True)
    application_reference: Optional[str] = Field(default=None, max_length=40, index=True)
    session_template_reference: Optional[str] = Field(default=None, max_length=40)

    type: EventAuditType = Field(index=True)
    application_method_type: ApplicationMethodType = Field(default=ApplicationMethodType.NOT_KNOWN)
    actioned_by: Optional[str] = Field(default=None, max_length=255)
    user_type: Optional[UserType] = Field(default=None)
    text: Optional[str] = Field(default=None, sa_type=Text)

    create_timestamp: datetime = Field(default_factory=now, index=True)

    def __repr__(self) -> str:
        return f"EventAuditRow(id={self.id}, type={self.type}, booking_reference={self.booking_reference})"
