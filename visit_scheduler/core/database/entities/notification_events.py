"""
Visit notification event entity models.

Notification events flag a booked visit for staff attention, e.g. when a
non-association is added after booking. They are removed once the visit is
changed, cancelled or decided.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, Text

from visit_scheduler.core.models.domain import NotificationEventType

from ..base import Base, now


class VisitNotificationEventRow(Base, table=True):
    """Entity for visit notification flags.

    Table: vs_visit_notification_events
    """

    __tablename__ = "vs_visit_notification_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    booking_reference: str = Field(max_length=40, index=True)
    type: NotificationEventType
    description: Optional[str] = Field(default=None, sa_type=Text)

    create_timestamp: datetime = Field(default_factory=now)

    def __repr__(self) -> str:
        return f"VisitNotificationEventRow(id={self.id}, type={self.type}, booking_reference={self.booking_reference})"
