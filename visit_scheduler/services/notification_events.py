"""Flags raised against booked visits that staff need to review."""

from __future__ import annotations

from typing import List, Optional

from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.entities import VisitNotificationEventRow
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import NotificationEventType, UnFlagEventReason

logger = get_logger(__name__)


class VisitNotificationEventService:
    def __init__(self, repos: SqlRepoBundle) -> None:
        self._repos = repos

    async def save_event(
        self, booking_reference: str, event_type: NotificationEventType, description: Optional[str] = None
    ) -> VisitNotificationEventRow:
        return await self._repos.notification_events.create(
            VisitNotificationEventRow(booking_reference=booking_reference, type=event_type, description=description)
        )

    async def get_events(self, booking_reference: str) -> List[VisitNotificationEventRow]:
        return await self._repos.notification_events.list_by_booking_reference(booking_reference)

    async def delete_notification_events(self, booking_reference: str, reason: UnFlagEventReason) -> int:
        """Remove all flags of a visit, e.g. once it is cancelled or updated."""
        deleted = await self._repos.notification_events.delete_by_booking_reference(booking_reference)
        if deleted:
            logger.info(f"Removed {deleted} notification events for visit {booking_reference}, reason: {reason.value}")
        return deleted
