"""
Visit notification event repository.
"""

from __future__ import annotations

from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.notification_events import VisitNotificationEventRow
from .base import SqlRepository


class VisitNotificationEventRepository(SqlRepository[VisitNotificationEventRow]):
    """Repository for visit notification flags using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, VisitNotificationEventRow)

    async def list_by_booking_reference(self, booking_reference: str) -> List[VisitNotificationEventRow]:
        stmt = select(VisitNotificationEventRow).where(
            VisitNotificationEventRow.booking_reference == booking_reference
        )
        result = await self.session.exec(stmt)
        return list(result)

    async def delete_by_booking_reference(self, booking_reference: str) -> int:
        """Remove all flags of a visit.

        Returns:
            Number of events deleted
        """
        events = await self.list_by_booking_reference(booking_reference)
        for event in events:
            await self.session.delete(event)
        await self.session.commit()
        return len(events)
