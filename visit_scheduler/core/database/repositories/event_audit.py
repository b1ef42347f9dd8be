"""
Event audit repository.

This module provides data access operations for the visit audit trail.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from visit_scheduler.core.models.domain import EventAuditType

from ..entities.event_audit import EventAuditRow
from .base import SqlRepository


class EventAuditRepository(SqlRepository[EventAuditRow]):
    """Repository for audit event data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EventAuditRow)

    async def list_by_booking_reference(self, booking_reference: str) -> List[EventAuditRow]:
        stmt = (
            select(EventAuditRow)
            .where(EventAuditRow.booking_reference == booking_reference)
            .order_by(EventAuditRow.create_timestamp.asc(), EventAuditRow.id.asc())
        )
        result = await self.session.exec(stmt)
        return list(result)

    async def find_last_by_type(self, booking_reference: str, event_type: EventAuditType) -> Optional[EventAuditRow]:
        stmt = (
            select(EventAuditRow)
            .where(EventAuditRow.booking_reference == booking_reference)
            .where(EventAuditRow.type == event_type)
            .order_by(EventAuditRow.create_timestamp.desc(), EventAuditRow.id.desc())
        )
        result = await self.session.exec(stmt)
        return result.first()
