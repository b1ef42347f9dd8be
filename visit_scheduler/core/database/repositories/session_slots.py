"""
Session slot repository.

This module provides data access operations for dated session slots.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from visit_scheduler.core.references import visit_reference_encoder

from ..entities.session_slots import SessionSlotRow
from .base import SqlRepository


class SessionSlotRepository(SqlRepository[SessionSlotRow]):
    """Repository for session slot data access operations using SQLModel."""

    encoder_factory = staticmethod(visit_reference_encoder)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SessionSlotRow)

    async def get_by_reference(self, reference: str) -> Optional[SessionSlotRow]:
        stmt = select(SessionSlotRow).where(SessionSlotRow.reference == reference)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find_by_template_and_date(self, session_template_reference: str, slot_date: date) -> Optional[SessionSlotRow]:
        stmt = (
            select(SessionSlotRow)
            .where(SessionSlotRow.session_template_reference == session_template_reference)
            .where(SessionSlotRow.slot_date == slot_date)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find_without_template(self, prison_id: int, slot_start: datetime, slot_end: datetime) -> Optional[SessionSlotRow]:
        """Find an ad-hoc slot (one not created from a session template)."""
        stmt = (
            select(SessionSlotRow)
            .where(SessionSlotRow.session_template_reference == None)  # noqa: E711
            .where(SessionSlotRow.prison_id == prison_id)
            .where(SessionSlotRow.slot_start == slot_start)
            .where(SessionSlotRow.slot_end == slot_end)
            .order_by(SessionSlotRow.id)
        )
        result = await self.session.exec(stmt)
        return result.first()
