"""
Visit repository.

This module provides data access operations for visits, including the
booked counts and conflict lookups used when validating bookings.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from visit_scheduler.core.models.domain import VisitRestriction, VisitStatus, VisitSubStatus
from visit_scheduler.core.references import visit_reference_encoder

from ..entities.session_slots import SessionSlotRow
from ..entities.visits import VisitRow
from .base import SqlRepository


class VisitRepository(SqlRepository[VisitRow]):
    """Repository for visit data access operations using SQLModel."""

    encoder_factory = staticmethod(visit_reference_encoder)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, VisitRow)

    async def get_by_reference(self, reference: str) -> Optional[VisitRow]:
        stmt = select(VisitRow).where(VisitRow.reference == reference)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_booked_by_reference(self, reference: str) -> Optional[VisitRow]:
        stmt = (
            select(VisitRow)
            .where(VisitRow.reference == reference)
            .where(VisitRow.visit_status == VisitStatus.BOOKED)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def count_booked_for_slot(self, session_slot_id: int, restriction: VisitRestriction) -> int:
        stmt = (
            select(func.count(VisitRow.id))
            .where(VisitRow.session_slot_id == session_slot_id)
            .where(VisitRow.visit_restriction == restriction)
            .where(VisitRow.visit_status == VisitStatus.BOOKED)
        )
        result = await self.session.exec(stmt)
        return result.one()

    async def has_active_visits_for_date(self, prisoner_ids: Sequence[str], slot_date: date, prison_id: int) -> bool:
        """Whether any of ``prisoner_ids`` has a booked visit at the prison on ``slot_date``."""
        if not prisoner_ids:
            return False
        stmt = (
            select(func.count(VisitRow.id))
            .join(SessionSlotRow, VisitRow.session_slot_id == SessionSlotRow.id)
            .where(VisitRow.prisoner_id.in_(list(prisoner_ids)))
            .where(VisitRow.prison_id == prison_id)
            .where(VisitRow.visit_status == VisitStatus.BOOKED)
            .where(SessionSlotRow.slot_date == slot_date)
        )
        result = await self.session.exec(stmt)
        return result.one() > 0

    async def has_active_visit_for_slot(
        self, prisoner_id: str, session_slot_id: int, exclude_reference: Optional[str] = None
    ) -> bool:
        stmt = (
            select(func.count(VisitRow.id))
            .where(VisitRow.prisoner_id == prisoner_id)
            .where(VisitRow.session_slot_id == session_slot_id)
            .where(VisitRow.visit_status == VisitStatus.BOOKED)
        )
        if exclude_reference is not None:
            stmt = stmt.where(VisitRow.reference != exclude_reference)
        result = await self.session.exec(stmt)
        return result.one() > 0

    async def find_booked_for_prisoner(self, prisoner_id: str, start_from: datetime) -> List[VisitRow]:
        stmt = (
            select(VisitRow)
            .join(SessionSlotRow, VisitRow.session_slot_id == SessionSlotRow.id)
            .where(VisitRow.prisoner_id == prisoner_id)
            .where(VisitRow.visit_status == VisitStatus.BOOKED)
            .where(SessionSlotRow.slot_start >= start_from)
            .order_by(SessionSlotRow.slot_start)
        )
        result = await self.session.exec(stmt)
        return list(result)

    async def find_requested(
        self,
        prison_id: Optional[int] = None,
        prisoner_id: Optional[str] = None,
        start_from: Optional[datetime] = None,
        start_before: Optional[datetime] = None,
    ) -> List[VisitRow]:
        """List booked visits still waiting for a staff decision.

        Args:
            prison_id: Restrict to one prison
            prisoner_id: Restrict to one prisoner
            start_from: Only visits starting at or after this time
            start_before: Only visits starting before this time
        """
        stmt = (
            select(VisitRow)
            .join(SessionSlotRow, VisitRow.session_slot_id == SessionSlotRow.id)
            .where(VisitRow.visit_status == VisitStatus.BOOKED)
            .where(VisitRow.visit_sub_status == VisitSubStatus.REQUESTED)
            .order_by(SessionSlotRow.slot_start)
        )
        if prison_id is not None:
            stmt = stmt.where(VisitRow.prison_id == prison_id)
        if prisoner_id is not None:
            stmt = stmt.where(VisitRow.prisoner_id == prisoner_id)
        if start_from is not None:
            stmt = stmt.where(SessionSlotRow.slot_start >= start_from)
        if start_before is not None:
            stmt = stmt.where(SessionSlotRow.slot_start < start_before)
        result = await self.session.exec(stmt)
        return list(result)

    async def count_requested(self, prison_id: int, start_from: datetime) -> int:
        stmt = (
            select(func.count(VisitRow.id))
            .join(SessionSlotRow, VisitRow.session_slot_id == SessionSlotRow.id)
            .where(VisitRow.prison_id == prison_id)
            .where(VisitRow.visit_status == VisitStatus.BOOKED)
            .where(VisitRow.visit_sub_status == VisitSubStatus.REQUESTED)
            .where(SessionSlotRow.slot_start >= start_from)
        )
        result = await self.session.exec(stmt)
        return result.one()
