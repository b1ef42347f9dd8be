"""
Application repository.

This module provides data access operations for in-progress visit applications,
including the reservation counts used for slot capacity checks.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Sequence

from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from visit_scheduler.core.models.domain import ApplicationStatus, VisitRestriction
from visit_scheduler.core.references import visit_reference_encoder

from ..entities.applications import ApplicationRow
from ..entities.session_slots import SessionSlotRow
from .base import SqlRepository


class ApplicationRepository(SqlRepository[ApplicationRow]):
    """Repository for application data access operations using SQLModel."""

    encoder_factory = staticmethod(visit_reference_encoder)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ApplicationRow)

    async def get_by_reference(self, reference: str) -> Optional[ApplicationRow]:
        stmt = select(ApplicationRow).where(ApplicationRow.reference == reference)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def claim_for_booking(self, reference: str) -> bool:
        """Mark an application completed unless another booking already did.

        The conditional update is a single statement, so of two concurrent
        bookings of the same application exactly one gets ``True``.
        """
        stmt = (
            update(ApplicationRow)
            .where(ApplicationRow.reference == reference)
            .where(ApplicationRow.completed == False)  # noqa: E712
            .values(completed=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def release_booking_claim(self, reference: str) -> None:
        """Undo ``claim_for_booking`` for an application that was not booked."""
        stmt = (
            update(ApplicationRow)
            .where(ApplicationRow.reference == reference)
            .where(ApplicationRow.application_status == ApplicationStatus.IN_PROGRESS)
            .values(completed=False)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def refresh(self, row: ApplicationRow) -> ApplicationRow:
        await self.session.refresh(row)
        return row

    def _reserved_in_progress(self, session_slot_id: int, active_since: datetime):
        return (
            select(func.count(ApplicationRow.id))
            .where(ApplicationRow.session_slot_id == session_slot_id)
            .where(ApplicationRow.application_status == ApplicationStatus.IN_PROGRESS)
            .where(ApplicationRow.reserved_slot == True)  # noqa: E712
            .where(ApplicationRow.modify_timestamp >= active_since)
        )

    async def count_reserved_for_slot(
        self,
        session_slot_id: int,
        restriction: VisitRestriction,
        active_since: datetime,
        exclude_reference: Optional[str] = None,
    ) -> int:
        """Count unexpired in-progress applications holding a slot.

        Args:
            session_slot_id: Slot primary key
            restriction: Only applications for this restriction
            active_since: Applications modified before this are treated as expired
            exclude_reference: Application to leave out of the count
        """
        stmt = self._reserved_in_progress(session_slot_id, active_since).where(
            ApplicationRow.restriction == restriction
        )
        if exclude_reference is not None:
            stmt = stmt.where(ApplicationRow.reference != exclude_reference)
        result = await self.session.exec(stmt)
        return result.one()

    async def has_reservations(
        self,
        prisoner_id: str,
        session_slot_id: int,
        active_since: datetime,
        exclude_reference: Optional[str] = None,
    ) -> bool:
        stmt = self._reserved_in_progress(session_slot_id, active_since).where(
            ApplicationRow.prisoner_id == prisoner_id
        )
        if exclude_reference is not None:
            stmt = stmt.where(ApplicationRow.reference != exclude_reference)
        result = await self.session.exec(stmt)
        return result.one() > 0

    async def has_active_applications_for_date(
        self, prisoner_ids: Sequence[str], slot_date: date, prison_id: int, active_since: datetime
    ) -> bool:
        """Whether any of ``prisoner_ids`` holds an unexpired reservation at the prison on ``slot_date``."""
        if not prisoner_ids:
            return False
        stmt = (
            select(func.count(ApplicationRow.id))
            .join(SessionSlotRow, ApplicationRow.session_slot_id == SessionSlotRow.id)
            .where(ApplicationRow.prisoner_id.in_(list(prisoner_ids)))
            .where(ApplicationRow.prison_id == prison_id)
            .where(ApplicationRow.application_status == ApplicationStatus.IN_PROGRESS)
            .where(ApplicationRow.reserved_slot == True)  # noqa: E712
            .where(ApplicationRow.modify_timestamp >= active_since)
            .where(SessionSlotRow.slot_date == slot_date)
        )
        result = await self.session.exec(stmt)
        return result.one() > 0

    async def find_expired(self, modified_before: datetime) -> List[ApplicationRow]:
        """List in-progress applications not modified since ``modified_before``."""
        stmt = (
            select(ApplicationRow)
            .where(ApplicationRow.application_status == ApplicationStatus.IN_PROGRESS)
            .where(ApplicationRow.modify_timestamp < modified_before)
        )
        result = await self.session.exec(stmt)
        return list(result)

    async def get_latest_for_visit(self, visit_id: int) -> Optional[ApplicationRow]:
        """Most recently accepted application of a visit."""
        stmt = (
            select(ApplicationRow)
            .where(ApplicationRow.visit_id == visit_id)
            .where(ApplicationRow.application_status == ApplicationStatus.ACCEPTED)
            .order_by(ApplicationRow.modify_timestamp.desc(), ApplicationRow.id.desc())
        )
        result = await self.session.exec(stmt)
        return result.first()
