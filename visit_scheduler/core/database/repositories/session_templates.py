"""
Session template repository.

This module provides data access operations for recurring visit sessions.
"""

from __future__ import annotations

from datetime import date, time
from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from visit_scheduler.core.models.domain import DayOfWeek
from visit_scheduler.core.references import session_template_reference_encoder

from ..entities.session_templates import SessionTemplateRow
from .base import SqlRepository


class SessionTemplateRepository(SqlRepository[SessionTemplateRow]):
    """Repository for session template data access operations using SQLModel."""

    encoder_factory = staticmethod(session_template_reference_encoder)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SessionTemplateRow)

    async def get_by_reference(self, reference: str) -> Optional[SessionTemplateRow]:
        stmt = select(SessionTemplateRow).where(SessionTemplateRow.reference == reference)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find_active_for_range(self, prison_id: int, range_start: date, range_end: date) -> List[SessionTemplateRow]:
        """List active templates of a prison whose validity overlaps ``range_start..range_end``."""
        stmt = (
            select(SessionTemplateRow)
            .where(SessionTemplateRow.prison_id == prison_id)
            .where(SessionTemplateRow.active == True)  # noqa: E712
            .where(SessionTemplateRow.valid_from_date <= range_end)
            .where(
                or_(
                    SessionTemplateRow.valid_to_date == None,  # noqa: E711
                    SessionTemplateRow.valid_to_date >= range_start,
                )
            )
            .order_by(SessionTemplateRow.start_time)
        )
        result = await self.session.exec(stmt)
        return list(result)

    async def find_valid_for_date(
        self,
        prison_id: int,
        session_date: date,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
    ) -> List[SessionTemplateRow]:
        """List active templates of a prison running on ``session_date``'s weekday.

        Args:
            prison_id: Prison primary key
            session_date: Date the session must be valid on
            start_time: Only templates starting at this time, when given
            end_time: Only templates ending at this time, when given
        """
        stmt = (
            select(SessionTemplateRow)
            .where(SessionTemplateRow.prison_id == prison_id)
            .where(SessionTemplateRow.active == True)  # noqa: E712
            .where(SessionTemplateRow.day_of_week == DayOfWeek.of(session_date))
            .where(SessionTemplateRow.valid_from_date <= session_date)
            .where(
                or_(
                    SessionTemplateRow.valid_to_date == None,  # noqa: E711
                    SessionTemplateRow.valid_to_date >= session_date,
                )
            )
        )
        if start_time is not None:
            stmt = stmt.where(SessionTemplateRow.start_time == start_time)
        if end_time is not None:
            stmt = stmt.where(SessionTemplateRow.end_time == end_time)
        result = await self.session.exec(stmt)
        return list(result)
