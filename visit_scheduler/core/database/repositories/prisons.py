"""
Prison repository.

This module provides data access operations for prisons and their booking policy.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.prisons import PrisonRow
from .base import SqlRepository


class PrisonRepository(SqlRepository[PrisonRow]):
    """Repository for prison data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PrisonRow)

    async def get_by_code(self, code: str) -> Optional[PrisonRow]:
        """Get a prison by its code (e.g. ``HEI``).

        Args:
            code: Prison code

        Returns:
            PrisonRow instance or None
        """
        stmt = select(PrisonRow).where(PrisonRow.code == code)
        result = await self.session.exec(stmt)
        return result.one_or_none()
