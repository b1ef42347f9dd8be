"""
Session slot lookup and creation.

Slots are created lazily the first time an application or visit needs one.
Two requests racing to create the same slot both end up with the row that
won the unique constraint.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.entities import SessionSlotRow
from visit_scheduler.core.exceptions import ItemNotFoundError
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import SessionTemplate

logger = get_logger(__name__)


class SessionSlotService:
    def __init__(self, repos: SqlRepoBundle) -> None:
        self._repos = repos

    async def get_slot(self, slot_id: int) -> SessionSlotRow:
        slot = await self._repos.session_slots.get_by_id(slot_id)
        if slot is None:
            raise ItemNotFoundError(f"Session slot {slot_id} not found", details={"id": slot_id})
        return slot

    async def _find(
        self, prison_id: int, slot_start: datetime, slot_end: datetime, session_template_reference: Optional[str]
    ) -> Optional[SessionSlotRow]:
        if session_template_reference is not None:
            return await self._repos.session_slots.find_by_template_and_date(session_template_reference, slot_start.date())
        return await self._repos.session_slots.find_without_template(prison_id, slot_start, slot_end)

    async def get_session_slot(
        self,
        prison_id: int,
        slot_start: datetime,
        slot_end: datetime,
        session_template_reference: Optional[str] = None,
    ) -> SessionSlotRow:
        """Find or create the slot for a template on a date, or an ad-hoc slot.

        Args:
            prison_id: Prison the slot belongs to
            slot_start: Slot start timestamp
            slot_end: Slot end timestamp
            session_template_reference: Template reference, None for an ad-hoc slot

        Returns:
            The existing or newly created slot
        """
        slot = await self._find(prison_id, slot_start, slot_end, session_template_reference)
        if slot is not None:
            return slot

        try:
            slot = await self._repos.session_slots.create(
                SessionSlotRow(
                    session_template_reference=session_template_reference,
                    prison_id=prison_id,
                    slot_date=slot_start.date(),
                    slot_start=slot_start,
                    slot_end=slot_end,
                )
            )
            logger.debug(f"Created session slot {slot.reference} template={session_template_reference} start={slot_start}")
            return slot
        except IntegrityError:
            await self._repos.session_slots.session.rollback()
            logger.info(f"Session slot for template={session_template_reference} start={slot_start} created concurrently")
            slot = await self._find(prison_id, slot_start, slot_end, session_template_reference)
            if slot is None:
                raise
            return slot

    async def get_template_slot(self, template: SessionTemplate, prison_id: int, slot_date: date) -> SessionSlotRow:
        return await self.get_session_slot(
            prison_id,
            datetime.combine(slot_date, template.start_time),
            datetime.combine(slot_date, template.end_time),
            template.reference,
        )
