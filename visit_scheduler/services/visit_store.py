"""
Visit persistence.

Writes booked and cancelled visits and builds their domain view. Business
rules (validation, audit, events) live in ``VisitService``.
"""

from __future__ import annotations

from typing import List, Optional

from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.entities import ApplicationRow, VisitRow
from visit_scheduler.core.exceptions import VisitNotFoundError
from visit_scheduler.core.models.domain import (
    OutcomeStatus,
    Visit,
    VisitNoteType,
    VisitStatus,
    VisitSubStatus,
)

from .mappers import visit_to_domain
from .prisons import PrisonsService
from .session_slots import SessionSlotService


class VisitStoreService:
    def __init__(self, repos: SqlRepoBundle, *, prisons: PrisonsService, slots: SessionSlotService) -> None:
        self._repos = repos
        self._prisons = prisons
        self._slots = slots

    async def get_visit_row(self, reference: str) -> VisitRow:
        row = await self._repos.visits.get_by_reference(reference)
        if row is None:
            raise VisitNotFoundError(reference)
        return row

    async def to_dto(self, row: VisitRow) -> Visit:
        slot = await self._slots.get_slot(row.session_slot_id)
        application = await self._repos.applications.get_latest_for_visit(row.id)
        return visit_to_domain(
            row,
            slot,
            await self._prisons.get_prison_code(row.prison_id),
            application.reference if application else None,
        )

    async def to_dtos(self, rows: List[VisitRow]) -> List[Visit]:
        return [await self.to_dto(r) for r in rows]

    async def _visit_room(self, application: ApplicationRow, existing: Optional[VisitRow]) -> str:
        slot = await self._slots.get_slot(application.session_slot_id)
        if slot.session_template_reference is not None:
            template = await self._repos.session_templates.get_by_reference(slot.session_template_reference)
            if template is not None:
                return template.visit_room
        return existing.visit_room if existing else ""

    async def create_or_update_booked_visit(
        self,
        application: ApplicationRow,
        existing: Optional[VisitRow],
        sub_status: VisitSubStatus,
    ) -> VisitRow:
        """Copy an application onto a new or existing booked visit."""
        contact = application.contact or {}
        visit = existing or VisitRow(
            prison_id=application.prison_id,
            prisoner_id=application.prisoner_id,
            session_slot_id=application.session_slot_id,
            visit_restriction=application.restriction,
            visit_status=VisitStatus.BOOKED,
            visit_sub_status=sub_status,
            visit_room="",
        )
        visit.session_slot_id = application.session_slot_id
        visit.visit_type = application.visit_type
        visit.visit_restriction = application.restriction
        visit.visit_room = await self._visit_room(application, existing)
        visit.visit_status = VisitStatus.BOOKED
        visit.user_type = application.user_type
        visit.main_contact_name = contact.get("name")
        visit.main_contact_phone = contact.get("telephone")
        visit.main_contact_email = contact.get("email")
        visit.visitors = list(application.visitors or [])
        visit.support = application.support

        if existing is None:
            return await self._repos.visits.create(visit)
        return await self._repos.visits.update(visit)

    async def cancel(
        self,
        visit: VisitRow,
        outcome_status: OutcomeStatus,
        sub_status: VisitSubStatus,
        text: Optional[str] = None,
    ) -> VisitRow:
        visit.visit_status = VisitStatus.CANCELLED
        visit.visit_sub_status = sub_status
        visit.outcome_status = outcome_status
        if text:
            visit.notes = [*(visit.notes or []), {"type": VisitNoteType.VISIT_OUTCOMES.value, "text": text}]
        return await self._repos.visits.update(visit)
