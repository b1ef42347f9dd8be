"""
Booking validation.

Run just before an application is turned into a booked visit. Public
bookings are fully re-validated because time has passed since the slot was
offered. Staff bookings are only checked when they take a new slot or
restriction, since staff may knowingly override.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.entities import ApplicationRow, PrisonRow, SessionSlotRow, VisitRow
from visit_scheduler.core.exceptions import VisitValidationError
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import Prisoner, UserType
from visit_scheduler.scheduling import is_session_available_to_prisoner

from .prisoners import PrisonerService
from .prisons import PrisonsService
from .session_slots import SessionSlotService
from .session_templates import SessionTemplateService
from .slot_capacity import SlotCapacityService

logger = get_logger(__name__)


class ApplicationValidationService:
    def __init__(
        self,
        repos: SqlRepoBundle,
        *,
        prisoners: PrisonerService,
        prisons: PrisonsService,
        templates: SessionTemplateService,
        slots: SessionSlotService,
        capacity: SlotCapacityService,
        is_expired: Callable[[datetime], bool],
    ) -> None:
        self._repos = repos
        self._prisoners = prisoners
        self._prisons = prisons
        self._templates = templates
        self._slots = slots
        self._capacity = capacity
        self._is_expired = is_expired

    async def validate(
        self,
        application: ApplicationRow,
        existing_booking: Optional[VisitRow],
        allow_over_booking: bool = False,
    ) -> None:
        """Raise ``VisitValidationError`` or ``OverCapacityError`` when the booking must not go ahead."""
        slot = await self._slots.get_slot(application.session_slot_id)
        prison = await self._prisons.get_prison(application.prison_id)
        try:
            if application.user_type == UserType.PUBLIC:
                await self._validate_public(application, slot, prison, existing_booking, allow_over_booking)
            else:
                await self._validate_staff(application, slot, existing_booking, allow_over_booking)
        except VisitValidationError as e:
            logger.error(f"Validation failed for application reference - {application.reference} with msg - {e.message}")
            raise

    @staticmethod
    def _is_slot_or_restriction_changed(application: ApplicationRow, existing_booking: Optional[VisitRow]) -> bool:
        if existing_booking is None:
            return True
        return (
            application.session_slot_id != existing_booking.session_slot_id
            or application.restriction != existing_booking.visit_restriction
        )

    async def _validate_public(
        self,
        application: ApplicationRow,
        slot: SessionSlotRow,
        prison: PrisonRow,
        existing_booking: Optional[VisitRow],
        allow_over_booking: bool,
    ) -> None:
        prisoner = await self._prisoners.get_prisoner(application.prisoner_id)
        if prisoner is None:
            raise VisitValidationError("prisoner not found")

        if prison.code != prisoner.prison_code:
            raise VisitValidationError(
                f"application's prison code - {prison.code} is different to prison code for prisoner - {prisoner.prison_code}"
            )
        await self._check_session_slot(application, slot, prisoner, prison)
        await self._check_non_association_visits(application.prisoner_id, slot.slot_date, application.prison_id)
        await self._check_double_booked_visits(
            application.prisoner_id, slot, existing_booking.reference if existing_booking else None
        )
        await self._check_vo_limits(application.prisoner_id)
        await self._check_slot_capacity(application, slot, existing_booking, allow_over_booking)

    async def _validate_staff(
        self,
        application: ApplicationRow,
        slot: SessionSlotRow,
        existing_booking: Optional[VisitRow],
        allow_over_booking: bool,
    ) -> None:
        if not self._is_slot_or_restriction_changed(application, existing_booking):
            return

        await self._check_slot_capacity(application, slot, existing_booking, allow_over_booking)
        await self._check_non_association_visits(application.prisoner_id, slot.slot_date, application.prison_id)
        await self._check_double_booked_visits(
            application.prisoner_id, slot, existing_booking.reference if existing_booking else None
        )

    async def _check_session_slot(
        self, application: ApplicationRow, slot: SessionSlotRow, prisoner: Prisoner, prison: PrisonRow
    ) -> None:
        if slot.session_template_reference is None:
            return
        template = await self._templates.get_template(slot.session_template_reference)
        levels = await self._prisoners.get_prisoner_housing_levels(application.prisoner_id, prison.code)
        if not is_session_available_to_prisoner(template, prisoner, levels):
            raise VisitValidationError(f"session slot with reference - {slot.reference} is unavailable to prisoner")

    async def _check_non_association_visits(self, prisoner_id: str, session_date: date, prison_id: int) -> None:
        non_association_ids = await self._prisoners.get_non_association_prisoner_ids(prisoner_id)
        if non_association_ids and await self._repos.visits.has_active_visits_for_date(
            non_association_ids, session_date, prison_id
        ):
            raise VisitValidationError(
                f"non-associations for prisoner - {prisoner_id} have booked visits on {session_date} at the same prison."
            )

    async def _check_double_booked_visits(
        self, prisoner_id: str, slot: SessionSlotRow, visit_reference: Optional[str]
    ) -> None:
        if await self._repos.visits.has_active_visit_for_slot(prisoner_id, slot.id, visit_reference):
            raise VisitValidationError(
                f"There is already a visit booked for prisoner - {prisoner_id} on session slot - {slot.reference}."
            )

    async def _check_vo_limits(self, prisoner_id: str) -> None:
        if await self._prisoners.get_visit_balance(prisoner_id) <= 0:
            raise VisitValidationError(f"not enough VO balance for prisoner - {prisoner_id}")

    async def _check_slot_capacity(
        self,
        application: ApplicationRow,
        slot: SessionSlotRow,
        existing_booking: Optional[VisitRow],
        allow_over_booking: bool,
    ) -> None:
        if allow_over_booking or not self._is_slot_or_restriction_changed(application, existing_booking):
            return

        include_reserved = application.user_type == UserType.STAFF and self._is_expired(application.modify_timestamp)
        await self._capacity.check_capacity_for_booking(
            slot.reference,
            application.restriction,
            include_reserved,
            exclude_application_reference=application.reference,
        )
