"""
Application service.

An application is how a visit gets booked or changed:

1. ``create_initial_application`` reserves a slot for a new visit.
2. ``create_application_for_existing_visit`` starts a change to a booked visit.
   The slot is only reserved again when the session or restriction changes.
3. ``change_incomplete_application`` moves an unfinished application.
4. Booking completes the application (see ``VisitService.book_visit``).

Unfinished applications expire after ``expired_application_minutes`` without
modification and are removed by ``delete_expired_applications``.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, List, Optional

from visit_scheduler.core import monitoring
from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.base import now
from visit_scheduler.core.database.entities import ApplicationRow, PrisonRow, SessionSlotRow
from visit_scheduler.core.exceptions import (
    ApplicationExpiredError,
    ApplicationNotFoundError,
    ExpiredVisitAmendError,
    VisitNotFoundError,
    VisitValidationError,
)
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import (
    Application,
    ApplicationStatus,
    EventAuditType,
    Visitor,
    VisitorSupport,
    VisitRestriction,
    VisitStatus,
)
from visit_scheduler.core.models.io import ChangeApplication, CreateApplication

from .event_audit import EventAuditService
from .mappers import application_to_domain, dump_contact, dump_support, dump_visitors
from .prisons import PrisonsService
from .session_slots import SessionSlotService
from .session_templates import SessionTemplateService
from .slot_capacity import SlotCapacityService

logger = get_logger(__name__)

MIN_SUPPORT_DESCRIPTION_LENGTH = 3


class ApplicationService:
    def __init__(
        self,
        repos: SqlRepoBundle,
        *,
        prisons: PrisonsService,
        templates: SessionTemplateService,
        slots: SessionSlotService,
        capacity: SlotCapacityService,
        audit: EventAuditService,
        expired_application_minutes: int = 10,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._repos = repos
        self._prisons = prisons
        self._templates = templates
        self._slots = slots
        self._capacity = capacity
        self._audit = audit
        self._expired_application_minutes = expired_application_minutes
        self._clock = clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_expired_application(self, modify_timestamp: datetime) -> bool:
        return modify_timestamp < self._clock() - timedelta(minutes=self._expired_application_minutes)

    async def has_reservations(self, prisoner_id: str, slot_id: int, exclude_reference: Optional[str] = None) -> bool:
        return await self._repos.applications.has_reservations(
            prisoner_id, slot_id, self._capacity.active_since(), exclude_reference
        )

    async def get_reserved_applications_count_for_slot(
        self, slot_id: int, restriction: VisitRestriction, exclude_reference: Optional[str] = None
    ) -> int:
        return await self._repos.applications.count_reserved_for_slot(
            slot_id, restriction, self._capacity.active_since(), exclude_reference
        )

    async def get_application_row(self, reference: str) -> ApplicationRow:
        row = await self._repos.applications.get_by_reference(reference)
        if row is None:
            raise ApplicationNotFoundError(reference)
        return row

    async def to_dto(self, row: ApplicationRow, slot: Optional[SessionSlotRow] = None) -> Application:
        slot = slot or await self._slots.get_slot(row.session_slot_id)
        return application_to_domain(row, slot, await self._prisons.get_prison_code(row.prison_id))

    async def get_application(self, reference: str) -> Application:
        return await self.to_dto(await self.get_application_row(reference))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_support(support: Optional[VisitorSupport]) -> None:
        if support is None or not support.description.strip():
            return
        if len(support.description.strip()) < MIN_SUPPORT_DESCRIPTION_LENGTH:
            raise VisitValidationError(
                f"Support description must be at least {MIN_SUPPORT_DESCRIPTION_LENGTH} characters"
            )

    @staticmethod
    def _validate_visitors(visitors: Optional[List[Visitor]], prison: PrisonRow) -> None:
        if visitors is not None and len(visitors) > prison.max_total_visitors:
            raise VisitValidationError(
                f"This application has too many visitors for prison {prison.code}, "
                f"max visitors: {prison.max_total_visitors}"
            )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_initial_application(self, dto: CreateApplication) -> Application:
        """Reserve a slot for a new visit."""
        template = await self._templates.get_template(dto.session_template_reference)
        prison = await self._prisons.find_active_prison_by_code(template.prison_code)
        self._validate_support(dto.visitor_support)
        self._validate_visitors(dto.visitors, prison)

        slot = await self._slots.get_template_slot(template, prison.id, dto.session_date)
        if not dto.allow_over_booking:
            await self._capacity.check_capacity_for_application_reservation(slot.reference, dto.application_restriction)

        row = await self._repos.applications.create(
            ApplicationRow(
                prison_id=prison.id,
                prisoner_id=dto.prisoner_id,
                session_slot_id=slot.id,
                reserved_slot=True,
                restriction=dto.application_restriction,
                reservation_status=VisitStatus.RESERVED,
                application_status=ApplicationStatus.IN_PROGRESS,
                user_type=dto.user_type,
                created_by=dto.actioned_by,
                contact=dump_contact(dto.visit_contact),
                visitors=dump_visitors(dto.visitors),
                support=dump_support(dto.visitor_support),
            )
        )

        await self._audit.save_event(
            EventAuditType.RESERVED_VISIT,
            actioned_by=dto.actioned_by,
            user_type=dto.user_type,
            application_reference=row.reference,
            session_template_reference=template.reference,
        )
        monitoring.track_event(
            "application-slot-reserved",
            {
                "applicationReference": row.reference,
                "prisonerId": row.prisoner_id,
                "prisonId": prison.code,
                "visitRestriction": row.restriction.value,
                "visitStart": slot.slot_start.isoformat(),
                "reserved": row.reserved_slot,
            },
        )
        logger.info(f"Reserved slot {slot.reference} with application {row.reference}")
        return await self.to_dto(row, slot)

    async def create_application_for_existing_visit(self, booking_reference: str, dto: CreateApplication) -> Application:
        """Start a change to a booked visit."""
        visit = await self._repos.visits.get_booked_by_reference(booking_reference)
        if visit is None:
            raise VisitNotFoundError(booking_reference)

        template = await self._templates.get_template(dto.session_template_reference)
        prison = await self._prisons.find_active_prison_by_code(template.prison_code)
        if visit.prisoner_id != dto.prisoner_id or visit.prison_id != prison.id:
            raise VisitValidationError(
                f"Application does not match visit {booking_reference}: prisoner or prison differs"
            )

        current_slot = await self._slots.get_slot(visit.session_slot_id)
        if current_slot.slot_start < self._clock():
            raise ExpiredVisitAmendError(f"Visit {booking_reference} is in the past and cannot be changed")

        self._validate_support(dto.visitor_support)
        self._validate_visitors(dto.visitors, prison)

        slot = await self._slots.get_template_slot(template, prison.id, dto.session_date)
        changed = slot.id != visit.session_slot_id or dto.application_restriction != visit.visit_restriction
        if changed and not dto.allow_over_booking:
            await self._capacity.check_capacity_for_application_reservation(slot.reference, dto.application_restriction)

        row = await self._repos.applications.create(
            ApplicationRow(
                prison_id=prison.id,
                prisoner_id=dto.prisoner_id,
                session_slot_id=slot.id,
                reserved_slot=changed,
                restriction=dto.application_restriction,
                reservation_status=VisitStatus.RESERVED if changed else VisitStatus.CHANGING,
                application_status=ApplicationStatus.IN_PROGRESS,
                user_type=dto.user_type,
                created_by=dto.actioned_by,
                visit_id=visit.id,
                contact=dump_contact(dto.visit_contact),
                visitors=dump_visitors(dto.visitors),
                support=dump_support(dto.visitor_support),
            )
        )

        await self._audit.save_event(
            EventAuditType.CHANGING_VISIT,
            actioned_by=dto.actioned_by,
            user_type=dto.user_type,
            booking_reference=booking_reference,
            application_reference=row.reference,
            session_template_reference=template.reference,
        )
        monitoring.track_event(
            "visit-changed" if changed else "application-slot-changed",
            {
                "reference": booking_reference,
                "applicationReference": row.reference,
                "prisonerId": row.prisoner_id,
                "prisonId": prison.code,
                "visitRestriction": row.restriction.value,
                "visitStart": slot.slot_start.isoformat(),
                "reserved": row.reserved_slot,
            },
        )
        return await self.to_dto(row, slot)

    async def change_incomplete_application(self, reference: str, dto: ChangeApplication) -> Application:
        """Move an unfinished application to another slot or restriction."""
        row = await self.get_application_row(reference)
        if row.application_status != ApplicationStatus.IN_PROGRESS:
            raise VisitValidationError(f"Application {reference} is not in progress")
        if self.is_expired_application(row.modify_timestamp):
            raise ApplicationExpiredError(reference)

        template = await self._templates.get_template(dto.session_template_reference)
        prison = await self._prisons.find_active_prison_by_code(template.prison_code)
        if prison.id != row.prison_id:
            raise VisitValidationError(f"Application {reference} cannot be moved to another prison")

        self._validate_support(dto.visitor_support)
        self._validate_visitors(dto.visitors, prison)

        slot = await self._slots.get_template_slot(template, prison.id, dto.session_date)
        restriction = dto.application_restriction or row.restriction
        slot_changed = slot.id != row.session_slot_id or restriction != row.restriction
        if slot_changed and not dto.allow_over_booking:
            await self._capacity.check_capacity_for_application_reservation(
                slot.reference, restriction, exclude_application_reference=reference
            )

        row.session_slot_id = slot.id
        row.restriction = restriction
        if dto.visit_contact is not None:
            row.contact = dump_contact(dto.visit_contact)
        if dto.visitors is not None:
            row.visitors = dump_visitors(dto.visitors)
        if dto.visitor_support is not None:
            row.support = dump_support(dto.visitor_support)

        # an application amending a booked visit only holds a slot when it moves away from the visit's own
        if row.visit_id is not None:
            visit = await self._repos.visits.get_by_id(row.visit_id)
            reserved = visit is None or visit.session_slot_id != slot.id or visit.visit_restriction != restriction
        else:
            reserved = True
        row.reserved_slot = reserved
        row.reservation_status = VisitStatus.RESERVED if reserved else VisitStatus.CHANGING
        row.modify_timestamp = self._clock()
        row = await self._repos.applications.update(row)

        monitoring.track_event(
            "application-slot-changed",
            {
                "applicationReference": row.reference,
                "prisonerId": row.prisoner_id,
                "prisonId": prison.code,
                "visitRestriction": row.restriction.value,
                "visitStart": slot.slot_start.isoformat(),
                "reserved": row.reserved_slot,
            },
        )
        return await self.to_dto(row, slot)

    async def complete_application(self, reference: str, visit_id: int) -> ApplicationRow:
        row = await self.get_application_row(reference)
        row.application_status = ApplicationStatus.ACCEPTED
        row.completed = True
        row.visit_id = visit_id
        return await self._repos.applications.update(row)

    async def delete_expired_applications(self) -> int:
        """Delete in-progress applications nobody has touched within the expiry window."""
        cutoff = self._clock() - timedelta(minutes=self._expired_application_minutes)
        expired = await self._repos.applications.find_expired(cutoff)
        for row in expired:
            await self._repos.applications.delete(row.id)
            monitoring.track_event(
                "application-deleted",
                {
                    "applicationReference": row.reference,
                    "prisonerId": row.prisoner_id,
                    "reservationStatus": row.reservation_status.value,
                    "reserved": row.reserved_slot,
                },
            )
        if expired:
            logger.info(f"Deleted {len(expired)} expired applications")
        return len(expired)
