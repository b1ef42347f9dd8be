"""
Visit booking and cancellation.

``book_visit`` turns an application into a BOOKED visit and ``cancel_visit``
ends it. Both are idempotent: repeating a completed booking or cancelling an
already cancelled visit returns the current visit unchanged, so clients can
safely retry.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, List

from visit_scheduler.core import monitoring
from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.base import now
from visit_scheduler.core.database.entities import ApplicationRow
from visit_scheduler.core.exceptions import ExpiredVisitAmendError, VisitValidationError
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import (
    ApplicationStatus,
    EventAudit,
    EventAuditType,
    UnFlagEventReason,
    UserType,
    Visit,
    VisitStatus,
    VisitSubStatus,
)
from visit_scheduler.core.models.io import BookingRequest, CancelVisit

from .application_validation import ApplicationValidationService
from .applications import ApplicationService
from .domain_events import DomainEventPublisher
from .event_audit import EventAuditService
from .notification_events import VisitNotificationEventService
from .session_slots import SessionSlotService
from .visit_store import VisitStoreService

logger = get_logger(__name__)


def _telemetry_properties(visit: Visit) -> dict:
    return {
        "reference": visit.reference,
        "applicationReference": visit.application_reference,
        "prisonerId": visit.prisoner_id,
        "prisonId": visit.prison_code,
        "visitStatus": visit.visit_status.value,
        "visitSubStatus": visit.visit_sub_status.value,
        "visitRestriction": visit.visit_restriction.value,
        "visitStart": visit.start_timestamp.isoformat(),
        "visitEnd": visit.end_timestamp.isoformat(),
        "visitType": visit.visit_type.value,
        "visitRoom": visit.visit_room,
        "outcomeStatus": visit.outcome_status.value if visit.outcome_status else None,
        "totalVisitors": len(visit.visitors),
    }


class VisitService:
    def __init__(
        self,
        repos: SqlRepoBundle,
        *,
        store: VisitStoreService,
        applications: ApplicationService,
        validation: ApplicationValidationService,
        slots: SessionSlotService,
        audit: EventAuditService,
        notifications: VisitNotificationEventService,
        events: DomainEventPublisher,
        request_booking_enabled: bool = False,
        cancellation_day_limit: int = 28,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._repos = repos
        self._store = store
        self._applications = applications
        self._validation = validation
        self._slots = slots
        self._audit = audit
        self._notifications = notifications
        self._events = events
        self._request_booking_enabled = request_booking_enabled
        self._cancellation_day_limit = cancellation_day_limit
        self._clock = clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_visit_by_reference(self, reference: str) -> Visit:
        return await self._store.to_dto(await self._store.get_visit_row(reference))

    async def get_booked_visits_for_prisoner(self, prisoner_id: str) -> List[Visit]:
        rows = await self._repos.visits.find_booked_for_prisoner(prisoner_id, self._clock())
        return await self._store.to_dtos(rows)

    async def get_visit_history(self, reference: str) -> List[EventAudit]:
        await self._store.get_visit_row(reference)
        return await self._audit.get_history(reference)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def _sub_status_for(self, request: BookingRequest, user_type: UserType) -> VisitSubStatus:
        if self._request_booking_enabled and request.is_request_booking and user_type == UserType.PUBLIC:
            return VisitSubStatus.REQUESTED
        return VisitSubStatus.AUTO_APPROVED

    async def _already_booked(self, application: ApplicationRow) -> Visit:
        """The visit a completed application produced, whatever its current status."""
        booked = await self._repos.visits.get_by_id(application.visit_id) if application.visit_id else None
        if booked is None or application.application_status != ApplicationStatus.ACCEPTED:
            raise VisitValidationError(
                f"Application {application.reference} is already being booked", status_code=409
            )
        logger.info(f"Application {application.reference} already booked as visit {booked.reference}")
        return await self._store.to_dto(booked)

    async def book_visit(self, application_reference: str, request: BookingRequest) -> Visit:
        """Book the visit held by an application.

        Args:
            application_reference: Application to complete
            request: Who is booking and how

        Returns:
            The booked visit

        Raises:
            ApplicationNotFoundError: unknown application
            VisitValidationError: the booking failed validation
            OverCapacityError: the slot is full
            ExpiredVisitAmendError: the visit being changed is in the past
        """
        application = await self._applications.get_application_row(application_reference)
        if application.completed:
            return await self._already_booked(application)

        if not await self._repos.applications.claim_for_booking(application_reference):
            return await self._already_booked(await self._repos.applications.refresh(application))

        try:
            existing = await self._repos.visits.get_by_id(application.visit_id) if application.visit_id else None
            await self._validation.validate(application, existing, request.allow_over_booking)

            if existing is not None:
                existing_slot = await self._slots.get_slot(existing.session_slot_id)
                if existing_slot.slot_start < self._clock():
                    raise ExpiredVisitAmendError(f"Visit {existing.reference} is in the past and cannot be changed")
        except Exception:
            await self._repos.applications.release_booking_claim(application_reference)
            raise

        if existing is not None:
            await self._notifications.delete_notification_events(existing.reference, UnFlagEventReason.VISIT_UPDATED)

        sub_status = existing.visit_sub_status if existing else self._sub_status_for(request, application.user_type)
        visit_row = await self._store.create_or_update_booked_visit(application, existing, sub_status)
        await self._applications.complete_application(application_reference, visit_row.id)
        visit = await self._store.to_dto(visit_row)

        is_update = existing is not None
        if is_update:
            audit_type = EventAuditType.UPDATED_VISIT
        elif sub_status == VisitSubStatus.REQUESTED:
            audit_type = EventAuditType.REQUESTED_VISIT
        else:
            audit_type = EventAuditType.BOOKED_VISIT
        await self._audit.save_event(
            audit_type,
            actioned_by=request.actioned_by,
            user_type=request.user_type,
            booking_reference=visit.reference,
            application_reference=application_reference,
            session_template_reference=visit.session_template_reference,
            application_method_type=request.application_method_type,
        )

        if is_update:
            await self._events.send_visit_changed_event(visit)
        else:
            await self._events.send_visit_booked_event(visit)
        monitoring.track_event(
            "visit-changed" if is_update else "visit-booked",
            {**_telemetry_properties(visit), "isUpdate": is_update},
        )
        return visit

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def _check_can_cancel(self, visit_start: datetime, user_type: UserType, reference: str) -> None:
        current = self._clock()
        if user_type == UserType.PUBLIC:
            if visit_start <= current:
                raise ExpiredVisitAmendError(f"Visit {reference} has already started and cannot be cancelled")
            return

        earliest = datetime.combine((current - timedelta(days=self._cancellation_day_limit)).date(), datetime.min.time())
        if visit_start < earliest:
            raise ExpiredVisitAmendError(
                f"Visit {reference} is more than {self._cancellation_day_limit} days in the past and cannot be cancelled"
            )

    async def cancel_visit(self, reference: str, cancel: CancelVisit) -> Visit:
        row = await self._store.get_visit_row(reference)
        if row.visit_status == VisitStatus.CANCELLED:
            logger.info(f"Visit {reference} already cancelled")
            return await self._store.to_dto(row)

        slot = await self._slots.get_slot(row.session_slot_id)
        self._check_can_cancel(slot.slot_start, cancel.user_type, reference)

        row = await self._store.cancel(
            row, cancel.cancel_outcome.outcome_status, VisitSubStatus.CANCELLED, cancel.cancel_outcome.text
        )
        await self._notifications.delete_notification_events(reference, UnFlagEventReason.VISIT_CANCELLED)
        visit = await self._store.to_dto(row)

        await self._audit.save_event(
            EventAuditType.CANCELLED_VISIT,
            actioned_by=cancel.actioned_by,
            user_type=cancel.user_type,
            booking_reference=reference,
            application_reference=visit.application_reference,
            session_template_reference=visit.session_template_reference,
            application_method_type=cancel.application_method_type,
            text=cancel.cancel_outcome.text,
        )
        await self._events.send_visit_cancelled_event(visit)
        monitoring.track_event("visit-cancelled", _telemetry_properties(visit))
        return visit
