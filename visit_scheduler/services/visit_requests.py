"""
Requested visits awaiting a staff decision.

A public booking made while request booking is enabled is stored BOOKED with
sub-status REQUESTED. Staff approve or reject it; the system rejects it
automatically when the booking window closes or the prisoner leaves.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, List, Optional

from visit_scheduler.clients import ApiClientError
from visit_scheduler.core import monitoring
from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.base import now
from visit_scheduler.core.database.entities import VisitRow
from visit_scheduler.core.exceptions import VisitValidationError
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import (
    ApplicationMethodType,
    EventAuditType,
    OutcomeStatus,
    UnFlagEventReason,
    UserType,
    Visit,
    VisitRequestAutoRejectionReason,
    VisitRequestsCount,
    VisitRequestSummary,
    VisitStatus,
    VisitSubStatus,
)

from .domain_events import DomainEventPublisher
from .event_audit import EventAuditService
from .notification_events import VisitNotificationEventService
from .prisoners import PrisonerService
from .prisons import PrisonsService
from .visit_store import VisitStoreService

logger = get_logger(__name__)

SYSTEM_USER = "SYSTEM"


class VisitRequestsService:
    def __init__(
        self,
        repos: SqlRepoBundle,
        *,
        store: VisitStoreService,
        prisons: PrisonsService,
        prisoners: PrisonerService,
        audit: EventAuditService,
        notifications: VisitNotificationEventService,
        events: DomainEventPublisher,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._repos = repos
        self._store = store
        self._prisons = prisons
        self._prisoners = prisoners
        self._audit = audit
        self._notifications = notifications
        self._events = events
        self._clock = clock

    async def get_visit_requests_count_for_prison(self, prison_code: str) -> VisitRequestsCount:
        prison = await self._prisons.find_prison_by_code(prison_code)
        return VisitRequestsCount(count=await self._repos.visits.count_requested(prison.id, self._clock()))

    async def _prisoner_name(self, prisoner_id: str) -> str:
        try:
            prisoner = await self._prisoners.get_prisoner(prisoner_id)
        except ApiClientError as e:
            logger.warning(f"Prisoner search failed for {prisoner_id}, using prisoner number: {e.message}")
            return prisoner_id
        if prisoner is None or not (prisoner.first_name or prisoner.last_name):
            return prisoner_id
        return " ".join(n for n in (prisoner.first_name, prisoner.last_name) if n)

    async def get_visit_requests_for_prison(self, prison_code: str) -> List[VisitRequestSummary]:
        prison = await self._prisons.find_prison_by_code(prison_code)
        summaries = []
        for row in await self._repos.visits.find_requested(prison_id=prison.id, start_from=self._clock()):
            slot = await self._repos.session_slots.get_by_id(row.session_slot_id)
            requested = await self._audit.find_last_event(row.reference, EventAuditType.REQUESTED_VISIT)
            summaries.append(
                VisitRequestSummary(
                    visit_reference=row.reference,
                    visit_date=slot.slot_date,
                    requested_on_date=requested.create_timestamp.date() if requested else None,
                    prisoner_name=await self._prisoner_name(row.prisoner_id),
                    prisoner_number=row.prisoner_id,
                    main_contact=row.main_contact_name,
                )
            )
        return sorted(summaries, key=lambda s: s.visit_date)

    async def _get_requested_visit(self, reference: str) -> VisitRow:
        row = await self._store.get_visit_row(reference)
        if row.visit_status != VisitStatus.BOOKED or row.visit_sub_status != VisitSubStatus.REQUESTED:
            raise VisitValidationError(
                f"Visit {reference} is not a visit request awaiting a decision",
                details={"reference": reference, "visitSubStatus": row.visit_sub_status.value},
            )
        return row

    def _track(self, event_name: str, visit: Visit, actioned_by: str, **extra) -> None:
        monitoring.track_event(
            event_name,
            {
                "reference": visit.reference,
                "prisonerId": visit.prisoner_id,
                "prisonId": visit.prison_code,
                "visitStart": visit.start_timestamp.isoformat(),
                "visitSubStatus": visit.visit_sub_status.value,
                "actionedBy": actioned_by,
                **extra,
            },
        )

    async def approve_visit_request(self, reference: str, actioned_by: str) -> Visit:
        row = await self._get_requested_visit(reference)
        row.visit_sub_status = VisitSubStatus.APPROVED
        row = await self._repos.visits.update(row)
        visit = await self._store.to_dto(row)

        await self._audit.save_event(
            EventAuditType.REQUESTED_VISIT_APPROVED,
            actioned_by=actioned_by,
            user_type=UserType.STAFF,
            booking_reference=reference,
            application_reference=visit.application_reference,
            session_template_reference=visit.session_template_reference,
            application_method_type=ApplicationMethodType.NOT_APPLICABLE,
        )
        await self._notifications.delete_notification_events(reference, UnFlagEventReason.VISIT_REQUEST_APPROVED)
        await self._events.send_visit_request_approved_event(visit)
        self._track("visit-request-approved", visit, actioned_by)
        return visit

    async def reject_visit_request(self, reference: str, actioned_by: str) -> Visit:
        row = await self._get_requested_visit(reference)
        row = await self._store.cancel(row, OutcomeStatus.VISIT_REQUEST_REJECTED, VisitSubStatus.REJECTED)
        visit = await self._store.to_dto(row)

        await self._audit.save_event(
            EventAuditType.REQUESTED_VISIT_REJECTED,
            actioned_by=actioned_by,
            user_type=UserType.STAFF,
            booking_reference=reference,
            application_reference=visit.application_reference,
            session_template_reference=visit.session_template_reference,
            application_method_type=ApplicationMethodType.NOT_APPLICABLE,
        )
        await self._notifications.delete_notification_events(reference, UnFlagEventReason.VISIT_REQUEST_REJECTED)
        await self._events.send_visit_cancelled_event(visit)
        self._track("visit-request-rejected", visit, actioned_by)
        return visit

    async def _find_for_auto_rejection(
        self,
        reason: VisitRequestAutoRejectionReason,
        prison_code: Optional[str],
        prisoner_id: Optional[str],
    ) -> List[VisitRow]:
        current = self._clock()
        if reason == VisitRequestAutoRejectionReason.MINIMUM_BOOKING_WINDOW_REACHED:
            prisons = [await self._prisons.find_prison_by_code(prison_code)] if prison_code else await self._repos.prisons.list()
            rows: List[VisitRow] = []
            for prison in prisons:
                window_start = datetime.combine(
                    current.date() + timedelta(days=prison.policy_notice_days_min), datetime.min.time()
                )
                rows.extend(
                    await self._repos.visits.find_requested(
                        prison_id=prison.id, prisoner_id=prisoner_id, start_from=current, start_before=window_start
                    )
                )
            return rows

        if prisoner_id is None:
            raise VisitValidationError(f"A prisoner is needed to auto reject visit requests for {reason.value}")
        prison_id = (await self._prisons.find_prison_by_code(prison_code)).id if prison_code else None
        return await self._repos.visits.find_requested(prison_id=prison_id, prisoner_id=prisoner_id, start_from=current)

    async def auto_reject_visit_requests(
        self,
        reason: VisitRequestAutoRejectionReason,
        *,
        prison_code: Optional[str] = None,
        prisoner_id: Optional[str] = None,
    ) -> List[Visit]:
        """Reject outstanding visit requests on behalf of the system.

        Args:
            reason: Why the requests are being rejected
            prison_code: For the booking window, the prison to check (all prisons when None).
                For a transfer, the prison the prisoner has left.
            prisoner_id: Prisoner released or transferred

        Returns:
            The rejected visits
        """
        rejected = []
        for row in await self._find_for_auto_rejection(reason, prison_code, prisoner_id):
            row = await self._store.cancel(row, OutcomeStatus.VISIT_REQUEST_AUTO_REJECTED, VisitSubStatus.AUTO_REJECTED)
            visit = await self._store.to_dto(row)
            await self._audit.save_event(
                EventAuditType.REQUESTED_VISIT_AUTO_REJECTED,
                actioned_by=SYSTEM_USER,
                user_type=UserType.SYSTEM,
                booking_reference=visit.reference,
                application_reference=visit.application_reference,
                session_template_reference=visit.session_template_reference,
                application_method_type=ApplicationMethodType.NOT_APPLICABLE,
                text=reason.value,
            )
            await self._notifications.delete_notification_events(
                visit.reference, UnFlagEventReason.VISIT_REQUEST_AUTO_REJECTED
            )
            await self._events.send_visit_cancelled_event(visit)
            self._track("visit-request-auto-rejected", visit, SYSTEM_USER, reason=reason.value)
            rejected.append(visit)

        logger.info(f"Auto rejected {len(rejected)} visit requests: {reason.value}")
        return rejected
