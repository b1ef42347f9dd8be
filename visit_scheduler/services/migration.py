"""
Legacy (NOMIS) visit migration.

A migrated visit is stored exactly like a booked one: a session slot, a
completed application and the visit itself. Future visits are mapped onto
the session template that best fits them. Older visits, or those starting
before the configured offset, get an ad-hoc slot built from their own times.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from visit_scheduler.core import monitoring
from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.base import now
from visit_scheduler.core.database.entities import ApplicationRow, PrisonRow, SessionSlotRow, VisitRow
from visit_scheduler.core.exceptions import MigrateVisitInFutureError
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import (
    ApplicationMethodType,
    ApplicationStatus,
    EventAuditType,
    OutcomeStatus,
    UnFlagEventReason,
    UserType,
    Visit,
    VisitStatus,
    VisitSubStatus,
)
from visit_scheduler.core.models.io import MigratedCancelVisit, MigrateVisitRequest
from visit_scheduler.scheduling import MigrationSessionTemplateMatcher
from visit_scheduler.server.core.config import MigrationConfig

from .domain_events import DomainEventPublisher
from .event_audit import EventAuditService
from .mappers import dump_notes, dump_visitors
from .notification_events import VisitNotificationEventService
from .prisons import PrisonsService
from .session_slots import SessionSlotService
from .visit_store import VisitStoreService

logger = get_logger(__name__)

NOT_KNOWN_NOMIS = "NOT_KNOWN_NOMIS"
UNKNOWN_TOKEN = "UNKNOWN"


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(value.day, calendar.monthrange(year, month)[1]))


def capitalise_contact_name(name: str) -> str:
    """Legacy names are upper case; turn ``JOHN SMITH`` into ``John Smith``.

    Names already in mixed case and the ``UNKNOWN`` placeholder are kept as is.
    """
    if name == UNKNOWN_TOKEN or any(c.islower() for c in name):
        return name
    return " ".join(word.capitalize() for word in name.split(" "))


class MigrateVisitService:
    def __init__(
        self,
        repos: SqlRepoBundle,
        *,
        matcher: MigrationSessionTemplateMatcher,
        prisons: PrisonsService,
        slots: SessionSlotService,
        store: VisitStoreService,
        audit: EventAuditService,
        notifications: VisitNotificationEventService,
        events: DomainEventPublisher,
        config: Optional[MigrationConfig] = None,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._repos = repos
        self._matcher = matcher
        self._prisons = prisons
        self._slots = slots
        self._store = store
        self._audit = audit
        self._notifications = notifications
        self._events = events
        self._config = config or MigrationConfig()
        self._clock = clock

    async def _get_slot(self, request: MigrateVisitRequest, prison: PrisonRow) -> tuple[SessionSlotRow, str]:
        today = self._clock().date()
        start_date = request.start_timestamp.date()
        mapping_from = today + timedelta(days=self._config.session_template_mapping_offset_days)

        if start_date >= mapping_from:
            template = await self._matcher.get_matching_session_template(request)
            if template.start_time != request.start_timestamp.time() or template.end_time != request.end_timestamp.time():
                logger.info(
                    f"Migrated visit times {request.start_timestamp.time()}-{request.end_timestamp.time()} "
                    f"moved to session template {template.reference} times {template.start_time}-{template.end_time}"
                )
            slot = await self._slots.get_template_slot(template, prison.id, start_date)
            return slot, template.visit_room

        slot = await self._slots.get_session_slot(prison.id, request.start_timestamp, request.end_timestamp)
        return slot, request.visit_room

    async def migrate_visit(self, request: MigrateVisitRequest) -> str:
        """Import a legacy visit.

        Returns:
            Reference of the new visit

        Raises:
            MigrateVisitInFutureError: visit starts too far ahead
            MatchSessionTemplateToMigratedVisitError: no session template fits
        """
        max_date = add_months(self._clock().date(), self._config.max_months_in_future)
        if request.start_timestamp.date() > max_date:
            raise MigrateVisitInFutureError(
                f"Visit more than {self._config.max_months_in_future} months in future, will not be migrated!"
            )

        prison = await self._prisons.find_prison_by_code(request.prison_id)
        slot, visit_room = await self._get_slot(request, prison)
        actioned_by = request.actioned_by or NOT_KNOWN_NOMIS
        outcome = request.outcome_status or OutcomeStatus.NOT_RECORDED
        sub_status = VisitSubStatus.CANCELLED if request.visit_status == VisitStatus.CANCELLED else VisitSubStatus.AUTO_APPROVED
        contact = request.visit_contact

        visit = VisitRow(
            prison_id=prison.id,
            prisoner_id=request.prisoner_id,
            session_slot_id=slot.id,
            visit_type=request.visit_type,
            visit_room=visit_room,
            visit_restriction=request.visit_restriction,
            visit_status=request.visit_status,
            visit_sub_status=sub_status,
            outcome_status=outcome,
            user_type=UserType.STAFF,
            main_contact_name=capitalise_contact_name(contact.name) if contact else None,
            main_contact_phone=contact.telephone if contact else None,
            visitors=dump_visitors(request.visitors),
            notes=dump_notes(request.visit_notes),
            legacy_lead_visitor_id=request.legacy_data.lead_visitor_id if request.legacy_data else None,
        )
        visit = await self._repos.visits.create(visit)
        if request.create_date_time or request.modify_date_time:
            visit.create_timestamp = request.create_date_time or visit.create_timestamp
            visit.modify_timestamp = request.modify_date_time or visit.create_timestamp
            visit = await self._repos.visits.update(visit)

        application = await self._repos.applications.create(
            ApplicationRow(
                prison_id=prison.id,
                prisoner_id=request.prisoner_id,
                session_slot_id=slot.id,
                reserved_slot=True,
                visit_type=request.visit_type,
                restriction=request.visit_restriction,
                reservation_status=VisitStatus.RESERVED,
                application_status=ApplicationStatus.ACCEPTED,
                completed=True,
                user_type=UserType.STAFF,
                created_by=actioned_by,
                visit_id=visit.id,
                contact={"name": visit.main_contact_name, "telephone": visit.main_contact_phone} if contact else None,
                visitors=visit.visitors,
            )
        )

        await self._audit.save_event(
            EventAuditType.MIGRATED_VISIT,
            actioned_by=actioned_by,
            user_type=UserType.STAFF,
            booking_reference=visit.reference,
            application_reference=application.reference,
            session_template_reference=slot.session_template_reference,
            application_method_type=ApplicationMethodType.NOT_APPLICABLE,
        )
        monitoring.track_event(
            "visit-migrated",
            {
                "reference": visit.reference,
                "prisonerId": visit.prisoner_id,
                "prisonId": prison.code,
                "visitStatus": visit.visit_status.value,
                "outcomeStatus": outcome.value,
                "visitRestriction": visit.visit_restriction.value,
                "visitStart": slot.slot_start.isoformat(),
                "visitEnd": slot.slot_end.isoformat(),
                "visitRoom": visit.visit_room,
                "sessionTemplateReference": slot.session_template_reference,
                "totalVisitors": len(visit.visitors),
            },
        )
        return visit.reference

    async def cancel_migrated_visit(self, reference: str, cancel: MigratedCancelVisit) -> Visit:
        row = await self._store.get_visit_row(reference)
        if row.visit_status == VisitStatus.CANCELLED:
            logger.info(f"Migrated visit {reference} already cancelled")
            return await self._store.to_dto(row)

        row = await self._store.cancel(
            row, cancel.cancel_outcome.outcome_status, VisitSubStatus.CANCELLED, cancel.cancel_outcome.text
        )
        await self._notifications.delete_notification_events(reference, UnFlagEventReason.VISIT_CANCELLED_ON_NOMIS)
        visit = await self._store.to_dto(row)

        await self._audit.save_event(
            EventAuditType.MIGRATED_CANCELLED_VISIT,
            actioned_by=cancel.actioned_by or NOT_KNOWN_NOMIS,
            user_type=UserType.STAFF,
            booking_reference=reference,
            application_reference=visit.application_reference,
            session_template_reference=visit.session_template_reference,
            application_method_type=ApplicationMethodType.NOT_APPLICABLE,
            text=cancel.cancel_outcome.text,
        )
        await self._events.send_visit_cancelled_event(visit)
        monitoring.track_event(
            "visit-cancelled-migrated",
            {
                "reference": visit.reference,
                "prisonerId": visit.prisoner_id,
                "prisonId": visit.prison_code,
                "outcomeStatus": visit.outcome_status.value if visit.outcome_status else None,
            },
        )
        return visit
