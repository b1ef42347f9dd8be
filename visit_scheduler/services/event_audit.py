"""
Visit history service.

Every state transition of an application or visit writes one audit row. The
rows form the history returned by ``GET /v1/visits/{reference}/history`` and
are also used to find when a visit request was made.
"""

from __future__ import annotations

from typing import List, Optional

from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.entities import EventAuditRow
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import ApplicationMethodType, EventAudit, EventAuditType, UserType

from .mappers import event_audit_to_domain

logger = get_logger(__name__)


class EventAuditService:
    def __init__(self, repos: SqlRepoBundle) -> None:
        self._repos = repos

    async def save_event(
        self,
        event_type: EventAuditType,
        *,
        actioned_by: Optional[str],
        user_type: Optional[UserType],
        booking_reference: Optional[str] = None,
        application_reference: Optional[str] = None,
        session_template_reference: Optional[str] = None,
        application_method_type: ApplicationMethodType = ApplicationMethodType.NOT_KNOWN,
        text: Optional[str] = None,
    ) -> EventAudit:
        row = await self._repos.event_audits.create(
            EventAuditRow(
                type=event_type,
                actioned_by=actioned_by,
                user_type=user_type,
                booking_reference=booking_reference,
                application_reference=application_reference,
                session_template_reference=session_template_reference,
                application_method_type=application_method_type,
                text=text,
            )
        )
        logger.debug(f"Saved audit event {event_type.value} booking={booking_reference} application={application_reference}")
        return event_audit_to_domain(row)

    async def get_history(self, booking_reference: str) -> List[EventAudit]:
        rows = await self._repos.event_audits.list_by_booking_reference(booking_reference)
        return [event_audit_to_domain(r) for r in rows]

    async def find_last_event(self, booking_reference: str, event_type: EventAuditType) -> Optional[EventAudit]:
        row = await self._repos.event_audits.find_last_by_type(booking_reference, event_type)
        return event_audit_to_domain(row) if row else None
