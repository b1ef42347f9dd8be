"""Tests for the audit trail and notification event repositories."""

from __future__ import annotations

from datetime import timedelta

from visit_scheduler.core.database.entities import EventAuditRow, VisitNotificationEventRow
from visit_scheduler.core.models.domain import EventAuditType, NotificationEventType


class TestEventAuditRepository:
    async def test_list_by_booking_reference_is_chronological(self, repos, now):
        await repos.event_audits.create(
            EventAuditRow(booking_reference="ab-cd-ef-gh", type=EventAuditType.BOOKED_VISIT, create_timestamp=now)
        )
        await repos.event_audits.create(
            EventAuditRow(
                booking_reference="ab-cd-ef-gh",
                type=EventAuditType.RESERVED_VISIT,
                create_timestamp=now - timedelta(minutes=5),
            )
        )
        await repos.event_audits.create(
            EventAuditRow(booking_reference="zz-zz-zz-zz", type=EventAuditType.BOOKED_VISIT, create_timestamp=now)
        )

        events = await repos.event_audits.list_by_booking_reference("ab-cd-ef-gh")

        assert [e.type for e in events] == [EventAuditType.RESERVED_VISIT, EventAuditType.BOOKED_VISIT]

    async def test_find_last_by_type(self, repos, now):
        for minutes in (10, 1):
            await repos.event_audits.create(
                EventAuditRow(
                    booking_reference="ab-cd-ef-gh",
                    type=EventAuditType.REQUESTED_VISIT,
                    text=f"{minutes} minutes ago",
                    create_timestamp=now - timedelta(minutes=minutes),
                )
            )

        last = await repos.event_audits.find_last_by_type("ab-cd-ef-gh", EventAuditType.REQUESTED_VISIT)

        assert last.text == "1 minutes ago"
        assert await repos.event_audits.find_last_by_type("ab-cd-ef-gh", EventAuditType.BOOKED_VISIT) is None


class TestVisitNotificationEventRepository:
    async def test_delete_by_booking_reference(self, repos):
        for event_type in (NotificationEventType.NON_ASSOCIATION_EVENT, NotificationEventType.PRISONER_RELEASED_EVENT):
            await repos.notification_events.create(
                VisitNotificationEventRow(booking_reference="ab-cd-ef-gh", type=event_type)
            )
        await repos.notification_events.create(
            VisitNotificationEventRow(
                booking_reference="zz-zz-zz-zz", type=NotificationEventType.NON_ASSOCIATION_EVENT
            )
        )

        assert await repos.notification_events.delete_by_booking_reference("ab-cd-ef-gh") == 2
        assert await repos.notification_events.list_by_booking_reference("ab-cd-ef-gh") == []
        assert len(await repos.notification_events.list_by_booking_reference("zz-zz-zz-zz")) == 1

    async def test_delete_nothing(self, repos):
        assert await repos.notification_events.delete_by_booking_reference("ab-cd-ef-gh") == 0
