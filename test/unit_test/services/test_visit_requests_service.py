"""Unit tests for staff and automatic decisions on requested visits."""

from __future__ import annotations

from datetime import time, timedelta

import pytest

from visit_scheduler.clients import ApiClientError
from visit_scheduler.core.database.entities import VisitNotificationEventRow
from visit_scheduler.core.exceptions import PrisonNotFoundError, VisitNotFoundError, VisitValidationError
from visit_scheduler.core.models.domain import (
    EventAuditType,
    NotificationEventType,
    OutcomeStatus,
    UserType,
    VisitRequestAutoRejectionReason,
    VisitStatus,
    VisitSubStatus,
)
from visit_scheduler.services.domain_events import VISIT_CANCELLED, VISIT_REQUEST_APPROVED
from visit_scheduler.services.visit_requests import SYSTEM_USER


@pytest.fixture
def request_visit(book_visit):
    async def _request(template, session_date, prisoner_id="A1234AA"):
        return await book_visit(
            template, session_date, prisoner_id=prisoner_id, user_type=UserType.PUBLIC, is_request_booking=True
        )

    return _request


def _last_event_type(sns_client):
    return sns_client.publish.call_args.kwargs["MessageAttributes"]["eventType"]["StringValue"]


class TestVisitRequestQueries:
    async def test_count_and_list(self, services, template, session_date, request_visit, book_visit, today):
        later = await request_visit(template, session_date + timedelta(days=7))
        sooner = await request_visit(template, session_date)
        await book_visit(template, session_date, prisoner_id="B1111BB")

        count = await services.visit_requests.get_visit_requests_count_for_prison("HEI")
        summaries = await services.visit_requests.get_visit_requests_for_prison("HEI")

        assert count.count == 2
        assert [s.visit_reference for s in summaries] == [sooner.reference, later.reference]
        first = summaries[0]
        assert first.visit_date == session_date
        assert first.requested_on_date == sooner.created_timestamp.date()
        assert first.prisoner_name == "JOHN SMITH"
        assert first.prisoner_number == "A1234AA"
        assert first.main_contact == "Jane Smith"

    async def test_prisoner_name_falls_back_to_number(self, services, template, session_date, request_visit, api_clients):
        await request_visit(template, session_date)
        api_clients.prisoner_search.get_prisoner.side_effect = ApiClientError("get_prisoner failed: 500", status_code=500)

        summaries = await services.visit_requests.get_visit_requests_for_prison("HEI")

        assert summaries[0].prisoner_name == "A1234AA"

    async def test_unknown_prison(self, services):
        with pytest.raises(PrisonNotFoundError):
            await services.visit_requests.get_visit_requests_count_for_prison("XYZ")


class TestApproveAndReject:
    async def test_approve(self, services, repos, template, session_date, request_visit, sns_client):
        visit = await request_visit(template, session_date)
        await repos.notification_events.create(
            VisitNotificationEventRow(booking_reference=visit.reference, type=NotificationEventType.NON_ASSOCIATION_EVENT)
        )

        approved = await services.visit_requests.approve_visit_request(visit.reference, "staff1")

        assert approved.visit_status == VisitStatus.BOOKED
        assert approved.visit_sub_status == VisitSubStatus.APPROVED
        assert await repos.notification_events.list_by_booking_reference(visit.reference) == []
        history = await services.visits.get_visit_history(visit.reference)
        assert history[-1].type == EventAuditType.REQUESTED_VISIT_APPROVED
        assert history[-1].actioned_by == "staff1"
        assert _last_event_type(sns_client) == VISIT_REQUEST_APPROVED

    async def test_reject(self, services, template, session_date, request_visit, sns_client):
        visit = await request_visit(template, session_date)

        rejected = await services.visit_requests.reject_visit_request(visit.reference, "staff1")

        assert rejected.visit_status == VisitStatus.CANCELLED
        assert rejected.visit_sub_status == VisitSubStatus.REJECTED
        assert rejected.outcome_status == OutcomeStatus.VISIT_REQUEST_REJECTED
        history = await services.visits.get_visit_history(visit.reference)
        assert history[-1].type == EventAuditType.REQUESTED_VISIT_REJECTED
        assert _last_event_type(sns_client) == VISIT_CANCELLED
        assert (await services.visit_requests.get_visit_requests_count_for_prison("HEI")).count == 0

    async def test_approved_request_cannot_be_decided_again(self, services, template, session_date, request_visit):
        visit = await request_visit(template, session_date)
        await services.visit_requests.approve_visit_request(visit.reference, "staff1")

        with pytest.raises(VisitValidationError):
            await services.visit_requests.reject_visit_request(visit.reference, "staff1")

    async def test_auto_approved_visit_is_not_a_request(self, services, template, session_date, book_visit):
        visit = await book_visit(template, session_date)

        with pytest.raises(VisitValidationError):
            await services.visit_requests.approve_visit_request(visit.reference, "staff1")

    async def test_unknown_visit(self, services):
        with pytest.raises(VisitNotFoundError):
            await services.visit_requests.approve_visit_request("ab-cd-ef-gh", "staff1")


class TestAutoReject:
    async def test_minimum_booking_window_reached(self, services, make_template, prison, template, today, request_visit):
        tomorrow = today + timedelta(days=1)
        late_template = await make_template(prison, tomorrow, start_time=time(23, 0), end_time=time(23, 30))
        inside = await request_visit(late_template, tomorrow)
        outside = await request_visit(template, today + timedelta(days=7))

        rejected = await services.visit_requests.auto_reject_visit_requests(
            VisitRequestAutoRejectionReason.MINIMUM_BOOKING_WINDOW_REACHED
        )

        assert [v.reference for v in rejected] == [inside.reference]
        assert rejected[0].visit_sub_status == VisitSubStatus.AUTO_REJECTED
        assert rejected[0].outcome_status == OutcomeStatus.VISIT_REQUEST_AUTO_REJECTED
        remaining = await services.visit_requests.get_visit_requests_for_prison("HEI")
        assert [s.visit_reference for s in remaining] == [outside.reference]

        history = await services.visits.get_visit_history(inside.reference)
        assert history[-1].type == EventAuditType.REQUESTED_VISIT_AUTO_REJECTED
        assert history[-1].actioned_by == SYSTEM_USER
        assert history[-1].user_type == UserType.SYSTEM
        assert history[-1].text == VisitRequestAutoRejectionReason.MINIMUM_BOOKING_WINDOW_REACHED.value

    async def test_prisoner_released(self, services, template, session_date, request_visit):
        visit = await request_visit(template, session_date)
        await request_visit(template, session_date, prisoner_id="B1111BB")

        rejected = await services.visit_requests.auto_reject_visit_requests(
            VisitRequestAutoRejectionReason.PRISONER_RELEASED, prisoner_id="A1234AA"
        )

        assert [v.reference for v in rejected] == [visit.reference]

    async def test_prisoner_transferred_from_other_prison(self, services, template, session_date, request_visit):
        await request_visit(template, session_date)

        rejected = await services.visit_requests.auto_reject_visit_requests(
            VisitRequestAutoRejectionReason.PRISONER_TRANSFERRED, prison_code="HEI", prisoner_id="A1234AA"
        )

        assert len(rejected) == 1

    async def test_prisoner_needed(self, services):
        with pytest.raises(VisitValidationError):
            await services.visit_requests.auto_reject_visit_requests(VisitRequestAutoRejectionReason.PRISONER_RELEASED)
