"""Unit tests for visit session listing and capacity."""

from __future__ import annotations

from datetime import timedelta, time

import pytest

from visit_scheduler.clients import (
    NonAssociationDetailDTO,
    NonAssociationDetailsDTO,
    NonAssociationOffenderDTO,
)
from visit_scheduler.core.exceptions import ItemNotFoundError, PrisonNotFoundError, PrisonNotSupportedError
from visit_scheduler.core.models.domain import SessionConflict, VisitRestriction


def _non_association_with(*prisoner_ids: str) -> NonAssociationDetailsDTO:
    return NonAssociationDetailsDTO(
        non_associations=[
            NonAssociationDetailDTO(offender_non_association=NonAssociationOffenderDTO(offender_no=p))
            for p in prisoner_ids
        ]
    )


class TestGetVisitSessions:
    async def test_lists_weekly_sessions_in_booking_window(self, services, template, today):
        sessions = await services.sessions.get_visit_sessions("HEI")

        assert [s.start_timestamp.date() for s in sessions] == [today + timedelta(days=d) for d in (7, 14, 21, 28)]
        first = sessions[0]
        assert first.session_template_reference == template.reference
        assert first.start_timestamp.time() == time(13, 0)
        assert first.end_timestamp.time() == time(15, 0)
        assert first.open_visit_capacity == 2
        assert first.closed_visit_capacity == 1
        assert first.open_visit_booked_count == 0
        assert first.sessions_conflicts == []

    async def test_notice_day_overrides(self, services, template, today):
        sessions = await services.sessions.get_visit_sessions("HEI", min_override=8, max_override=14)

        assert [s.start_timestamp.date() for s in sessions] == [today + timedelta(days=14)]

    async def test_sessions_are_sorted_by_start(self, services, make_template, prison, template):
        await make_template(prison, start_time=time(9, 0), end_time=time(10, 0))

        sessions = await services.sessions.get_visit_sessions("HEI")

        starts = [s.start_timestamp for s in sessions]
        assert starts == sorted(starts)
        assert sessions[0].start_timestamp.time() == time(9, 0)

    async def test_prison_exclude_dates_are_skipped(self, services, make_prison, make_template, today):
        prison = await make_prison("BLI", exclude_dates=[(today + timedelta(days=7)).isoformat()])
        await make_template(prison)

        sessions = await services.sessions.get_visit_sessions("BLI")

        assert today + timedelta(days=7) not in [s.start_timestamp.date() for s in sessions]
        assert len(sessions) == 3

    async def test_template_exclude_dates_are_skipped(self, services, make_template, prison, today):
        await make_template(prison, exclude_dates=[(today + timedelta(days=14)).isoformat()])

        sessions = await services.sessions.get_visit_sessions("HEI")

        assert today + timedelta(days=14) not in [s.start_timestamp.date() for s in sessions]

    async def test_template_valid_to_date_caps_the_range(self, services, make_template, prison, today):
        await make_template(prison, valid_to_date=today + timedelta(days=15))

        sessions = await services.sessions.get_visit_sessions("HEI")

        assert [s.start_timestamp.date() for s in sessions] == [today + timedelta(days=7), today + timedelta(days=14)]

    async def test_unknown_prison(self, services):
        with pytest.raises(PrisonNotFoundError):
            await services.sessions.get_visit_sessions("XYZ")

    async def test_inactive_prison(self, services, make_prison):
        await make_prison("MDI", active=False)
        with pytest.raises(PrisonNotSupportedError):
            await services.sessions.get_visit_sessions("MDI")

    async def test_booked_counts(self, services, template, session_date, book_visit):
        await book_visit(template, session_date)
        await book_visit(template, session_date, prisoner_id="C3333CC", restriction=VisitRestriction.CLOSED)

        sessions = await services.sessions.get_visit_sessions("HEI")

        assert sessions[0].open_visit_booked_count == 1
        assert sessions[0].closed_visit_booked_count == 1
        assert sessions[1].open_visit_booked_count == 0

    async def test_booked_counts_include_reservations(self, services, template, session_date, application_request):
        for prisoner_id in ("B1111BB", "C3333CC"):
            await services.applications.create_initial_application(
                application_request(template, session_date, prisoner_id=prisoner_id)
            )

        sessions = await services.sessions.get_visit_sessions("HEI")

        assert sessions[0].open_visit_booked_count == 2
        assert sessions[0].closed_visit_booked_count == 0
        available = await services.sessions.get_available_sessions("HEI", "A1234AA", VisitRestriction.OPEN)
        assert session_date not in [s.start_timestamp.date() for s in available]
        assert len(available) == 3

    async def test_sessions_filtered_for_prisoner(self, services, make_template, prison, template):
        await make_template(
            prison,
            start_time=time(9, 0),
            end_time=time(10, 0),
            category_groups=[{"name": "Category A", "categories": ["A_HIGH", "A_EXCEPTIONAL"]}],
        )

        sessions = await services.sessions.get_visit_sessions("HEI", prisoner_id="A1234AA")

        assert {s.session_template_reference for s in sessions} == {template.reference}

    async def test_unknown_prisoner(self, services, template, api_clients):
        api_clients.prisoner_search.get_prisoner.return_value = None

        with pytest.raises(ItemNotFoundError):
            await services.sessions.get_visit_sessions("HEI", prisoner_id="A1234AA")

    async def test_non_association_conflict(self, services, template, session_date, book_visit, api_clients):
        await book_visit(template, session_date, prisoner_id="B1111BB")
        api_clients.non_associations.get_non_associations.return_value = _non_association_with("B1111BB")

        sessions = await services.sessions.get_visit_sessions("HEI", prisoner_id="A1234AA")

        assert sessions[0].sessions_conflicts == [SessionConflict.NON_ASSOCIATION]
        assert all(not s.sessions_conflicts for s in sessions[1:])

    async def test_non_association_reservation_conflict(self, services, template, session_date, application_request, api_clients):
        await services.applications.create_initial_application(
            application_request(template, session_date, prisoner_id="B1111BB")
        )
        api_clients.non_associations.get_non_associations.return_value = _non_association_with("B1111BB")

        sessions = await services.sessions.get_visit_sessions("HEI", prisoner_id="A1234AA")

        assert sessions[0].sessions_conflicts == [SessionConflict.NON_ASSOCIATION]
        assert all(not s.sessions_conflicts for s in sessions[1:])

    async def test_double_booking_conflict(self, services, template, session_date, book_visit):
        await book_visit(template, session_date)

        sessions = await services.sessions.get_visit_sessions("HEI", prisoner_id="A1234AA")

        assert sessions[0].sessions_conflicts == [SessionConflict.DOUBLE_BOOKING_OR_RESERVATION]

    async def test_reservation_conflict(self, services, template, session_date, application_request):
        await services.applications.create_initial_application(application_request(template, session_date))

        sessions = await services.sessions.get_visit_sessions("HEI", prisoner_id="A1234AA")

        assert SessionConflict.DOUBLE_BOOKING_OR_RESERVATION in sessions[0].sessions_conflicts


class TestGetAvailableSessions:
    async def test_excludes_full_and_conflicting_sessions(
        self, services, template, session_date, book_visit, today
    ):
        await book_visit(template, session_date, prisoner_id="C3333CC", restriction=VisitRestriction.CLOSED)
        await book_visit(template, session_date + timedelta(days=7))

        closed = await services.sessions.get_available_sessions("HEI", "A1234AA", VisitRestriction.CLOSED)

        # first week is full, second week the prisoner is already booked
        assert [s.start_timestamp.date() for s in closed] == [today + timedelta(days=21), today + timedelta(days=28)]

    async def test_restriction_without_capacity(self, services, make_template, prison):
        await make_template(prison, closed_capacity=0)

        assert await services.sessions.get_available_sessions("HEI", "A1234AA", VisitRestriction.CLOSED) == []
        assert len(await services.sessions.get_available_sessions("HEI", "A1234AA", VisitRestriction.OPEN)) == 4


class TestGetSessionCapacity:
    async def test_capacity_of_matching_template(self, services, template, session_date):
        capacity = await services.sessions.get_session_capacity("HEI", session_date, time(13, 0), time(15, 0))

        assert capacity.open == 2
        assert capacity.closed == 1

    async def test_capacity_sums_several_templates(self, services, make_template, prison, template, session_date):
        await make_template(prison, session_date, open_capacity=5, closed_capacity=0, visit_room="Annex")

        capacity = await services.sessions.get_session_capacity("HEI", session_date, time(13, 0), time(15, 0))

        assert capacity.open == 7
        assert capacity.closed == 1

    async def test_capacity_not_found(self, services, template, session_date):
        with pytest.raises(ItemNotFoundError):
            await services.sessions.get_session_capacity("HEI", session_date, time(9, 0), time(10, 0))

    async def test_capacity_skips_weeks_the_template_does_not_run(self, services, make_template, prison, today):
        # fortnightly from last week, so not running in two weeks
        await make_template(prison, weekly_frequency=2)

        with pytest.raises(ItemNotFoundError):
            await services.sessions.get_session_capacity(
                "HEI", today + timedelta(days=14), time(13, 0), time(15, 0)
            )
