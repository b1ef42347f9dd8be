"""Unit tests for legacy visit migration."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from visit_scheduler.core.exceptions import (
    MatchSessionTemplateToMigratedVisitError,
    MigrateVisitInFutureError,
    PrisonNotFoundError,
)
from visit_scheduler.core.models.domain import (
    ApplicationMethodType,
    ApplicationStatus,
    EventAuditType,
    OutcomeStatus,
    UserType,
    Visitor,
    VisitNote,
    VisitNoteType,
    VisitRestriction,
    VisitStatus,
    VisitSubStatus,
)
from visit_scheduler.core.models.io import MigratedCancelVisit, MigratedContact, MigrateVisitRequest, Outcome
from visit_scheduler.services.migration import NOT_KNOWN_NOMIS, add_months, capitalise_contact_name


def _request(visit_date: date, start: time = time(13, 0), end: time = time(15, 0), **kwargs) -> MigrateVisitRequest:
    values = dict(
        prisoner_id="A1234AA",
        prison_id="HEI",
        visit_room="VISITS MAIN HALL",
        start_timestamp=datetime.combine(visit_date, start),
        end_timestamp=datetime.combine(visit_date, end),
        visit_status=VisitStatus.BOOKED,
        visit_restriction=VisitRestriction.OPEN,
        visit_contact=MigratedContact(name="JOHN SMITH", telephone="01234567890"),
        visitors=[Visitor(nomis_person_id=4729510)],
        visit_notes=[VisitNote(type=VisitNoteType.VISIT_COMMENT, text="Legacy comment")],
    )
    values.update(kwargs)
    return MigrateVisitRequest(**values)


@pytest.mark.parametrize(
    ("value", "months", "expected"),
    [
        (date(2024, 1, 15), 6, date(2024, 7, 15)),
        (date(2024, 8, 31), 6, date(2025, 2, 28)),
        (date(2023, 12, 31), 2, date(2024, 2, 29)),
        (date(2024, 3, 1), 0, date(2024, 3, 1)),
    ],
)
def test_add_months(value, months, expected):
    assert add_months(value, months) == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("JOHN SMITH", "John Smith"),
        ("ANNE-MARIE O'NEIL", "Anne-marie O'neil"),
        ("John McDonald", "John McDonald"),
        ("UNKNOWN", "UNKNOWN"),
    ],
)
def test_capitalise_contact_name(name, expected):
    assert capitalise_contact_name(name) == expected


class TestMigrateVisit:
    async def test_future_visit_uses_session_template(self, services, repos, template, session_date):
        reference = await services.migration.migrate_visit(_request(session_date))

        visit = await services.visits.get_visit_by_reference(reference)
        assert visit.session_template_reference == template.reference
        assert visit.visit_room == "Visits Main Hall"
        assert visit.visit_status == VisitStatus.BOOKED
        assert visit.visit_sub_status == VisitSubStatus.AUTO_APPROVED
        assert visit.outcome_status == OutcomeStatus.NOT_RECORDED
        assert visit.user_type == UserType.STAFF
        assert visit.visit_contact.name == "John Smith"
        assert visit.visit_notes[0].text == "Legacy comment"

        application = await repos.applications.get_by_reference(visit.application_reference)
        assert application.application_status == ApplicationStatus.ACCEPTED
        assert application.completed is True
        assert application.created_by == NOT_KNOWN_NOMIS

        history = await services.visits.get_visit_history(reference)
        assert len(history) == 1
        assert history[0].type == EventAuditType.MIGRATED_VISIT
        assert history[0].application_method_type == ApplicationMethodType.NOT_APPLICABLE
        assert history[0].actioned_by == NOT_KNOWN_NOMIS

    async def test_visit_times_move_to_template(self, services, template, session_date):
        reference = await services.migration.migrate_visit(_request(session_date, time(13, 30), time(14, 45)))

        visit = await services.visits.get_visit_by_reference(reference)
        assert visit.session_template_reference == template.reference
        assert visit.start_timestamp == datetime.combine(session_date, time(13, 0))
        assert visit.end_timestamp == datetime.combine(session_date, time(15, 0))

    async def test_past_visit_gets_ad_hoc_slot(self, services, prison, today):
        visit_date = today - timedelta(days=30)

        reference = await services.migration.migrate_visit(_request(visit_date, time(10, 0), time(11, 0)))

        visit = await services.visits.get_visit_by_reference(reference)
        assert visit.session_template_reference is None
        assert visit.visit_room == "VISITS MAIN HALL"
        assert visit.start_timestamp == datetime.combine(visit_date, time(10, 0))

    async def test_ad_hoc_slots_are_shared(self, services, repos, prison, today):
        visit_date = today - timedelta(days=30)

        first = await services.migration.migrate_visit(_request(visit_date))
        second = await services.migration.migrate_visit(_request(visit_date, prisoner_id="B1111BB"))

        rows = [await repos.visits.get_by_reference(r) for r in (first, second)]
        assert rows[0].session_slot_id == rows[1].session_slot_id

    async def test_cancelled_visit(self, services, prison, today):
        reference = await services.migration.migrate_visit(
            _request(
                today - timedelta(days=3),
                visit_status=VisitStatus.CANCELLED,
                outcome_status=OutcomeStatus.VISITOR_CANCELLED,
            )
        )

        visit = await services.visits.get_visit_by_reference(reference)
        assert visit.visit_sub_status == VisitSubStatus.CANCELLED
        assert visit.outcome_status == OutcomeStatus.VISITOR_CANCELLED

    async def test_legacy_timestamps_are_kept(self, services, prison, today):
        created = datetime(2023, 1, 10, 9, 30)
        modified = datetime(2023, 2, 1, 16, 0)

        reference = await services.migration.migrate_visit(
            _request(today - timedelta(days=3), create_date_time=created, modify_date_time=modified)
        )

        visit = await services.visits.get_visit_by_reference(reference)
        assert visit.created_timestamp == created
        assert visit.modified_timestamp == modified

    async def test_too_far_in_future(self, services, template, today):
        with pytest.raises(MigrateVisitInFutureError):
            await services.migration.migrate_visit(_request(add_months(today, 6) + timedelta(days=1)))

    async def test_no_matching_template(self, services, prison, session_date):
        with pytest.raises(MatchSessionTemplateToMigratedVisitError):
            await services.migration.migrate_visit(_request(session_date))

    async def test_unknown_prison(self, services, today):
        with pytest.raises(PrisonNotFoundError):
            await services.migration.migrate_visit(_request(today - timedelta(days=3), prison_id="XYZ"))


class TestCancelMigratedVisit:
    async def test_cancels_visit(self, services, template, session_date, sns_client):
        reference = await services.migration.migrate_visit(_request(session_date))

        visit = await services.migration.cancel_migrated_visit(
            reference,
            MigratedCancelVisit(cancel_outcome=Outcome(outcome_status=OutcomeStatus.VISITOR_CANCELLED, text="Ill")),
        )

        assert visit.visit_status == VisitStatus.CANCELLED
        assert visit.visit_sub_status == VisitSubStatus.CANCELLED
        assert visit.outcome_status == OutcomeStatus.VISITOR_CANCELLED
        history = await services.visits.get_visit_history(reference)
        assert [e.type for e in history] == [EventAuditType.MIGRATED_VISIT, EventAuditType.MIGRATED_CANCELLED_VISIT]
        assert history[-1].actioned_by == NOT_KNOWN_NOMIS
        assert sns_client.publish.call_count == 1

    async def test_cancel_is_idempotent(self, services, template, session_date, sns_client):
        reference = await services.migration.migrate_visit(_request(session_date))
        cancel = MigratedCancelVisit(
            cancel_outcome=Outcome(outcome_status=OutcomeStatus.ADMINISTRATIVE_CANCELLATION), actioned_by="user1"
        )
        await services.migration.cancel_migrated_visit(reference, cancel)

        visit = await services.migration.cancel_migrated_visit(reference, cancel)

        assert visit.visit_status == VisitStatus.CANCELLED
        assert sns_client.publish.call_count == 1
