"""Fixtures building applications and booked visits through the services."""

from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional

import pytest

from visit_scheduler.core.database.entities import PrisonRow, SessionTemplateRow
from visit_scheduler.core.models.domain import Contact, UserType, Visit, Visitor, VisitRestriction
from visit_scheduler.core.models.io import BookingRequest, CreateApplication


@pytest.fixture
async def prison(make_prison) -> PrisonRow:
    return await make_prison("HEI")


@pytest.fixture
async def template(make_template, prison) -> SessionTemplateRow:
    return await make_template(prison)


@pytest.fixture
def session_date(today) -> date:
    return today + timedelta(days=7)


@pytest.fixture
def application_request():
    def _build(
        template: SessionTemplateRow,
        session_date: date,
        prisoner_id: str = "A1234AA",
        restriction: VisitRestriction = VisitRestriction.OPEN,
        user_type: UserType = UserType.STAFF,
        visitors: Optional[List[Visitor]] = None,
        **kwargs,
    ) -> CreateApplication:
        return CreateApplication(
            prisoner_id=prisoner_id,
            session_template_reference=template.reference,
            session_date=session_date,
            application_restriction=restriction,
            visit_contact=Contact(name="Jane Smith", telephone="01234567890"),
            visitors=visitors or [Visitor(nomis_person_id=4729510, visit_contact=True)],
            actioned_by="user1",
            user_type=user_type,
            **kwargs,
        )

    return _build


@pytest.fixture
def book_visit(services, application_request):
    """Reserve and book a visit in one go."""

    async def _book(
        template: SessionTemplateRow,
        session_date: date,
        prisoner_id: str = "A1234AA",
        restriction: VisitRestriction = VisitRestriction.OPEN,
        user_type: UserType = UserType.STAFF,
        is_request_booking: bool = False,
    ) -> Visit:
        application = await services.applications.create_initial_application(
            application_request(template, session_date, prisoner_id, restriction, user_type)
        )
        return await services.visits.book_visit(
            application.reference,
            BookingRequest(actioned_by="user1", user_type=user_type, is_request_booking=is_request_booking),
        )

    return _book
