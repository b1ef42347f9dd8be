"""Concurrent bookings of one application against a file-backed SQLite database."""

from __future__ import annotations

import asyncio
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from visit_scheduler.core.database import create_all, create_sessionmaker
from visit_scheduler.core.exceptions import VisitValidationError
from visit_scheduler.core.models.domain import ApplicationStatus, VisitStatus
from visit_scheduler.core.models.io import BookingRequest
from visit_scheduler.services import build_services


@pytest.fixture
async def in_memory_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Replaces the shared in-memory engine so every session has its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'visits.db'}")
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def other_services(in_memory_engine, api_clients, test_settings, sns_client, clock):
    async with create_sessionmaker(in_memory_engine)() as session:
        yield build_services(session, api_clients, config=test_settings, sns_client=sns_client, clock=clock)


async def test_concurrent_bookings_write_one_visit(
    services, other_services, repos, template, session_date, application_request, sns_client
):
    application = await services.applications.create_initial_application(application_request(template, session_date))
    request = BookingRequest(actioned_by="user1")

    results = await asyncio.gather(
        services.visits.book_visit(application.reference, request),
        other_services.visits.book_visit(application.reference, request),
        return_exceptions=True,
    )

    booked = [r for r in results if not isinstance(r, BaseException)]
    errors = [r for r in results if isinstance(r, BaseException)]
    assert booked
    assert all(isinstance(e, VisitValidationError) and e.status_code == 409 for e in errors)
    assert len({v.reference for v in booked}) == 1

    visits = await repos.visits.list()
    assert len(visits) == 1
    assert visits[0].visit_status == VisitStatus.BOOKED
    assert sns_client.publish.call_count == 1


async def test_booking_after_concurrent_winner_returns_its_visit(
    services, other_services, template, session_date, application_request
):
    application = await services.applications.create_initial_application(application_request(template, session_date))
    request = BookingRequest(actioned_by="user1")

    first = await services.visits.book_visit(application.reference, request)
    second = await other_services.visits.book_visit(application.reference, request)

    assert second.reference == first.reference
    row = await other_services.applications.get_application_row(application.reference)
    assert row.application_status == ApplicationStatus.ACCEPTED
