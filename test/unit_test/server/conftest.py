"""Fixtures for exercising the FastAPI app in-process."""

from __future__ import annotations

from datetime import timedelta
from typing import AsyncGenerator

import httpx
import pytest

from visit_scheduler.server.main import app
from visit_scheduler.server.services import get_services


@pytest.fixture
async def client(services) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client whose requests are served by the test service graph."""
    app.dependency_overrides[get_services] = lambda: services
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def prison(make_prison):
    return await make_prison("HEI")


@pytest.fixture
async def template(make_template, prison):
    return await make_template(prison)


@pytest.fixture
def session_date(today):
    return today + timedelta(days=7)


@pytest.fixture
def reserve_body(template, session_date):
    return {
        "prisonerId": "A1234AA",
        "sessionTemplateReference": template.reference,
        "sessionDate": session_date.isoformat(),
        "applicationRestriction": "OPEN",
        "visitContact": {"name": "Jane Smith", "telephone": "01234567890"},
        "visitors": [{"nomisPersonId": 4729510, "visitContact": True}],
        "actionedBy": "user1",
    }
