"""Shared fixtures for the visit scheduler unit tests.

Database tests run against in-memory SQLite (one connection shared through
``StaticPool``). Downstream prison APIs are replaced by ``AsyncMock`` clients
whose answers each test can change.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import AsyncGenerator, Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.pool import StaticPool

from visit_scheduler.clients import NonAssociationsApiClient, PrisonApiClient, PrisonerSearchClient
from visit_scheduler.clients.dto import (
    CurrentIncentiveDTO,
    IncentiveLevelDTO,
    NonAssociationDetailsDTO,
    PrisonerHousingLevelDTO,
    PrisonerHousingLocationsDTO,
    PrisonerSearchResultDTO,
    VisitBalancesDTO,
)
from visit_scheduler.core.database import SqlRepoBundle, build_sql_repos, create_all, create_sessionmaker
from visit_scheduler.core.database.entities import PrisonRow, SessionTemplateRow
from visit_scheduler.core.models.domain import DayOfWeek
from visit_scheduler.server.core.config import DomainEventsConfig, Settings
from visit_scheduler.services import ApiClients, Services, build_services

NOW = datetime.now().replace(second=0, microsecond=0)
TODAY = NOW.date()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create in-memory SQLite engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(in_memory_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest.fixture
def repos(db_session: AsyncSession) -> SqlRepoBundle:
    return build_sql_repos(db_session)


@pytest.fixture
def make_prison(repos: SqlRepoBundle):
    async def _make(code: str = "HEI", **kwargs) -> PrisonRow:
        return await repos.prisons.create(PrisonRow(code=code, **kwargs))

    return _make


@pytest.fixture
def make_template(repos: SqlRepoBundle):
    """Build a weekly template running on ``session_date``'s weekday from a week before today."""

    async def _make(
        prison: PrisonRow,
        session_date: Optional[date] = None,
        *,
        start_time: time = time(13, 0),
        end_time: time = time(15, 0),
        **kwargs,
    ) -> SessionTemplateRow:
        session_date = session_date or TODAY + timedelta(days=7)
        values = dict(
            prison_id=prison.id,
            name="Afternoon",
            visit_room="Visits Main Hall",
            day_of_week=DayOfWeek.of(session_date),
            start_time=start_time,
            end_time=end_time,
            valid_from_date=TODAY - timedelta(days=7),
            open_capacity=2,
            closed_capacity=1,
        )
        values.update(kwargs)
        return await repos.session_templates.create(SessionTemplateRow(**values))

    return _make


def prisoner_result(
    prisoner_id: str = "A1234AA",
    prison_code: str = "HEI",
    category: Optional[str] = "C",
    incentive: Optional[str] = "STD",
) -> PrisonerSearchResultDTO:
    return PrisonerSearchResultDTO(
        prisoner_number=prisoner_id,
        prison_id=prison_code,
        category=category,
        first_name="JOHN",
        last_name="SMITH",
        current_incentive=CurrentIncentiveDTO(level=IncentiveLevelDTO(code=incentive)) if incentive else None,
    )


@pytest.fixture
def api_clients() -> ApiClients:
    """Downstream clients answering for prisoner ``A1234AA`` at ``HEI`` on wing C."""
    prisoner_search = AsyncMock(spec=PrisonerSearchClient)
    prisoner_search.get_prisoner.return_value = prisoner_result()

    prison_api = AsyncMock(spec=PrisonApiClient)
    prison_api.get_prisoner_housing_location.return_value = PrisonerHousingLocationsDTO(
        levels=[PrisonerHousingLevelDTO(level=1, code="C"), PrisonerHousingLevelDTO(level=2, code="1")]
    )
    prison_api.get_prisoner_details.return_value = None
    prison_api.get_visit_balances.return_value = VisitBalancesDTO(remaining_vo=2, remaining_pvo=1)

    non_associations = AsyncMock(spec=NonAssociationsApiClient)
    non_associations.get_non_associations.return_value = NonAssociationDetailsDTO(non_associations=[])

    return ApiClients(prisoner_search=prisoner_search, prison_api=prison_api, non_associations=non_associations)


@pytest.fixture
def sns_client() -> MagicMock:
    client = MagicMock()
    client.publish.return_value = {"MessageId": "message-1"}
    return client


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        DOMAIN_EVENTS_ENABLED=True,
        DOMAIN_EVENTS_TOPIC_ARN="arn:aws:sns:eu-west-2:000000000000:domain-events",
        FEATURE_REQUEST_BOOKING_ENABLED=True,
    )


@pytest.fixture
def services(db_session: AsyncSession, api_clients: ApiClients, test_settings: Settings, sns_client, clock) -> Services:
    return build_services(db_session, api_clients, config=test_settings, sns_client=sns_client, clock=clock)


@pytest.fixture
def domain_events_config() -> DomainEventsConfig:
    return DomainEventsConfig(enabled=True, topic_arn="arn:aws:sns:eu-west-2:000000000000:domain-events")
