"""
Visit scheduling services.

Services are built per database session. ``build_services`` wires the full
graph from a session, the downstream API clients and the settings, the same
way for the API and for tests.

Modules:
- sessions: bookable session listing and capacity
- applications / application_validation: slot reservation and booking checks
- visits / visit_store: booking and cancellation
- migration: legacy visit import
- visit_requests: staff decisions on requested visits
- event_audit / notification_events / domain_events: history, flags and SNS events
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from visit_scheduler.clients import NonAssociationsApiClient, PrisonApiClient, PrisonerSearchClient
from visit_scheduler.core.database import build_sql_repos
from visit_scheduler.core.database.base import now
from visit_scheduler.scheduling import MigrationSessionTemplateMatcher, SessionDatesUtil
from visit_scheduler.server.core.config import Settings, settings as default_settings

from .application_validation import ApplicationValidationService
from .applications import ApplicationService
from .domain_events import DomainEventPublisher
from .event_audit import EventAuditService
from .migration import MigrateVisitService
from .notification_events import VisitNotificationEventService
from .prisoners import PrisonerService
from .prisons import PrisonsService
from .session_slots import SessionSlotService
from .session_templates import SessionTemplateService
from .sessions import SessionService
from .slot_capacity import SlotCapacityService
from .visit_requests import VisitRequestsService
from .visit_store import VisitStoreService
from .visits import VisitService


@dataclass(frozen=True)
class ApiClients:
    prisoner_search: PrisonerSearchClient
    prison_api: PrisonApiClient
    non_associations: NonAssociationsApiClient

    async def aclose(self) -> None:
        await self.prisoner_search.aclose()
        await self.prison_api.aclose()
        await self.non_associations.aclose()


def build_api_clients(config: Optional[Settings] = None) -> ApiClients:
    api = (config or default_settings).api_clients
    options = {"auth_token": api.auth_token, "timeout": api.timeout_seconds}
    return ApiClients(
        prisoner_search=PrisonerSearchClient(api.prisoner_search_url, **options),
        prison_api=PrisonApiClient(api.prison_api_url, **options),
        non_associations=NonAssociationsApiClient(api.non_associations_api_url, **options),
    )


@dataclass(frozen=True)
class Services:
    sessions: SessionService
    applications: ApplicationService
    visits: VisitService
    migration: MigrateVisitService
    visit_requests: VisitRequestsService
    audit: EventAuditService
    notifications: VisitNotificationEventService
    prisoners: PrisonerService


def build_services(
    session: AsyncSession,
    clients: ApiClients,
    *,
    config: Optional[Settings] = None,
    sns_client: Any = None,
    clock: Callable[[], datetime] = now,
) -> Services:
    """Wire every service onto one database session.

    Args:
        session: Session shared by all repositories of the request
        clients: Downstream API clients
        config: Settings, the module level ``settings`` when None
        sns_client: boto3 SNS client, created lazily from the settings when None
        clock: Source of the current time

    Returns:
        The service container
    """
    config = config or default_settings
    policy = config.visit_policy
    repos = build_sql_repos(session)

    prisons = PrisonsService(repos)
    templates = SessionTemplateService(repos, prisons)
    slots = SessionSlotService(repos)
    prisoners = PrisonerService(clients.prisoner_search, clients.prison_api, clients.non_associations)
    capacity = SlotCapacityService(repos, expired_application_minutes=policy.expired_application_minutes, clock=clock)
    audit = EventAuditService(repos)
    notifications = VisitNotificationEventService(repos)
    events = DomainEventPublisher(config.domain_events, client=sns_client)
    store = VisitStoreService(repos, prisons=prisons, slots=slots)
    dates_util = SessionDatesUtil()

    applications = ApplicationService(
        repos,
        prisons=prisons,
        templates=templates,
        slots=slots,
        capacity=capacity,
        audit=audit,
        expired_application_minutes=policy.expired_application_minutes,
        clock=clock,
    )
    validation = ApplicationValidationService(
        repos,
        prisoners=prisoners,
        prisons=prisons,
        templates=templates,
        slots=slots,
        capacity=capacity,
        is_expired=applications.is_expired_application,
    )
    visits = VisitService(
        repos,
        store=store,
        applications=applications,
        validation=validation,
        slots=slots,
        audit=audit,
        notifications=notifications,
        events=events,
        request_booking_enabled=policy.request_booking_enabled,
        cancellation_day_limit=policy.cancellation_day_limit,
        clock=clock,
    )
    matcher = MigrationSessionTemplateMatcher(
        prisoners,
        templates,
        dates_util=dates_util,
        max_proximity_minutes=config.migration.max_proximity_minutes,
    )
    migration = MigrateVisitService(
        repos,
        matcher=matcher,
        prisons=prisons,
        slots=slots,
        store=store,
        audit=audit,
        notifications=notifications,
        events=events,
        config=config.migration,
        clock=clock,
    )
    visit_requests = VisitRequestsService(
        repos,
        store=store,
        prisons=prisons,
        prisoners=prisoners,
        audit=audit,
        notifications=notifications,
        events=events,
        clock=clock,
    )
    return Services(
        sessions=SessionService(
            repos,
            prisons=prisons,
            templates=templates,
            prisoners=prisoners,
            capacity=capacity,
            dates_util=dates_util,
            clock=clock,
        ),
        applications=applications,
        visits=visits,
        migration=migration,
        visit_requests=visit_requests,
        audit=audit,
        notifications=notifications,
        prisoners=prisoners,
    )


__all__ = [
    "ApiClients",
    "ApplicationService",
    "ApplicationValidationService",
    "DomainEventPublisher",
    "EventAuditService",
    "MigrateVisitService",
    "PrisonerService",
    "PrisonsService",
    "Services",
    "SessionService",
    "SessionSlotService",
    "SessionTemplateService",
    "SlotCapacityService",
    "VisitNotificationEventService",
    "VisitRequestsService",
    "VisitService",
    "VisitStoreService",
    "build_api_clients",
    "build_services",
]
