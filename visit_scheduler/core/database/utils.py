"""
Database utility functions for engine and session management.

This module provides the core utility functions for creating database engines,
session factories, and repository bundles.

Functions:
- create_engine: Creates async SQLAlchemy engine with URL normalization
- create_sessionmaker: Creates async session factory with safe defaults
- create_all: Creates all tables from ORM metadata (for tests/dev)
- build_sql_repos: Builds complete repository bundle for dependency injection
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from .base import Base
from .repositories import (
    ApplicationRepository,
    EventAuditRepository,
    PrisonRepository,
    SessionSlotRepository,
    SessionTemplateRepository,
    VisitNotificationEventRepository,
    VisitRepository,
)


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    The helper normalizes Postgres URLs to ensure the async driver is used.
    For example, it rewrites ``postgresql://`` and other variants to
    ``postgresql+asyncpg://``.

    Args:
        db_url: Database connection URL

    Returns:
        Configured AsyncEngine instance
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project.

    Args:
        engine: Async SQLAlchemy engine

    Returns:
        Configured async session factory
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata.

    This is intended for tests and local development.

    Args:
        engine: Async SQLAlchemy engine
    """
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of all SQL repositories sharing one session."""

    prisons: PrisonRepository
    session_templates: SessionTemplateRepository
    session_slots: SessionSlotRepository
    applications: ApplicationRepository
    visits: VisitRepository
    event_audits: EventAuditRepository
    notification_events: VisitNotificationEventRepository


def build_sql_repos(session: AsyncSession) -> SqlRepoBundle:
    """Build a ``SqlRepoBundle`` bound to a single session.

    Args:
        session: Async session shared by every repository in the bundle

    Returns:
        Bundle containing all repository instances
    """
    return SqlRepoBundle(
        prisons=PrisonRepository(session),
        session_templates=SessionTemplateRepository(session),
        session_slots=SessionSlotRepository(session),
        applications=ApplicationRepository(session),
        visits=VisitRepository(session),
        event_audits=EventAuditRepository(session),
        notification_events=VisitNotificationEventRepository(session),
    )
