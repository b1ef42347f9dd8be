"""
Repository layer for the visit scheduler.

Each repository wraps one table and adds the domain queries the services need
on top of the shared CRUD operations.
"""

from .applications import ApplicationRepository
from .base import AsyncBaseRepository, QueryBuilder, SqlRepository
from .event_audit import EventAuditRepository
from .notification_events import VisitNotificationEventRepository
from .prisons import PrisonRepository
from .session_slots import SessionSlotRepository
from .session_templates import SessionTemplateRepository
from .visits import VisitRepository

__all__ = [
    "ApplicationRepository",
    "AsyncBaseRepository",
    "EventAuditRepository",
    "PrisonRepository",
    "QueryBuilder",
    "SessionSlotRepository",
    "SessionTemplateRepository",
    "SqlRepository",
    "VisitNotificationEventRepository",
    "VisitRepository",
]
