"""
Database entity models.

Each module represents a single database table:

- prisons: prisons and their booking policy
- session_templates: recurring visit sessions and eligibility groups
- session_slots: dated occurrences of sessions
- applications: in-progress bookings holding a slot
- visits: booked and cancelled visits
- event_audit: visit history
- notification_events: visits flagged for review
"""

from .applications import ApplicationRow
from .event_audit import EventAuditRow
from .notification_events import VisitNotificationEventRow
from .prisons import PrisonRow
from .session_slots import SessionSlotRow
from .session_templates import SessionTemplateRow
from .visits import VisitRow

__all__ = [
    "ApplicationRow",
    "EventAuditRow",
    "PrisonRow",
    "SessionSlotRow",
    "SessionTemplateRow",
    "VisitNotificationEventRow",
    "VisitRow",
]
