"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- applications: slot reservation and application change requests
- visits: booking and cancellation requests
- migration: legacy visit migration requests
- visit_requests: visit request approval/rejection
"""

from .applications import ChangeApplication, CreateApplication
from .migration import MigratedCancelVisit, MigratedContact, MigratedLegacyData, MigrateVisitRequest
from .visit_requests import VisitRequestDecision
from .visits import BookingRequest, CancelVisit, Outcome

__all__ = [
    "BookingRequest",
    "CancelVisit",
    "ChangeApplication",
    "CreateApplication",
    "MigrateVisitRequest",
    "MigratedCancelVisit",
    "MigratedContact",
    "MigratedLegacyData",
    "Outcome",
    "VisitRequestDecision",
]
