"""
Migration I/O models.

Legacy (NOMIS) visits are pushed to the scheduler through these models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..base import BaseSchema
from ..domain.enums import OutcomeStatus, VisitRestriction, VisitStatus, VisitType
from ..domain.models import Visitor, VisitNote
from .visits import Outcome


class MigratedContact(BaseSchema):
    name: str
    telephone: Optional[str] = None


class MigratedLegacyData(BaseSchema):
    lead_visitor_id: Optional[int] = None


class MigrateVisitRequest(BaseSchema):
    """Schema for migrating a legacy visit."""

    prisoner_id: str
    prison_id: str = Field(description="Prison code")
    visit_room: str
    visit_type: VisitType = VisitType.SOCIAL
    start_timestamp: datetime
    end_timestamp: datetime
    visit_status: VisitStatus
    outcome_status: Optional[OutcomeStatus] = None
    visit_restriction: VisitRestriction
    visit_contact: Optional[MigratedContact] = None
    visitors: List[Visitor] = Field(default_factory=list)
    visit_notes: List[VisitNote] = Field(default_factory=list)
    legacy_data: Optional[MigratedLegacyData] = None
    actioned_by: Optional[str] = None
    create_date_time: Optional[datetime] = None
    modify_date_time: Optional[datetime] = None


class MigratedCancelVisit(BaseSchema):
    cancel_outcome: Outcome
    actioned_by: Optional[str] = None
