"""Domain models for visit scheduling.

These are the shapes the scheduling logic and services work with. Database
entities are converted into them at the repository/service boundary so that
the matchers and validators stay free of persistence concerns.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Dict, List, Optional

from pydantic import Field

from ..base import BaseSchema
from .enums import (
    DayOfWeek,
    EventAuditType,
    ApplicationMethodType,
    OutcomeStatus,
    PrisonerHousingLevels,
    SessionConflict,
    UserType,
    VisitNoteType,
    VisitRestriction,
    VisitStatus,
    VisitSubStatus,
    VisitType,
)

PrisonerHousingLevelMap = Dict[PrisonerHousingLevels, Optional[str]]


class PermittedSessionLocation(BaseSchema):
    """
    A housing location allowed (or excluded) for a session.

    Unset lower levels widen the location, e.g. only ``level_one_code="A"``
    covers the whole of wing A.
    """

    level_one_code: str
    level_two_code: Optional[str] = None
    level_three_code: Optional[str] = None
    level_four_code: Optional[str] = None

    def code_for(self, level: PrisonerHousingLevels) -> Optional[str]:
        return {
            PrisonerHousingLevels.LEVEL_ONE: self.level_one_code,
            PrisonerHousingLevels.LEVEL_TWO: self.level_two_code,
            PrisonerHousingLevels.LEVEL_THREE: self.level_three_code,
            PrisonerHousingLevels.LEVEL_FOUR: self.level_four_code,
        }[level]

    @property
    def specificity(self) -> int:
        """Number of housing levels this location pins down."""
        return sum(1 for level in PrisonerHousingLevels if self.code_for(level) is not None)


class SessionLocationGroup(BaseSchema):
    name: str
    locations: List[PermittedSessionLocation] = Field(default_factory=list)


class SessionCategoryGroup(BaseSchema):
    name: str
    categories: List[str] = Field(default_factory=list)


class SessionIncentiveLevelGroup(BaseSchema):
    name: str
    incentive_levels: List[str] = Field(default_factory=list)


class SessionTemplate(BaseSchema):
    """A recurring visit session: day, times, capacity and eligibility rules."""

    reference: str
    prison_code: str
    name: str = ""
    visit_room: str
    visit_type: VisitType = VisitType.SOCIAL
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    valid_from_date: date
    valid_to_date: Optional[date] = None
    open_capacity: int = 0
    closed_capacity: int = 0
    weekly_frequency: int = 1
    active: bool = True
    include_location_group_type: bool = True
    include_category_group_type: bool = True
    include_incentive_group_type: bool = True
    location_groups: List[SessionLocationGroup] = Field(default_factory=list)
    category_groups: List[SessionCategoryGroup] = Field(default_factory=list)
    incentive_groups: List[SessionIncentiveLevelGroup] = Field(default_factory=list)
    exclude_dates: List[date] = Field(default_factory=list)

    @property
    def is_for_all_categories(self) -> bool:
        return not self.category_groups

    @property
    def is_for_all_incentive_levels(self) -> bool:
        return not self.incentive_groups

    def capacity_for(self, restriction: VisitRestriction) -> int:
        if restriction == VisitRestriction.OPEN:
            return self.open_capacity
        if restriction == VisitRestriction.CLOSED:
            return self.closed_capacity
        return self.open_capacity + self.closed_capacity


class Prisoner(BaseSchema):
    """Prisoner details needed to decide eligibility for a session."""

    prisoner_id: str
    prison_code: Optional[str] = None
    category: Optional[str] = None
    incentive_level: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def enhanced(self) -> bool:
        return self.incentive_level == "ENH"


class SessionTimeSlot(BaseSchema):
    start_time: time
    end_time: time


class SessionCapacity(BaseSchema):
    open: int
    closed: int


class VisitSession(BaseSchema):
    """A bookable occurrence of a session template on a given date."""

    session_template_reference: str
    visit_room: str
    visit_type: VisitType
    prison_code: str
    open_visit_capacity: int
    open_visit_booked_count: int = 0
    closed_visit_capacity: int
    closed_visit_booked_count: int = 0
    start_timestamp: datetime
    end_timestamp: datetime
    sessions_conflicts: List[SessionConflict] = Field(default_factory=list)

    def capacity_for(self, restriction: VisitRestriction) -> int:
        return self.closed_visit_capacity if restriction == VisitRestriction.CLOSED else self.open_visit_capacity

    def booked_count_for(self, restriction: VisitRestriction) -> int:
        if restriction == VisitRestriction.CLOSED:
            return self.closed_visit_booked_count
        return self.open_visit_booked_count


class Contact(BaseSchema):
    name: str
    telephone: Optional[str] = None
    email: Optional[str] = None


class Visitor(BaseSchema):
    nomis_person_id: int
    visit_contact: Optional[bool] = None


class VisitorSupport(BaseSchema):
    description: str


class VisitNote(BaseSchema):
    type: VisitNoteType
    text: str


class Application(BaseSchema):
    reference: str
    prison_code: str
    prisoner_id: str
    session_template_reference: Optional[str] = None
    visit_type: VisitType
    visit_restriction: VisitRestriction
    start_timestamp: datetime
    end_timestamp: datetime
    reserved_slot: bool
    reservation_status: VisitStatus
    application_status: str
    completed: bool
    user_type: UserType
    created_by: str
    visit_contact: Optional[Contact] = None
    visitors: List[Visitor] = Field(default_factory=list)
    visitor_support: Optional[VisitorSupport] = None
    created_timestamp: datetime
    modified_timestamp: datetime


class Visit(BaseSchema):
    reference: str
    application_reference: Optional[str] = None
    prisoner_id: str
    prison_code: str
    session_template_reference: Optional[str] = None
    visit_room: str
    visit_type: VisitType
    visit_status: VisitStatus
    visit_sub_status: VisitSubStatus
    outcome_status: Optional[OutcomeStatus] = None
    visit_restriction: VisitRestriction
    start_timestamp: datetime
    end_timestamp: datetime
    visit_notes: List[VisitNote] = Field(default_factory=list)
    visit_contact: Optional[Contact] = None
    visitors: List[Visitor] = Field(default_factory=list)
    visitor_support: Optional[VisitorSupport] = None
    user_type: UserType
    created_timestamp: datetime
    modified_timestamp: datetime


class EventAudit(BaseSchema):
    type: EventAuditType
    application_method_type: ApplicationMethodType
    actioned_by: Optional[str] = None
    user_type: Optional[UserType] = None
    booking_reference: Optional[str] = None
    application_reference: Optional[str] = None
    session_template_reference: Optional[str] = None
    text: Optional[str] = None
    create_timestamp: datetime


class VisitRequestSummary(BaseSchema):
    visit_reference: str
    visit_date: date
    requested_on_date: Optional[date] = None
    prisoner_name: str
    prisoner_number: str
    main_contact: Optional[str] = None


class VisitRequestsCount(BaseSchema):
    count: int
