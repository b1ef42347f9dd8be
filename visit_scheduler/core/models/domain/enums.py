"""Domain enums for visit scheduling."""

from __future__ import annotations

from datetime import date
from enum import Enum


class VisitStatus(str, Enum):
    """
    Lifecycle status of a visit.

    ``RESERVED`` and ``CHANGING`` describe an in-progress application:
    ``RESERVED`` holds a slot, ``CHANGING`` amends an existing booking without
    taking a new slot. ``BOOKED`` and ``CANCELLED`` describe a visit.
    """

    RESERVED = "RESERVED"
    CHANGING = "CHANGING"
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"


class VisitSubStatus(str, Enum):
    """Finer grained state of a booked or cancelled visit."""

    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
    AUTO_APPROVED = "AUTO_APPROVED"
    AUTO_REJECTED = "AUTO_REJECTED"
    CANCELLED = "CANCELLED"


class ApplicationStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    ACCEPTED = "ACCEPTED"


class VisitRestriction(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    UNKNOWN = "UNKNOWN"


class VisitType(str, Enum):
    SOCIAL = "SOCIAL"


class UserType(str, Enum):
    """Who is acting on a visit: prison staff, a member of the public or the system."""

    STAFF = "STAFF"
    PUBLIC = "PUBLIC"
    SYSTEM = "SYSTEM"


class ApplicationMethodType(str, Enum):
    PHONE = "PHONE"
    WEBSITE = "WEBSITE"
    EMAIL = "EMAIL"
    IN_PERSON = "IN_PERSON"
    NOT_KNOWN = "NOT_KNOWN"
    NOT_APPLICABLE = "NOT_APPLICABLE"
    BY_PRISONER = "BY_PRISONER"


class OutcomeStatus(str, Enum):
    """Visit outcome codes, shared with the legacy NOMIS system."""

    ADMINISTRATIVE_CANCELLATION = "ADMINISTRATIVE_CANCELLATION"
    ADMINISTRATIVE_ERROR = "ADMINISTRATIVE_ERROR"
    BATCH_CANCELLATION = "BATCH_CANCELLATION"
    BOOKER_CANCELLED = "BOOKER_CANCELLED"
    CANCELLATION = "CANCELLATION"
    COMPLETED_NORMALLY = "COMPLETED_NORMALLY"
    DETAILS_CHANGED_AFTER_BOOKING = "DETAILS_CHANGED_AFTER_BOOKING"
    ESTABLISHMENT_CANCELLED = "ESTABLISHMENT_CANCELLED"
    NOT_RECORDED = "NOT_RECORDED"
    NO_VISITING_ORDER = "NO_VISITING_ORDER"
    PRISONER_CANCELLED = "PRISONER_CANCELLED"
    PRISONER_COMPLETED_EARLY = "PRISONER_COMPLETED_EARLY"
    PRISONER_REFUSED_TO_ATTEND = "PRISONER_REFUSED_TO_ATTEND"
    SUPERSEDED_CANCELLATION = "SUPERSEDED_CANCELLATION"
    TERMINATED_BY_STAFF = "TERMINATED_BY_STAFF"
    VISITOR_CANCELLED = "VISITOR_CANCELLED"
    VISITOR_COMPLETED_EARLY = "VISITOR_COMPLETED_EARLY"
    VISITOR_DECLINED_ENTRY = "VISITOR_DECLINED_ENTRY"
    VISITOR_DID_NOT_ARRIVE = "VISITOR_DID_NOT_ARRIVE"
    VISITOR_FAILED_SECURITY_CHECKS = "VISITOR_FAILED_SECURITY_CHECKS"
    VISIT_ORDER_CANCELLED = "VISIT_ORDER_CANCELLED"
    VISIT_REQUEST_REJECTED = "VISIT_REQUEST_REJECTED"
    VISIT_REQUEST_AUTO_REJECTED = "VISIT_REQUEST_AUTO_REJECTED"


class VisitNoteType(str, Enum):
    VISITOR_CONCERN = "VISITOR_CONCERN"
    VISIT_OUTCOMES = "VISIT_OUTCOMES"
    VISIT_COMMENT = "VISIT_COMMENT"
    STATUS_CHANGES_REASON = "STATUS_CHANGES_REASON"


class EventAuditType(str, Enum):
    """Audit trail entries written for every visit state transition."""

    RESERVED_VISIT = "RESERVED_VISIT"
    CHANGING_VISIT = "CHANGING_VISIT"
    MIGRATED_VISIT = "MIGRATED_VISIT"
    BOOKED_VISIT = "BOOKED_VISIT"
    UPDATED_VISIT = "UPDATED_VISIT"
    CANCELLED_VISIT = "CANCELLED_VISIT"
    MIGRATED_CANCELLED_VISIT = "MIGRATED_CANCELLED_VISIT"
    REQUESTED_VISIT = "REQUESTED_VISIT"
    REQUESTED_VISIT_APPROVED = "REQUESTED_VISIT_APPROVED"
    REQUESTED_VISIT_REJECTED = "REQUESTED_VISIT_REJECTED"
    REQUESTED_VISIT_AUTO_REJECTED = "REQUESTED_VISIT_AUTO_REJECTED"


class SessionConflict(str, Enum):
    NON_ASSOCIATION = "NON_ASSOCIATION"
    DOUBLE_BOOKING_OR_RESERVATION = "DOUBLE_BOOKING_OR_RESERVATION"


class PrisonerHousingLevels(str, Enum):
    """Housing location levels, from wing (level one) down to cell (level four)."""

    LEVEL_ONE = "LEVEL_ONE"
    LEVEL_TWO = "LEVEL_TWO"
    LEVEL_THREE = "LEVEL_THREE"
    LEVEL_FOUR = "LEVEL_FOUR"

    @property
    def level(self) -> int:
        return _HOUSING_LEVEL_NUMBERS[self]


_HOUSING_LEVEL_NUMBERS = {
    PrisonerHousingLevels.LEVEL_ONE: 1,
    PrisonerHousingLevels.LEVEL_TWO: 2,
    PrisonerHousingLevels.LEVEL_THREE: 3,
    PrisonerHousingLevels.LEVEL_FOUR: 4,
}


class UnFlagEventReason(str, Enum):
    """Why a visit's notification events were removed."""

    VISIT_CANCELLED = "visit-cancelled"
    VISIT_CANCELLED_ON_NOMIS = "visit-cancelled-on-nomis"
    REQUESTED_VISIT_WITHDRAWN = "requested-visit-withdrawn"
    VISIT_UPDATED = "visit-updated"
    VISIT_REQUEST_APPROVED = "visit-request-approved"
    VISIT_REQUEST_REJECTED = "visit-request-rejected"
    VISIT_REQUEST_AUTO_REJECTED = "visit-request-auto-rejected"


class NotificationEventType(str, Enum):
    NON_ASSOCIATION_EVENT = "NON_ASSOCIATION_EVENT"
    PRISONER_RELEASED_EVENT = "PRISONER_RELEASED_EVENT"
    PRISONER_RESTRICTION_CHANGE_EVENT = "PRISONER_RESTRICTION_CHANGE_EVENT"
    PRISON_VISITS_BLOCKED_FOR_DATE = "PRISON_VISITS_BLOCKED_FOR_DATE"
    SESSION_VISITS_BLOCKED_FOR_DATE = "SESSION_VISITS_BLOCKED_FOR_DATE"
    PRISONER_RECEIVED_EVENT = "PRISONER_RECEIVED_EVENT"
    VISITOR_RESTRICTION_UPSERTED_EVENT = "VISITOR_RESTRICTION_UPSERTED_EVENT"


class VisitRequestAutoRejectionReason(str, Enum):
    MINIMUM_BOOKING_WINDOW_REACHED = "MINIMUM_BOOKING_WINDOW_REACHED"
    PRISONER_RELEASED = "PRISONER_RELEASED"
    PRISONER_TRANSFERRED = "PRISONER_TRANSFERRED"


class DayOfWeek(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def weekday(self) -> int:
        """Index matching ``date.weekday()`` (Monday is 0)."""
        return list(DayOfWeek).index(self)

    @classmethod
    def of(cls, value: date) -> DayOfWeek:
        return list(cls)[value.weekday()]
