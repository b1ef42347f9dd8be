"""Domain enums and models for visit scheduling."""

from .enums import (
    ApplicationMethodType,
    ApplicationStatus,
    DayOfWeek,
    EventAuditType,
    NotificationEventType,
    OutcomeStatus,
    PrisonerHousingLevels,
    SessionConflict,
    UnFlagEventReason,
    UserType,
    VisitNoteType,
    VisitRequestAutoRejectionReason,
    VisitRestriction,
    VisitStatus,
    VisitSubStatus,
    VisitType,
)
from .models import (
    Application,
    Contact,
    EventAudit,
    PermittedSessionLocation,
    Prisoner,
    PrisonerHousingLevelMap,
    SessionCapacity,
    SessionCategoryGroup,
    SessionIncentiveLevelGroup,
    SessionLocationGroup,
    SessionTemplate,
    SessionTimeSlot,
    Visit,
    VisitNote,
    Visitor,
    VisitorSupport,
    VisitRequestsCount,
    VisitRequestSummary,
    VisitSession,
)

__all__ = [
    "Application",
    "ApplicationMethodType",
    "ApplicationStatus",
    "Contact",
    "DayOfWeek",
    "EventAudit",
    "EventAuditType",
    "NotificationEventType",
    "OutcomeStatus",
    "PermittedSessionLocation",
    "Prisoner",
    "PrisonerHousingLevelMap",
    "PrisonerHousingLevels",
    "SessionCapacity",
    "SessionCategoryGroup",
    "SessionConflict",
    "SessionIncentiveLevelGroup",
    "SessionLocationGroup",
    "SessionTemplate",
    "SessionTimeSlot",
    "UnFlagEventReason",
    "UserType",
    "Visit",
    "VisitNote",
    "VisitNoteType",
    "VisitRequestAutoRejectionReason",
    "VisitRequestSummary",
    "VisitRequestsCount",
    "VisitRestriction",
    "VisitSession",
    "VisitStatus",
    "VisitSubStatus",
    "VisitType",
    "Visitor",
    "VisitorSupport",
]
