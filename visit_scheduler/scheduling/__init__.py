"""
Session scheduling logic.

Pure functions and small classes deciding when a session template runs and
whether a prisoner may attend it:

- dates: weekly frequency and bookable date expansion
- matchers: housing level, category and incentive level matching
- validators: combined eligibility of a session for a prisoner
- template_matcher: best-fit template selection for migrated visits
- wing_parser: wing lookup from a prisoner's internal location
"""

from .dates import SessionDatesUtil
from .matchers import (
    LOCATION_NOT_PERMITTED,
    get_location_score,
    has_level_match,
    is_category_allowed,
    is_incentive_level_allowed,
)
from .template_matcher import FROM_DATE_IN_FUTURE, MigrateMatch, MigrationSessionTemplateMatcher
from .validators import is_session_available_to_prisoner
from .wing_parser import get_prisoner_wing_from_location

__all__ = [
    "FROM_DATE_IN_FUTURE",
    "LOCATION_NOT_PERMITTED",
    "MigrateMatch",
    "MigrationSessionTemplateMatcher",
    "SessionDatesUtil",
    "get_location_score",
    "get_prisoner_wing_from_location",
    "has_level_match",
    "is_category_allowed",
    "is_incentive_level_allowed",
    "is_session_available_to_prisoner",
]
