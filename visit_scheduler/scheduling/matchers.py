"""Prisoner eligibility matchers.

Each matcher compares one property of a prisoner (housing location, security
category, incentive level) against the groups configured on a session
template. A group list can either include or exclude the prisoners it lists.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Set

from visit_scheduler.core.models.domain import (
    PermittedSessionLocation,
    PrisonerHousingLevelMap,
    PrisonerHousingLevels,
    SessionTemplate,
)

logger = logging.getLogger(__name__)

LOCATION_NOT_PERMITTED = -1


def _level_matches(permitted_code: Optional[str], prisoner_code: Optional[str]) -> bool:
    # an unset level on the permitted location matches any prisoner level
    if permitted_code is None:
        return True
    return permitted_code == prisoner_code


def has_level_match(location: PermittedSessionLocation, levels: PrisonerHousingLevelMap) -> bool:
    """Check a permitted location against the prisoner's housing levels."""
    return all(_level_matches(location.code_for(level), levels.get(level)) for level in PrisonerHousingLevels)


def _permitted_locations(template: SessionTemplate) -> Iterable[PermittedSessionLocation]:
    for group in template.location_groups:
        yield from group.locations


def has_location_match(template: SessionTemplate, levels: PrisonerHousingLevelMap) -> bool:
    return any(has_level_match(location, levels) for location in _permitted_locations(template))


def get_location_score(levels: PrisonerHousingLevelMap, template: SessionTemplate) -> int:
    """Score how closely a template's locations fit a prisoner.

    Returns:
        0 for a template without location groups or an exclude template the
        prisoner is not excluded from, the number of levels pinned down by the
        most specific matching location for an include template, otherwise
        ``LOCATION_NOT_PERMITTED``
    """
    if not template.location_groups:
        return 0

    matching = [location for location in _permitted_locations(template) if has_level_match(location, levels)]
    if template.include_location_group_type:
        if not matching:
            return LOCATION_NOT_PERMITTED
        return max(location.specificity for location in matching)

    return LOCATION_NOT_PERMITTED if matching else 0


def _allowed_categories(template: SessionTemplate) -> Set[str]:
    return {category.upper() for group in template.category_groups for category in group.categories}


def _allowed_incentive_levels(template: SessionTemplate) -> Set[str]:
    return {level.upper() for group in template.incentive_groups for level in group.incentive_levels}


def _matches_groups(value: Optional[str], allowed: Set[str], include: bool) -> bool:
    # a prisoner without a value is kept off restricted sessions
    if value is None:
        return False
    listed = value.upper() in allowed
    return listed if include else not listed


def is_category_allowed(prisoner_category: Optional[str], template: SessionTemplate) -> bool:
    match = _matches_groups(prisoner_category, _allowed_categories(template), template.include_category_group_type)
    logger.debug(
        "Category match prisonerCategory=%s matched=%s sessionTemplate=%s",
        prisoner_category,
        match,
        template.reference,
    )
    return match


def is_incentive_level_allowed(incentive_level: Optional[str], template: SessionTemplate) -> bool:
    match = _matches_groups(incentive_level, _allowed_incentive_levels(template), template.include_incentive_group_type)
    logger.debug(
        "Incentive level match incentiveLevel=%s matched=%s sessionTemplate=%s",
        incentive_level,
        match,
        template.reference,
    )
    return match
