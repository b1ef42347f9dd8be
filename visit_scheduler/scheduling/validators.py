"""Session availability checks for a prisoner."""

from __future__ import annotations

from typing import Optional, Sequence

from visit_scheduler.core.models.domain import Prisoner, PrisonerHousingLevelMap, SessionTemplate

from .matchers import has_location_match, is_category_allowed, is_incentive_level_allowed


def is_location_available(template: SessionTemplate, levels: PrisonerHousingLevelMap) -> bool:
    if not template.location_groups:
        return True
    matched = has_location_match(template, levels)
    return matched if template.include_location_group_type else not matched


def is_category_available(template: SessionTemplate, prisoner: Prisoner) -> bool:
    if template.is_for_all_categories:
        return True
    return is_category_allowed(prisoner.category, template)


def is_incentive_level_available(template: SessionTemplate, prisoner: Prisoner) -> bool:
    if template.is_for_all_incentive_levels:
        return True
    return is_incentive_level_allowed(prisoner.incentive_level, template)


def is_session_available_to_prisoner(
    template: SessionTemplate,
    prisoner: Prisoner,
    levels: PrisonerHousingLevelMap,
    templates: Optional[Sequence[SessionTemplate]] = None,
) -> bool:
    """Decide whether ``prisoner`` may attend sessions of ``template``.

    Location, category and incentive level must all pass. When ``templates``
    is given, a kind of check is skipped entirely if none of those templates
    restricts on it.
    """
    check_location = check_category = check_incentive = True
    if templates is not None:
        check_location = any(t.location_groups for t in templates)
        check_category = any(t.category_groups for t in templates)
        check_incentive = any(t.incentive_groups for t in templates)

    return (
        (not check_location or is_location_available(template, levels))
        and (not check_category or is_category_available(template, prisoner))
        and (not check_incentive or is_incentive_level_available(template, prisoner))
    )
