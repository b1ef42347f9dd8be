"""Session template matching for migrated visits.

Legacy visits carry a date, times and a room name but no session template.
``MigrationSessionTemplateMatcher`` scores every template running on the
visit's date and picks the best permitted one.

Scoring
-------

Each candidate gets a ``MigrateMatch``. Candidates are ordered first by the
sum of the individual comparisons of time proximity (smaller is better),
location score, category and incentive level. Ties fall back to how recently
the template became valid, then to an exact room name match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Protocol, Sequence

from visit_scheduler.core.exceptions import MatchSessionTemplateToMigratedVisitError
from visit_scheduler.core.models.domain import (
    Prisoner,
    PrisonerHousingLevelMap,
    SessionTemplate,
    VisitRestriction,
)
from visit_scheduler.core.models.io import MigrateVisitRequest

from .dates import SessionDatesUtil
from .matchers import LOCATION_NOT_PERMITTED, get_location_score, is_category_allowed, is_incentive_level_allowed

logger = logging.getLogger(__name__)

DEFAULT_MAX_PROXIMITY_MINUTES = 180
FROM_DATE_IN_FUTURE = -1000


class PrisonerLookup(Protocol):
    async def get_prisoner(self, prisoner_id: str) -> Optional[Prisoner]: ...

    async def get_prisoner_housing_levels(self, prisoner_id: str, prison_code: str) -> PrisonerHousingLevelMap: ...


class SessionTemplateLookup(Protocol):
    async def get_templates_for_date(self, prison_code: str, session_date: date) -> List[SessionTemplate]: ...


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


@dataclass
class MigrateMatch:
    """How well one session template fits a migrated visit."""

    location_score: int = LOCATION_NOT_PERMITTED
    category: bool = False
    enhanced: bool = False
    time_proximity: int = 0
    valid_from_date_proximity_days: int = 0
    room_name_match: bool = False

    def compare(self, other: MigrateMatch) -> int:
        value = (
            -_cmp(self.time_proximity, other.time_proximity)
            + _cmp(self.location_score, other.location_score)
            + _cmp(self.category, other.category)
            + _cmp(self.enhanced, other.enhanced)
        )
        if value == 0:
            value = _cmp(self.valid_from_date_proximity_days, other.valid_from_date_proximity_days)
            if value == 0:
                value = _cmp(self.room_name_match, other.room_name_match)
        return value


def _seconds(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def get_proximity_minutes(session_start: time, start: time, session_end: time, end: time) -> int:
    return (abs(_seconds(session_start) - _seconds(start)) + abs(_seconds(session_end) - _seconds(end))) // 60


def get_from_date_proximity_days(visit_date: date, template: SessionTemplate) -> int:
    """Days from the visit back to the template's valid-from date (zero or negative)."""
    if template.valid_from_date > visit_date:
        return FROM_DATE_IN_FUTURE
    return (template.valid_from_date - visit_date).days


def remove_unwanted_restriction_types(
    restriction: VisitRestriction, templates: Sequence[SessionTemplate]
) -> List[SessionTemplate]:
    if restriction == VisitRestriction.UNKNOWN:
        return list(templates)
    if restriction == VisitRestriction.OPEN:
        return [t for t in templates if t.open_capacity > 0]
    return [t for t in templates if t.closed_capacity > 0]


class MigrationSessionTemplateMatcher:
    """Pick the session template a legacy visit most likely belonged to."""

    def __init__(
        self,
        prisoner_service: PrisonerLookup,
        session_templates: SessionTemplateLookup,
        *,
        dates_util: Optional[SessionDatesUtil] = None,
        max_proximity_minutes: int = DEFAULT_MAX_PROXIMITY_MINUTES,
    ) -> None:
        self._prisoners = prisoner_service
        self._templates = session_templates
        self._dates = dates_util or SessionDatesUtil()
        self._max_proximity_minutes = max_proximity_minutes

    async def get_session_templates(
        self, prison_code: str, session_date: date, restriction: VisitRestriction
    ) -> List[SessionTemplate]:
        templates = await self._templates.get_templates_for_date(prison_code, session_date)
        templates = [t for t in templates if self._dates.is_active_for_date(session_date, t)]
        return remove_unwanted_restriction_types(restriction, templates)

    async def get_matching_session_template(self, request: MigrateVisitRequest) -> SessionTemplate:
        templates = await self.get_session_templates(
            request.prison_id, request.start_timestamp.date(), request.visit_restriction
        )
        return await self.get_nearest_session_template(request, templates)

    def score(
        self,
        request: MigrateVisitRequest,
        template: SessionTemplate,
        prisoner: Prisoner,
        levels: PrisonerHousingLevelMap,
    ) -> MigrateMatch:
        start: datetime = request.start_timestamp
        end: datetime = request.end_timestamp
        return MigrateMatch(
            location_score=get_location_score(levels, template),
            category=is_category_allowed(prisoner.category, template),
            enhanced=is_incentive_level_allowed(prisoner.incentive_level, template),
            time_proximity=get_proximity_minutes(template.start_time, start.time(), template.end_time, end.time()),
            valid_from_date_proximity_days=get_from_date_proximity_days(start.date(), template),
            room_name_match=template.visit_room == request.visit_room,
        )

    def is_session_permitted(self, template: SessionTemplate, match: MigrateMatch) -> bool:
        return (
            match.location_score != LOCATION_NOT_PERMITTED
            and (match.category or template.is_for_all_categories)
            and (match.enhanced or template.is_for_all_incentive_levels)
            and match.time_proximity <= self._max_proximity_minutes
            and match.valid_from_date_proximity_days != FROM_DATE_IN_FUTURE
        )

    async def get_nearest_session_template(
        self, request: MigrateVisitRequest, templates: Sequence[SessionTemplate]
    ) -> SessionTemplate:
        """Return the best permitted template among ``templates``.

        Raises:
            MatchSessionTemplateToMigratedVisitError: no templates, unknown
                prisoner, or no template permitted for the prisoner
        """
        start = request.start_timestamp
        message = (
            f"prison code {request.prison_id} prisoner id {request.prisoner_id}, "
            f"visit {start.date()}/{start.strftime('%A').upper()}/{start.time()} <> {request.end_timestamp.time()} "
            f"room:{request.visit_room}"
        )
        logger.debug("Enter get_nearest_session_template: %s", message)

        if not templates:
            raise MatchSessionTemplateToMigratedVisitError(f"Could not find any session templates: {message}")

        prisoner = await self._prisoners.get_prisoner(request.prisoner_id)
        if prisoner is None:
            raise MatchSessionTemplateToMigratedVisitError(f"Prisoner cannot be found: {message}")
        if prisoner.prison_code != request.prison_id:
            logger.debug(
                "Migrated prisoner %s prison (%s) differs from current prison (%s)",
                request.prisoner_id,
                request.prison_id,
                prisoner.prison_code,
            )

        levels = await self._prisoners.get_prisoner_housing_levels(request.prisoner_id, request.prison_id)

        matches: Dict[str, MigrateMatch] = {t.reference: self.score(request, t, prisoner, levels) for t in templates}
        ordered = sorted(templates, key=cmp_to_key(lambda a, b: matches[a.reference].compare(matches[b.reference])))

        permitted = []
        for template in ordered:
            match = matches[template.reference]
            if self.is_session_permitted(template, match):
                permitted.append(template)
            else:
                logger.debug(
                    "Session not permitted ref:%s/%s/%s %s location:%s",
                    template.reference,
                    request.prison_id,
                    request.prisoner_id,
                    match,
                    [code for code in levels.values() if code is not None],
                )

        if not permitted:
            raise MatchSessionTemplateToMigratedVisitError(
                f"Could not find any session templates matching prisoner {prisoner.prisoner_id}: {message}"
            )

        best = permitted[-1]
        logger.debug("Best session template ref:%s %s", best.reference, matches[best.reference])
        return best
