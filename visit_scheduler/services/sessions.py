"""
Visit session listing.

Sessions are calculated on the fly from the active session templates of a
prison: every date in the booking window the template runs on becomes a
``VisitSession``. Slots are not created here; booked counts come from
whatever slots already exist.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, List, Optional, Set

from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.base import now
from visit_scheduler.core.database.entities import PrisonRow
from visit_scheduler.core.exceptions import ItemNotFoundError
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import (
    Prisoner,
    PrisonerHousingLevelMap,
    SessionCapacity,
    SessionConflict,
    SessionTemplate,
    UserType,
    VisitRestriction,
    VisitSession,
)
from visit_scheduler.scheduling import SessionDatesUtil, is_session_available_to_prisoner

from .mappers import template_to_domain
from .prisoners import PrisonerService
from .prisons import PrisonsService
from .session_templates import SessionTemplateService
from .slot_capacity import SlotCapacityService

logger = get_logger(__name__)


class SessionService:
    def __init__(
        self,
        repos: SqlRepoBundle,
        *,
        prisons: PrisonsService,
        templates: SessionTemplateService,
        prisoners: PrisonerService,
        capacity: SlotCapacityService,
        dates_util: Optional[SessionDatesUtil] = None,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._repos = repos
        self._prisons = prisons
        self._templates = templates
        self._prisoners = prisoners
        self._capacity = capacity
        self._dates = dates_util or SessionDatesUtil()
        self._clock = clock

    def _booking_window(
        self, prison: PrisonRow, min_override: Optional[int], max_override: Optional[int]
    ) -> tuple[date, date]:
        today = self._clock().date()
        notice_min = prison.policy_notice_days_min if min_override is None else min_override
        notice_max = prison.policy_notice_days_max if max_override is None else max_override
        return today + timedelta(days=notice_min), today + timedelta(days=notice_max)

    def _session_dates(self, template: SessionTemplate, range_start: date, range_end: date, excluded: Set[date]) -> List[date]:
        first = self._dates.get_first_bookable_session_day(range_start, template)
        last = min(range_end, template.valid_to_date) if template.valid_to_date else range_end
        template_excluded = set(template.exclude_dates)
        return [d for d in self._dates.calculate_dates(first, last, template) if d not in excluded and d not in template_excluded]

    async def _get_prisoner(self, prisoner_id: str) -> Prisoner:
        prisoner = await self._prisoners.get_prisoner(prisoner_id)
        if prisoner is None:
            raise ItemNotFoundError(f"Prisoner {prisoner_id} not found", details={"prisoner_id": prisoner_id})
        return prisoner

    async def _filter_for_prisoner(
        self, templates: List[SessionTemplate], prisoner: Prisoner, levels: PrisonerHousingLevelMap
    ) -> List[SessionTemplate]:
        available = [t for t in templates if is_session_available_to_prisoner(t, prisoner, levels, templates)]
        logger.debug(f"{len(available)} of {len(templates)} session templates available to prisoner {prisoner.prisoner_id}")
        return available

    async def _build_session(self, template: SessionTemplate, session_date: date) -> VisitSession:
        session = VisitSession(
            session_template_reference=template.reference,
            visit_room=template.visit_room,
            visit_type=template.visit_type,
            prison_code=template.prison_code,
            open_visit_capacity=template.open_capacity,
            closed_visit_capacity=template.closed_capacity,
            start_timestamp=datetime.combine(session_date, template.start_time),
            end_timestamp=datetime.combine(session_date, template.end_time),
        )
        slot = await self._repos.session_slots.find_by_template_and_date(template.reference, session_date)
        if slot is not None:
            session.open_visit_booked_count = await self._booked_count(slot.id, VisitRestriction.OPEN)
            session.closed_visit_booked_count = await self._booked_count(slot.id, VisitRestriction.CLOSED)
        return session

    async def _booked_count(self, slot_id: int, restriction: VisitRestriction) -> int:
        """Booked visits plus unexpired reservations holding the slot."""
        booked = await self._repos.visits.count_booked_for_slot(slot_id, restriction)
        reserved = await self._repos.applications.count_reserved_for_slot(
            slot_id, restriction, self._capacity.active_since()
        )
        return booked + reserved

    async def _has_non_association_on(self, non_associations: List[str], session_date: date, prison: PrisonRow) -> bool:
        if await self._repos.visits.has_active_visits_for_date(non_associations, session_date, prison.id):
            return True
        return await self._repos.applications.has_active_applications_for_date(
            non_associations, session_date, prison.id, self._capacity.active_since()
        )

    async def _mark_conflicts(
        self, sessions: List[VisitSession], prison: PrisonRow, prisoner_id: str, non_associations: List[str]
    ) -> None:
        non_association_dates: Dict[date, bool] = {}
        active_since = self._capacity.active_since()

        for session in sessions:
            session_date = session.start_timestamp.date()
            if non_associations:
                if session_date not in non_association_dates:
                    non_association_dates[session_date] = await self._has_non_association_on(
                        non_associations, session_date, prison
                    )
                if non_association_dates[session_date]:
                    session.sessions_conflicts.append(SessionConflict.NON_ASSOCIATION)

            slot = await self._repos.session_slots.find_by_template_and_date(session.session_template_reference, session_date)
            if slot is None:
                continue
            booked = await self._repos.visits.has_active_visit_for_slot(prisoner_id, slot.id)
            if booked or await self._repos.applications.has_reservations(prisoner_id, slot.id, active_since):
                session.sessions_conflicts.append(SessionConflict.DOUBLE_BOOKING_OR_RESERVATION)

    async def get_visit_sessions(
        self,
        prison_code: str,
        prisoner_id: Optional[str] = None,
        min_override: Optional[int] = None,
        max_override: Optional[int] = None,
        username: Optional[str] = None,
        user_type: UserType = UserType.STAFF,
    ) -> List[VisitSession]:
        """List the bookable sessions of a prison within its booking window.

        Args:
            prison_code: Prison to list sessions for
            prisoner_id: When given, only sessions the prisoner may attend, with conflicts marked
            min_override: Replaces the prison's minimum notice days
            max_override: Replaces the prison's maximum notice days
            username: Requesting user, for logging
            user_type: Requesting user type, for logging

        Returns:
            Sessions ordered by start time
        """
        prison = await self._prisons.find_active_prison_by_code(prison_code)
        range_start, range_end = self._booking_window(prison, min_override, max_override)
        logger.debug(
            f"Visit sessions for {prison_code} prisoner={prisoner_id} {range_start}..{range_end} "
            f"user={username} type={user_type.value}"
        )

        templates = await self._templates.get_active_templates(prison, range_start, range_end)
        non_associations: List[str] = []
        if prisoner_id is not None:
            prisoner = await self._get_prisoner(prisoner_id)
            levels = await self._prisoners.get_prisoner_housing_levels(prisoner_id, prison_code)
            templates = await self._filter_for_prisoner(templates, prisoner, levels)
            non_associations = await self._prisoners.get_non_association_prisoner_ids(prisoner_id)

        excluded = prison.excluded_dates
        sessions: List[VisitSession] = []
        for template in templates:
            for session_date in self._session_dates(template, range_start, range_end, excluded):
                sessions.append(await self._build_session(template, session_date))

        if prisoner_id is not None:
            await self._mark_conflicts(sessions, prison, prisoner_id, non_associations)

        return sorted(sessions, key=lambda s: s.start_timestamp)

    async def get_available_sessions(
        self,
        prison_code: str,
        prisoner_id: str,
        restriction: VisitRestriction,
        min_override: Optional[int] = None,
        max_override: Optional[int] = None,
        username: Optional[str] = None,
        user_type: UserType = UserType.PUBLIC,
    ) -> List[VisitSession]:
        """Sessions with free capacity for ``restriction`` and no conflicts for the prisoner."""
        sessions = await self.get_visit_sessions(
            prison_code, prisoner_id, min_override, max_override, username=username, user_type=user_type
        )
        return [
            s
            for s in sessions
            if s.capacity_for(restriction) > 0
            and s.capacity_for(restriction) > s.booked_count_for(restriction)
            and not s.sessions_conflicts
        ]

    async def get_session_capacity(
        self, prison_code: str, session_date: date, start_time: time, end_time: time
    ) -> SessionCapacity:
        """Open and closed capacity of the templates running at the given date and times.

        Raises:
            ItemNotFoundError: no session template matches
        """
        prison = await self._prisons.find_prison_by_code(prison_code)
        rows = await self._repos.session_templates.find_valid_for_date(prison.id, session_date, start_time, end_time)
        templates = [t for t in (template_to_domain(r, prison.code) for r in rows) if self._dates.is_active_for_date(session_date, t)]
        if not templates:
            raise ItemNotFoundError(
                f"Session capacity not found for {prison_code} on {session_date} {start_time}-{end_time}",
                details={"prison_code": prison_code, "session_date": session_date.isoformat()},
            )
        if len(templates) > 1:
            logger.warning(f"{len(templates)} session templates match {prison_code} on {session_date} {start_time}-{end_time}")
        return SessionCapacity(
            open=sum(t.open_capacity for t in templates),
            closed=sum(t.closed_capacity for t in templates),
        )
