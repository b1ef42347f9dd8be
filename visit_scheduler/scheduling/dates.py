"""Session date calculations.

A template with ``weekly_frequency`` N runs every N weeks. Weeks are counted
from the Monday on or before the template's ``valid_from_date`` so that a
template starting mid-week still alternates on whole weeks.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import List

from visit_scheduler.core.models.domain import SessionTemplate


class SessionDatesUtil:
    """Date helpers for recurring session templates."""

    @staticmethod
    def _valid_from_monday(valid_from_date: date) -> date:
        return valid_from_date - timedelta(days=valid_from_date.weekday())

    def is_weekly_skip_date(self, session_date: date, valid_from_date: date, weekly_frequency: int) -> bool:
        """Return True when ``session_date`` falls in a week the template does not run."""
        monday = self._valid_from_monday(valid_from_date)
        # whole weeks, truncated towards zero
        weeks = int((session_date - monday).days / 7)
        return weeks % weekly_frequency != 0

    def is_active_for_date(self, session_date: date, template: SessionTemplate) -> bool:
        if template.weekly_frequency > 1:
            return not self.is_weekly_skip_date(session_date, template.valid_from_date, template.weekly_frequency)
        return True

    def calculate_dates(self, first_bookable_day: date, last_bookable_day: date, template: SessionTemplate) -> List[date]:
        """Dates from ``first_bookable_day`` up to and including ``last_bookable_day``.

        Args:
            first_bookable_day: First date, already on the template's weekday
            last_bookable_day: Inclusive upper bound
            template: Template providing the weekly frequency step

        Returns:
            Dates stepping ``weekly_frequency`` weeks at a time, empty when the range is empty
        """
        step = timedelta(weeks=template.weekly_frequency)
        dates: List[date] = []
        current = first_bookable_day
        while current <= last_bookable_day:
            dates.append(current)
            current += step
        return dates

    def get_first_bookable_session_day(self, range_start: date, template: SessionTemplate) -> date:
        """First date on or after ``range_start`` the template actually runs.

        The template's ``valid_from_date`` is moved forward to its weekday, then
        advanced by whole frequency periods until it reaches ``range_start``.
        """
        first = template.valid_from_date + timedelta(
            days=(template.day_of_week.weekday - template.valid_from_date.weekday()) % 7
        )
        if first < range_start:
            period_days = 7 * template.weekly_frequency
            periods = -(-(range_start - first).days // period_days)
            first += timedelta(days=periods * period_days)
        return first
