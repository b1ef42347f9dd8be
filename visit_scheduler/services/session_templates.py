from __future__ import annotations

from datetime import date
from typing import List

from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.entities import PrisonRow
from visit_scheduler.core.exceptions import ItemNotFoundError
from visit_scheduler.core.models.domain import SessionTemplate

from .mappers import template_to_domain
from .prisons import PrisonsService


class SessionTemplateService:
    """Read access to session templates as domain models."""

    def __init__(self, repos: SqlRepoBundle, prisons: PrisonsService) -> None:
        self._repos = repos
        self._prisons = prisons

    async def get_template(self, reference: str) -> SessionTemplate:
        row = await self._repos.session_templates.get_by_reference(reference)
        if row is None:
            raise ItemNotFoundError(f"Session template reference {reference} not found", details={"reference": reference})
        return template_to_domain(row, await self._prisons.get_prison_code(row.prison_id))

    async def get_templates_for_date(self, prison_code: str, session_date: date) -> List[SessionTemplate]:
        """Templates of a prison valid on ``session_date`` and running on its weekday."""
        prison = await self._prisons.find_prison_by_code(prison_code)
        rows = await self._repos.session_templates.find_valid_for_date(prison.id, session_date)
        return [template_to_domain(r, prison.code) for r in rows]

    async def get_active_templates(self, prison: PrisonRow, range_start: date, range_end: date) -> List[SessionTemplate]:
        rows = await self._repos.session_templates.find_active_for_range(prison.id, range_start, range_end)
        return [template_to_domain(r, prison.code) for r in rows]
