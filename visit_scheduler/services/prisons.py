from __future__ import annotations

from typing import Dict

from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.entities import PrisonRow
from visit_scheduler.core.exceptions import PrisonNotFoundError, PrisonNotSupportedError


class PrisonsService:
    """Prison lookups by code or id, cached for the lifetime of the service."""

    def __init__(self, repos: SqlRepoBundle) -> None:
        self._repos = repos
        self._by_id: Dict[int, PrisonRow] = {}

    async def find_prison_by_code(self, prison_code: str) -> PrisonRow:
        prison = await self._repos.prisons.get_by_code(prison_code)
        if prison is None:
            raise PrisonNotFoundError(prison_code)
        self._by_id[prison.id] = prison
        return prison

    async def find_active_prison_by_code(self, prison_code: str) -> PrisonRow:
        prison = await self.find_prison_by_code(prison_code)
        if not prison.active:
            raise PrisonNotSupportedError(prison_code)
        return prison

    async def get_prison(self, prison_id: int) -> PrisonRow:
        if prison_id not in self._by_id:
            prison = await self._repos.prisons.get_by_id(prison_id)
            if prison is None:
                raise PrisonNotFoundError(str(prison_id))
            self._by_id[prison_id] = prison
        return self._by_id[prison_id]

    async def get_prison_code(self, prison_id: int) -> str:
        return (await self.get_prison(prison_id)).code
