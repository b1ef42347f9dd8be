from __future__ import annotations

from typing import Optional

from .base import BaseApiClient
from .dto import PrisonerSearchResultDTO


class PrisonerSearchClient(BaseApiClient):
    """Client for the prisoner offender search API."""

    async def get_prisoner(self, prisoner_id: str) -> Optional[PrisonerSearchResultDTO]:
        data = await self._get_json(f"/prisoner/{prisoner_id}", operation="get_prisoner")
        if data is None:
            return None
        return PrisonerSearchResultDTO.model_validate(data)
