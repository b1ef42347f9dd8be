from __future__ import annotations

from typing import Optional

from .base import BaseApiClient
from .dto import NonAssociationDetailsDTO


class NonAssociationsApiClient(BaseApiClient):
    """Client for the non-associations API (legacy endpoint)."""

    async def get_non_associations(self, prisoner_id: str) -> Optional[NonAssociationDetailsDTO]:
        data = await self._get_json(
            f"/legacy/api/offenders/{prisoner_id}/non-association-details",
            params={"currentPrisonOnly": "true", "excludeInactive": "true"},
            operation="get_non_associations",
        )
        if data is None:
            return None
        return NonAssociationDetailsDTO.model_validate(data)
