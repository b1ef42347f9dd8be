from __future__ import annotations

from typing import Optional

from .base import BaseApiClient
from .dto import PrisonerDetailsDTO, PrisonerHousingLocationsDTO, VisitBalancesDTO


class PrisonApiClient(BaseApiClient):
    """
    Client for the prison API.

    Responsibilities:
    - get_prisoner_housing_location
    - get_prisoner_details
    - get_visit_balances
    """

    async def get_prisoner_housing_location(self, prisoner_id: str) -> Optional[PrisonerHousingLocationsDTO]:
        data = await self._get_json(
            f"/api/offenders/{prisoner_id}/housing-location", operation="get_prisoner_housing_location"
        )
        if data is None:
            return None
        return PrisonerHousingLocationsDTO.model_validate(data)

    async def get_prisoner_details(self, prisoner_id: str) -> Optional[PrisonerDetailsDTO]:
        data = await self._get_json(f"/api/prisoners/{prisoner_id}/full-status", operation="get_prisoner_details")
        if data is None:
            return None
        return PrisonerDetailsDTO.model_validate(data)

    async def get_visit_balances(self, prisoner_id: str) -> Optional[VisitBalancesDTO]:
        data = await self._get_json(
            f"/api/bookings/offenderNo/{prisoner_id}/visit/balances", operation="get_visit_balances"
        )
        if data is None:
            return None
        return VisitBalancesDTO.model_validate(data)
