"""
Prisoner lookups across the downstream prison systems.

A missing prisoner, housing location or balance (404 from the API) is
reported as ``None`` or an empty result. Any other API failure propagates as
``ApiClientError``.
"""

from __future__ import annotations

from typing import List, Optional

from visit_scheduler.clients import NonAssociationsApiClient, PrisonApiClient, PrisonerSearchClient
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import Prisoner, PrisonerHousingLevelMap, PrisonerHousingLevels
from visit_scheduler.scheduling import get_prisoner_wing_from_location

logger = get_logger(__name__)


class PrisonerService:
    def __init__(
        self,
        prisoner_search: PrisonerSearchClient,
        prison_api: PrisonApiClient,
        non_associations: NonAssociationsApiClient,
    ) -> None:
        self._prisoner_search = prisoner_search
        self._prison_api = prison_api
        self._non_associations = non_associations

    async def get_prisoner(self, prisoner_id: str) -> Optional[Prisoner]:
        result = await self._prisoner_search.get_prisoner(prisoner_id)
        if result is None:
            logger.info(f"Prisoner {prisoner_id} not found in prisoner search")
            return None
        return Prisoner(
            prisoner_id=result.prisoner_number,
            prison_code=result.prison_id,
            category=result.category,
            incentive_level=result.incentive_level_code,
            first_name=result.first_name,
            last_name=result.last_name,
        )

    async def get_prisoner_housing_levels(self, prisoner_id: str, prison_code: str) -> PrisonerHousingLevelMap:
        """Map of housing level to location code; every level is None when unknown."""
        location = await self._prison_api.get_prisoner_housing_location(prisoner_id)
        levels: PrisonerHousingLevelMap = {level: None for level in PrisonerHousingLevels}
        if location is None:
            logger.debug(f"No housing location for prisoner {prisoner_id} at {prison_code}")
        else:
            for level in PrisonerHousingLevels:
                found = next((item for item in location.levels if item.level == level.level), None)
                levels[level] = found.code if found else None

        if levels[PrisonerHousingLevels.LEVEL_ONE] is None:
            levels[PrisonerHousingLevels.LEVEL_ONE] = await self.get_prisoner_wing(prisoner_id)
        return levels

    async def get_prisoner_wing(self, prisoner_id: str) -> Optional[str]:
        """Wing parsed from the prisoner's internal location, for prisons whose layout is known."""
        details = await self._prison_api.get_prisoner_details(prisoner_id)
        wing = get_prisoner_wing_from_location(details.internal_location if details else None)
        if wing is not None:
            logger.debug(f"Prisoner {prisoner_id} is on wing {wing} by internal location")
        return wing

    async def get_non_association_prisoner_ids(self, prisoner_id: str) -> List[str]:
        details = await self._non_associations.get_non_associations(prisoner_id)
        if details is None:
            return []
        ids = [d.offender_non_association.offender_no for d in details.non_associations]
        logger.debug(f"Prisoner {prisoner_id} has {len(ids)} non associations")
        return ids

    async def get_visit_balance(self, prisoner_id: str) -> int:
        """Remaining visiting orders plus privileged visiting orders."""
        balances = await self._prison_api.get_visit_balances(prisoner_id)
        if balances is None:
            return 0
        return balances.remaining_vo + balances.remaining_pvo
