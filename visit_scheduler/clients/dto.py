from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field

from visit_scheduler.core.models import ExternalSchema


class IncentiveLevelDTO(ExternalSchema):
    code: str
    description: Optional[str] = None


class CurrentIncentiveDTO(ExternalSchema):
    level: IncentiveLevelDTO


class PrisonerSearchResultDTO(ExternalSchema):
    prisoner_number: str
    prison_id: Optional[str] = None
    category: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    current_incentive: Optional[CurrentIncentiveDTO] = None

    @property
    def incentive_level_code(self) -> Optional[str]:
        return self.current_incentive.level.code if self.current_incentive else None


class PrisonerHousingLevelDTO(ExternalSchema):
    level: int
    code: str
    description: Optional[str] = None


class PrisonerHousingLocationsDTO(ExternalSchema):
    levels: List[PrisonerHousingLevelDTO] = Field(default_factory=list)


class PrisonerDetailsDTO(ExternalSchema):
    offender_no: Optional[str] = None
    internal_location: Optional[str] = None


class VisitBalancesDTO(ExternalSchema):
    remaining_vo: int = 0
    remaining_pvo: int = 0
    latest_iep_adjust_date: Optional[date] = None
    latest_priv_iep_adjust_date: Optional[date] = None


class NonAssociationOffenderDTO(ExternalSchema):
    offender_no: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class NonAssociationDetailDTO(ExternalSchema):
    offender_non_association: NonAssociationOffenderDTO
    effective_date: Optional[date] = None
    expiry_date: Optional[date] = None


class NonAssociationDetailsDTO(ExternalSchema):
    non_associations: List[NonAssociationDetailDTO] = Field(default_factory=list)
