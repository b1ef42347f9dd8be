"""
HTTP clients for the downstream prison systems.

- PrisonerSearchClient: prisoner details (prison, category, incentive level)
- PrisonApiClient: housing locations and visiting order balances
- NonAssociationsApiClient: prisoners who must not meet on visits
"""

from .dto import (
    CurrentIncentiveDTO,
    IncentiveLevelDTO,
    NonAssociationDetailDTO,
    NonAssociationDetailsDTO,
    NonAssociationOffenderDTO,
    PrisonerDetailsDTO,
    PrisonerHousingLevelDTO,
    PrisonerHousingLocationsDTO,
    PrisonerSearchResultDTO,
    VisitBalancesDTO,
)
from .errors import ApiClientError
from .non_associations import NonAssociationsApiClient
from .prison_api import PrisonApiClient
from .prisoner_search import PrisonerSearchClient

__all__ = [
    "ApiClientError",
    "CurrentIncentiveDTO",
    "IncentiveLevelDTO",
    "NonAssociationDetailDTO",
    "NonAssociationDetailsDTO",
    "NonAssociationOffenderDTO",
    "NonAssociationsApiClient",
    "PrisonApiClient",
    "PrisonerDetailsDTO",
    "PrisonerHousingLevelDTO",
    "PrisonerHousingLocationsDTO",
    "PrisonerSearchClient",
    "PrisonerSearchResultDTO",
    "VisitBalancesDTO",
]
