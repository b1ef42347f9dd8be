"""
Visit request endpoints.

Requested visits wait for a member of staff to approve or reject them.
"""

from typing import List

from fastapi import APIRouter

from visit_scheduler.core.exceptions import VisitValidationError
from visit_scheduler.core.models.domain import Visit, VisitRequestsCount, VisitRequestSummary
from visit_scheduler.core.models.io import VisitRequestDecision
from visit_scheduler.server.services import ServicesDep

router = APIRouter(tags=["visit-requests"])


def _check_reference(reference: str, decision: VisitRequestDecision) -> None:
    if decision.visit_reference != reference:
        raise VisitValidationError(
            f"Visit reference {decision.visit_reference} does not match {reference}",
            details={"reference": reference},
        )


@router.get(
    "/{prison_code}",
    response_model=List[VisitRequestSummary],
    summary="List Visit Requests",
    description="Future visit requests of a prison awaiting a decision, by visit date.",
)
async def get_visit_requests(prison_code: str, services: ServicesDep) -> List[VisitRequestSummary]:
    return await services.visit_requests.get_visit_requests_for_prison(prison_code)


@router.get(
    "/{prison_code}/count",
    response_model=VisitRequestsCount,
    summary="Count Visit Requests",
)
async def count_visit_requests(prison_code: str, services: ServicesDep) -> VisitRequestsCount:
    return await services.visit_requests.get_visit_requests_count_for_prison(prison_code)


@router.put(
    "/{reference}/approve",
    response_model=Visit,
    summary="Approve a Visit Request",
    responses={400: {"description": "Visit is not awaiting a decision"}},
)
async def approve_visit_request(reference: str, decision: VisitRequestDecision, services: ServicesDep) -> Visit:
    _check_reference(reference, decision)
    return await services.visit_requests.approve_visit_request(reference, decision.actioned_by)


@router.put(
    "/{reference}/reject",
    response_model=Visit,
    summary="Reject a Visit Request",
    responses={400: {"description": "Visit is not awaiting a decision"}},
)
async def reject_visit_request(reference: str, decision: VisitRequestDecision, services: ServicesDep) -> Visit:
    _check_reference(reference, decision)
    return await services.visit_requests.reject_visit_request(reference, decision.actioned_by)
