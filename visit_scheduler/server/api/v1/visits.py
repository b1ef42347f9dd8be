"""
Visit endpoints.

Booking completes an application; cancelling ends a booked visit. Both are
safe to retry.
"""

from typing import List

from fastapi import APIRouter

from visit_scheduler.core.models.domain import EventAudit, Visit
from visit_scheduler.core.models.io import BookingRequest, CancelVisit
from visit_scheduler.server.services import ServicesDep

router = APIRouter(tags=["visits"])


@router.put(
    "/{application_reference}/book",
    response_model=Visit,
    summary="Book a Visit",
    description="Book the visit held by an application. Repeating a completed booking returns the booked visit.",
    responses={
        400: {"description": "Validation failed or the slot is full"},
        404: {"description": "Application not found"},
    },
)
async def book_visit(application_reference: str, request: BookingRequest, services: ServicesDep) -> Visit:
    return await services.visits.book_visit(application_reference, request)


@router.put(
    "/{reference}/cancel",
    response_model=Visit,
    summary="Cancel a Visit",
    description="Cancel a booked visit. Cancelling an already cancelled visit returns it unchanged.",
    responses={
        400: {"description": "Visit is too far in the past to cancel"},
        404: {"description": "Visit not found"},
    },
)
async def cancel_visit(reference: str, request: CancelVisit, services: ServicesDep) -> Visit:
    return await services.visits.cancel_visit(reference, request)


@router.get(
    "/search/future/{prisoner_id}",
    response_model=List[Visit],
    summary="List Future Visits of a Prisoner",
)
async def get_future_visits(prisoner_id: str, services: ServicesDep) -> List[Visit]:
    return await services.visits.get_booked_visits_for_prisoner(prisoner_id)


@router.get(
    "/{reference}",
    response_model=Visit,
    summary="Get a Visit",
    responses={404: {"description": "Visit not found"}},
)
async def get_visit(reference: str, services: ServicesDep) -> Visit:
    return await services.visits.get_visit_by_reference(reference)


@router.get(
    "/{reference}/history",
    response_model=List[EventAudit],
    summary="Get Visit History",
    description="Audit events of a visit, oldest first.",
    responses={404: {"description": "Visit not found"}},
)
async def get_visit_history(reference: str, services: ServicesDep) -> List[EventAudit]:
    return await services.visits.get_visit_history(reference)
