"""
Application endpoints.

An application reserves a slot while the booking is being completed, either
for a new visit or to change an existing one.
"""

from fastapi import APIRouter, status

from visit_scheduler.core.models.domain import Application
from visit_scheduler.core.models.io import ChangeApplication, CreateApplication
from visit_scheduler.server.services import ServicesDep

router = APIRouter(tags=["applications"])


@router.post(
    "/slot/reserve",
    response_model=Application,
    status_code=status.HTTP_201_CREATED,
    summary="Reserve a Visit Slot",
    description="Create an application holding a slot of a session template on a date.",
    responses={
        201: {"description": "Application created"},
        400: {"description": "Invalid visitors or support, or the slot is full"},
        404: {"description": "Session template not found"},
    },
)
async def reserve_slot(request: CreateApplication, services: ServicesDep) -> Application:
    """
    Create a new application.

    - **sessionTemplateReference** and **sessionDate**: the slot to hold
    - **applicationRestriction**: OPEN or CLOSED capacity to hold
    - **visitors**: at least one, no more than the prison allows
    """
    return await services.applications.create_initial_application(request)


@router.put(
    "/{reference}/slot/change",
    response_model=Application,
    summary="Change an Application",
    description="Move an unfinished application to another slot or update its details.",
)
async def change_incomplete_application(reference: str, request: ChangeApplication, services: ServicesDep) -> Application:
    return await services.applications.change_incomplete_application(reference, request)


@router.put(
    "/{booking_reference}/change",
    response_model=Application,
    summary="Start Changing a Booked Visit",
    description="Create an application that amends an existing booked visit.",
    responses={404: {"description": "Visit not found"}},
)
async def create_application_for_existing_visit(
    booking_reference: str, request: CreateApplication, services: ServicesDep
) -> Application:
    return await services.applications.create_application_for_existing_visit(booking_reference, request)


@router.get(
    "/{reference}",
    response_model=Application,
    summary="Get an Application",
    responses={404: {"description": "Application not found"}},
)
async def get_application(reference: str, services: ServicesDep) -> Application:
    return await services.applications.get_application(reference)
