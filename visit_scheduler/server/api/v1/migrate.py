"""
Legacy visit migration endpoints.

Used by the NOMIS synchronisation job to copy visits into the scheduler.
"""

from fastapi import APIRouter, status

from visit_scheduler.core.models.domain import Visit
from visit_scheduler.core.models.io import MigratedCancelVisit, MigrateVisitRequest
from visit_scheduler.server.services import ServicesDep

router = APIRouter(tags=["migration"])


@router.post(
    "",
    response_model=str,
    status_code=status.HTTP_201_CREATED,
    summary="Migrate a Visit",
    description="Import a legacy visit and return the reference of the new visit.",
    responses={
        400: {"description": "Visit too far in the future or no session template fits"},
        404: {"description": "Prison not found"},
    },
)
async def migrate_visit(request: MigrateVisitRequest, services: ServicesDep) -> str:
    return await services.migration.migrate_visit(request)


@router.put(
    "/{reference}/cancel",
    response_model=Visit,
    summary="Cancel a Migrated Visit",
    responses={404: {"description": "Visit not found"}},
)
async def cancel_migrated_visit(reference: str, request: MigratedCancelVisit, services: ServicesDep) -> Visit:
    return await services.migration.cancel_migrated_visit(reference, request)
