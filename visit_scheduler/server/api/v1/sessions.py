"""
Visit session endpoints.

Sessions are the bookable occurrences of a prison's session templates inside
its booking window.
"""

from datetime import date, time
from typing import List, Optional

from fastapi import APIRouter, Query

from visit_scheduler.core.models.domain import SessionCapacity, UserType, VisitRestriction, VisitSession
from visit_scheduler.server.services import ServicesDep

router = APIRouter(tags=["visit-sessions"])


@router.get(
    "",
    response_model=List[VisitSession],
    summary="List Visit Sessions",
    description="List the visit sessions of a prison in its booking window. With a prisoner, only sessions the prisoner may attend are returned and conflicts are marked.",
    responses={
        200: {"description": "Sessions ordered by start time"},
        400: {"description": "Prison not supported"},
        404: {"description": "Prison or prisoner not found"},
    },
)
async def get_visit_sessions(
    services: ServicesDep,
    prison_code: str = Query(alias="prisonId"),
    prisoner_id: Optional[str] = Query(default=None, alias="prisonerId"),
    min_override: Optional[int] = Query(default=None, alias="min", ge=0),
    max_override: Optional[int] = Query(default=None, alias="max", ge=0),
    username: Optional[str] = Query(default=None),
    user_type: UserType = Query(default=UserType.STAFF, alias="userType"),
) -> List[VisitSession]:
    return await services.sessions.get_visit_sessions(
        prison_code, prisoner_id, min_override, max_override, username=username, user_type=user_type
    )


@router.get(
    "/available",
    response_model=List[VisitSession],
    summary="List Available Visit Sessions",
    description="Sessions with free capacity for the restriction and no conflicts for the prisoner.",
)
async def get_available_sessions(
    services: ServicesDep,
    prison_code: str = Query(alias="prisonId"),
    prisoner_id: str = Query(alias="prisonerId"),
    restriction: VisitRestriction = Query(default=VisitRestriction.OPEN, alias="sessionRestriction"),
    min_override: Optional[int] = Query(default=None, alias="min", ge=0),
    max_override: Optional[int] = Query(default=None, alias="max", ge=0),
    username: Optional[str] = Query(default=None),
    user_type: UserType = Query(default=UserType.PUBLIC, alias="userType"),
) -> List[VisitSession]:
    return await services.sessions.get_available_sessions(
        prison_code, prisoner_id, restriction, min_override, max_override, username=username, user_type=user_type
    )


@router.get(
    "/capacity",
    response_model=SessionCapacity,
    summary="Get Session Capacity",
    description="Open and closed capacity of the session running at the given date and times.",
    responses={404: {"description": "No session template matches"}},
)
async def get_session_capacity(
    services: ServicesDep,
    prison_code: str = Query(alias="prisonId"),
    session_date: date = Query(alias="sessionDate"),
    start_time: time = Query(alias="sessionStartTime"),
    end_time: time = Query(alias="sessionEndTime"),
) -> SessionCapacity:
    return await services.sessions.get_session_capacity(prison_code, session_date, start_time, end_time)
