"""
Services Dependency.

Downstream API clients and the SNS client are shared by the whole process.
The service graph is built per request on that request's database session.
"""

from typing import Annotated, Any, Optional

from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from visit_scheduler.core.database import get_session
from visit_scheduler.services import ApiClients, Services, build_api_clients, build_services
from visit_scheduler.services.domain_events import get_sns_client

from ..core.config import settings

_api_clients: Optional[ApiClients] = None
_sns_client: Optional[Any] = None


def get_api_clients() -> ApiClients:
    global _api_clients
    if _api_clients is None:
        _api_clients = build_api_clients()
    return _api_clients


def get_domain_events_client() -> Optional[Any]:
    """The boto3 SNS client, or None while domain events are disabled."""
    global _sns_client
    config = settings.domain_events
    if not config.enabled:
        return None
    if _sns_client is None:
        _sns_client = get_sns_client(config)
    return _sns_client


async def close_api_clients() -> None:
    global _api_clients, _sns_client
    if _api_clients is not None:
        await _api_clients.aclose()
        _api_clients = None
    _sns_client = None


async def get_services(
    session: AsyncSession = Depends(get_session),
    clients: ApiClients = Depends(get_api_clients),
    sns_client: Optional[Any] = Depends(get_domain_events_client),
) -> Services:
    return build_services(session, clients, sns_client=sns_client)


ServicesDep = Annotated[Services, Depends(get_services)]
