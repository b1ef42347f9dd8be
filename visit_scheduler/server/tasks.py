"""
Scheduled Tasks.

Housekeeping jobs the server runs in the background on a fixed interval:
expired applications are deleted, and visit requests whose session has come
inside the minimum booking window are rejected. Each run builds the services
on a fresh database session.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from visit_scheduler.core.database.session import async_session_maker
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import VisitRequestAutoRejectionReason
from visit_scheduler.services import ApiClients, Services, build_services

from .core.config import Settings, settings
from .services import get_api_clients, get_domain_events_client

logger = get_logger(__name__)

Job = Callable[[Services], Awaitable[Any]]


async def delete_expired_applications(services: Services) -> int:
    return await services.applications.delete_expired_applications()


async def reject_visit_requests_in_booking_window(services: Services) -> int:
    rejected = await services.visit_requests.auto_reject_visit_requests(
        VisitRequestAutoRejectionReason.MINIMUM_BOOKING_WINDOW_REACHED
    )
    return len(rejected)


class ScheduledTaskRunner:
    """Runs the housekeeping jobs until stopped."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        *,
        session_factory: Callable[[], AsyncSession] = async_session_maker,
        clients_factory: Callable[[], ApiClients] = get_api_clients,
        sns_client_factory: Callable[[], Any] = get_domain_events_client,
    ) -> None:
        self._config = config or settings
        self._session_factory = session_factory
        self._clients_factory = clients_factory
        self._sns_client_factory = sns_client_factory
        self._tasks: Dict[str, asyncio.Task] = {}

    def jobs(self) -> List[tuple[str, float, Job]]:
        tasks = self._config.scheduled_tasks
        return [
            ("delete-expired-applications", tasks.expired_applications_interval_seconds, delete_expired_applications),
            (
                "auto-reject-visit-requests",
                tasks.visit_request_auto_reject_interval_seconds,
                reject_visit_requests_in_booking_window,
            ),
        ]

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks.values())

    async def run_once(self, name: str, job: Job) -> Optional[Any]:
        """Run a job on its own session, logging any failure."""
        try:
            async with self._session_factory() as session:
                services = build_services(
                    session, self._clients_factory(), config=self._config, sns_client=self._sns_client_factory()
                )
                result = await job(services)
        except Exception as e:
            logger.error(f"Scheduled task {name} failed: {e}", exc_info=True)
            return None
        logger.debug(f"Scheduled task {name} finished: {result}")
        return result

    async def _run_periodically(self, name: str, interval: float, job: Job) -> None:
        logger.info(f"Scheduled task {name} running every {interval} seconds")
        while True:
            await asyncio.sleep(interval)
            await self.run_once(name, job)

    def start(self) -> None:
        if not self._config.scheduled_tasks.enabled:
            logger.info("Scheduled tasks are disabled")
            return
        for name, interval, job in self.jobs():
            if name not in self._tasks:
                self._tasks[name] = asyncio.create_task(self._run_periodically(name, interval, job), name=name)

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info(f"Stopped {len(tasks)} scheduled tasks")
