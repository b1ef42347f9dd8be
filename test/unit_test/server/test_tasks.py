"""Tests for the scheduled housekeeping tasks."""

import asyncio
import logging
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from visit_scheduler.core.database import create_sessionmaker
from visit_scheduler.core.models.domain import Contact, Visitor, VisitRestriction
from visit_scheduler.core.models.io import CreateApplication
from visit_scheduler.server.core.config import Settings
from visit_scheduler.server.tasks import (
    ScheduledTaskRunner,
    delete_expired_applications,
    reject_visit_requests_in_booking_window,
)
from visit_scheduler.services import Services


@pytest.fixture
def runner(in_memory_engine, api_clients, sns_client, test_settings) -> ScheduledTaskRunner:
    return ScheduledTaskRunner(
        test_settings,
        session_factory=create_sessionmaker(in_memory_engine),
        clients_factory=lambda: api_clients,
        sns_client_factory=lambda: sns_client,
    )


class TestRunOnce:
    async def test_deletes_expired_applications(self, runner, services, repos, make_prison, make_template, today, now):
        template = await make_template(await make_prison("HEI"))
        application = await services.applications.create_initial_application(
            CreateApplication(
                prisoner_id="A1234AA",
                session_template_reference=template.reference,
                session_date=today + timedelta(days=7),
                application_restriction=VisitRestriction.OPEN,
                visit_contact=Contact(name="Jane Smith"),
                visitors=[Visitor(nomis_person_id=4729510)],
                actioned_by="user1",
            )
        )
        row = await repos.applications.get_by_reference(application.reference)
        row.modify_timestamp = now - timedelta(hours=1)
        await repos.applications.update(row)

        assert await runner.run_once("delete-expired-applications", delete_expired_applications) == 1
        assert await repos.applications.get_by_reference(application.reference) is None

    async def test_auto_reject_without_requests(self, runner, make_prison):
        await make_prison("HEI")

        assert await runner.run_once("auto-reject-visit-requests", reject_visit_requests_in_booking_window) == 0

    async def test_job_gets_services(self, runner):
        job = AsyncMock(return_value="done")

        assert await runner.run_once("job", job) == "done"
        assert isinstance(job.await_args.args[0], Services)

    async def test_failure_is_logged(self, runner, caplog):
        job = AsyncMock(side_effect=RuntimeError("database down"))

        with caplog.at_level(logging.ERROR):
            assert await runner.run_once("job", job) is None

        assert "Scheduled task job failed: database down" in caplog.text


class TestSchedule:
    def test_jobs(self, runner):
        assert [name for name, _, _ in runner.jobs()] == [
            "delete-expired-applications",
            "auto-reject-visit-requests",
        ]
        assert [interval for _, interval, _ in runner.jobs()] == [300, 3600]

    async def test_start_and_stop(self, runner):
        runner.start()
        assert runner.running

        await runner.stop()
        assert not runner.running

    async def test_disabled(self, in_memory_engine, api_clients):
        runner = ScheduledTaskRunner(
            Settings(SCHEDULED_TASKS_ENABLED=False),
            session_factory=create_sessionmaker(in_memory_engine),
            clients_factory=lambda: api_clients,
            sns_client_factory=lambda: None,
        )

        runner.start()

        assert not runner.running

    async def test_runs_jobs_every_interval(self, in_memory_engine, api_clients):
        runner = ScheduledTaskRunner(
            Settings(EXPIRED_APPLICATIONS_TASK_INTERVAL_SECONDS=0, VISIT_REQUEST_AUTO_REJECT_TASK_INTERVAL_SECONDS=0),
            session_factory=create_sessionmaker(in_memory_engine),
            clients_factory=lambda: api_clients,
            sns_client_factory=lambda: None,
        )

        with patch.object(runner, "run_once", AsyncMock()) as run_once:
            runner.start()
            await asyncio.sleep(0.05)
            await runner.stop()

        names = {c.args[0] for c in run_once.await_args_list}
        assert names == {"delete-expired-applications", "auto-reject-visit-requests"}
