"""Tests for the settings model and its grouped configuration views."""

from visit_scheduler.server.core.config import (
    ApiClientsConfig,
    DomainEventsConfig,
    MigrationConfig,
    ScheduledTasksConfig,
    Settings,
    VisitPolicyConfig,
)


class TestSettingsDefaults:
    def test_server_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.server_port == 8080
        assert settings.log_level == "INFO"
        assert settings.database.url == settings.database_url

    def test_policy_defaults(self):
        policy = Settings(_env_file=None).visit_policy

        assert policy.expired_application_minutes == 10
        assert policy.cancellation_day_limit == 28
        assert policy.request_booking_enabled is False

    def test_migration_defaults(self):
        migration = Settings(_env_file=None).migration

        assert migration == MigrationConfig()
        assert migration.max_months_in_future == 6

    def test_scheduled_tasks_defaults(self):
        tasks = Settings(_env_file=None).scheduled_tasks

        assert tasks == ScheduledTasksConfig()
        assert tasks.enabled is True
        assert tasks.expired_applications_interval_seconds == 300


class TestSettingsFromEnvironment:
    def test_grouped_views_follow_environment(self, monkeypatch):
        monkeypatch.setenv("PRISONER_SEARCH_URL", "http://prisoner-search")
        monkeypatch.setenv("API_CLIENT_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("DOMAIN_EVENTS_ENABLED", "true")
        monkeypatch.setenv("DOMAIN_EVENTS_TOPIC_ARN", "arn:aws:sns:eu-west-2:1:events")
        monkeypatch.setenv("VISIT_CANCELLATION_DAY_LIMIT", "0")
        monkeypatch.delenv("AWS_REGION", raising=False)

        settings = Settings(_env_file=None)

        assert isinstance(settings.api_clients, ApiClientsConfig)
        assert settings.api_clients.prisoner_search_url == "http://prisoner-search"
        assert settings.api_clients.timeout_seconds == 2.5
        assert settings.domain_events == DomainEventsConfig(
            enabled=True, topic_arn="arn:aws:sns:eu-west-2:1:events", region="eu-west-2"
        )
        assert settings.visit_policy.cancellation_day_limit == 0

    def test_init_by_alias(self):
        settings = Settings(_env_file=None, EXPIRED_APPLICATION_MINUTES=20, MIGRATE_MAX_PROXIMITY_MINUTES=60)

        assert settings.visit_policy == VisitPolicyConfig(expired_application_minutes=20)
        assert settings.migration.max_proximity_minutes == 60
