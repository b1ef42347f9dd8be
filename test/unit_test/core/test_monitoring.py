"""Tests for the telemetry helpers."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from visit_scheduler.core import monitoring


@pytest.fixture
def logfire_ready(monkeypatch):
    monkeypatch.setattr(monitoring, "_logfire_ready", True)
    fake_logfire = MagicMock()
    with patch.dict("sys.modules", {"logfire": fake_logfire}):
        yield fake_logfire


class TestTrackEvent:
    def test_logs_event_without_none_values(self, caplog):
        with caplog.at_level(logging.INFO, logger="visit_scheduler.core.monitoring"):
            monitoring.track_event("visit-booked", {"reference": "ab-cd-ef-gh", "text": None, "visitors": 2})

        assert "Telemetry event visit-booked: {'reference': 'ab-cd-ef-gh', 'visitors': '2'}" in caplog.text

    def test_sent_to_logfire_when_ready(self, logfire_ready):
        monitoring.track_event("visit-cancelled", {"reference": "ab-cd-ef-gh"})

        logfire_ready.info.assert_called_once_with("visit-cancelled", reference="ab-cd-ef-gh")

    def test_logfire_failure_is_not_raised(self, logfire_ready):
        logfire_ready.info.side_effect = RuntimeError("exporter down")

        monitoring.track_event("visit-cancelled")


class TestLogApiRequest:
    def test_noop_when_disabled(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_logfire_ready", False)
        fake_logfire = MagicMock()

        with patch.dict("sys.modules", {"logfire": fake_logfire}):
            monitoring.log_api_request("GET", "/health", 200, 1.5)

        fake_logfire.info.assert_not_called()

    def test_sent_when_ready(self, logfire_ready):
        monitoring.log_api_request("GET", "/health", 200, 1.5)

        logfire_ready.info.assert_called_once_with(
            "API request completed", method="GET", path="/health", status_code=200, duration_ms=1.5
        )


class TestLogError:
    def test_sent_when_ready(self, logfire_ready):
        monitoring.log_error("RuntimeError", "boom", {"error_id": 1})

        logfire_ready.error.assert_called_once_with("RuntimeError: boom", error_id=1)


class TestInitializeLogfire:
    def test_disabled(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", False)
        monkeypatch.setattr(monitoring, "_logfire_ready", False)

        monitoring.initialize_logfire()

        assert monitoring._logfire_ready is False

    def test_missing_token(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "")
        monkeypatch.setattr(monitoring, "_logfire_ready", False)

        monitoring.initialize_logfire()

        assert monitoring._logfire_ready is False

    def test_configured_with_instrumentation(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "token")
        monkeypatch.setattr(monitoring, "LOGFIRE_TRACE_FASTAPI", True)
        monkeypatch.setattr(monitoring, "_logfire_ready", False)
        fake_logfire = MagicMock()
        app = MagicMock()

        with patch.dict("sys.modules", {"logfire": fake_logfire}):
            monitoring.initialize_logfire(app)

        assert monitoring._logfire_ready is True
        fake_logfire.configure.assert_called_once()
        assert fake_logfire.configure.call_args[1]["token"] == "token"
        fake_logfire.instrument_fastapi.assert_called_once_with(app=app)
