"""Unit tests for the request timing middleware."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request
from starlette.responses import Response

from visit_scheduler.server.middleware import LogfireMiddleware


@pytest.fixture
def mock_request():
    request = AsyncMock(spec=Request)
    request.method = "PUT"
    request.url.path = "/v1/visits/ab-cd-ef-gh/cancel"
    request.state = MagicMock()
    return request


class TestLogfireMiddlewareDispatch:
    async def test_successful_request(self, mock_request):
        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("visit_scheduler.server.middleware.logfire_middleware.log_api_request") as mock_log:
            response = await middleware.dispatch(mock_request, call_next)

        assert response.status_code == 200
        assert float(response.headers["X-Process-Time"]) >= 0
        mock_log.assert_called_once()
        assert mock_log.call_args[1]["method"] == "PUT"
        assert mock_log.call_args[1]["path"] == "/v1/visits/ab-cd-ef-gh/cancel"
        assert mock_log.call_args[1]["status_code"] == 200

    async def test_failed_request_is_logged_and_reraised(self, mock_request):
        async def call_next(request):
            raise RuntimeError("boom")

        middleware = LogfireMiddleware(app=AsyncMock())

        with (
            patch("visit_scheduler.server.middleware.logfire_middleware.log_api_request") as mock_log,
            patch("visit_scheduler.server.middleware.logfire_middleware.logger") as mock_logger,
        ):
            with pytest.raises(RuntimeError):
                await middleware.dispatch(mock_request, call_next)

        assert mock_log.call_args[1]["status_code"] == 500
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args[1]["extra"]["error"] == "boom"

    async def test_slow_request_warning(self, mock_request):
        async def call_next(request):
            return Response(content="ok", status_code=201)

        middleware = LogfireMiddleware(app=AsyncMock())

        with (
            patch("visit_scheduler.server.middleware.logfire_middleware.log_api_request"),
            patch("visit_scheduler.server.middleware.logfire_middleware.logger") as mock_logger,
            patch("visit_scheduler.server.middleware.logfire_middleware.time.time", side_effect=[0.0, 2.5]),
        ):
            response = await middleware.dispatch(mock_request, call_next)

        assert response.headers["X-Process-Time"] == "2500.0"
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args[1]["extra"]["status_code"] == 201
