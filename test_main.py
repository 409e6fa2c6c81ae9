"""Tests for the main.py command line."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

import main
from core.notifications.errors import SendFailure


class TestCommandLine:
    def test_test_flag_exits_zero_on_success(self):
        with patch("main.send_test_message", new_callable=AsyncMock, return_value=True):
            assert main.main(["--test"]) == 0

    def test_test_flag_exits_non_zero_on_failure(self):
        with patch("main.send_test_message", new_callable=AsyncMock, return_value=False):
            assert main.main(["--test"]) == 1

    def test_validate_webhook_always_exits_zero(self, capsys):
        with patch("main.send_test_message", new_callable=AsyncMock, return_value=False):
            assert main.main(["--validate-webhook"]) == 0

        assert "Webhook validation failed" in capsys.readouterr().out

    def test_refresh_calls_running_server(self):
        with (
            patch("main.request_refresh", new_callable=AsyncMock, return_value=True) as mock_refresh,
            patch.dict("os.environ", {"API_URL": "http://localhost:4000/"}),
        ):
            assert main.main(["--refresh"]) == 0

        mock_refresh.assert_awaited_once_with("http://localhost:4000")

    def test_default_runs_server_on_port(self):
        with patch("uvicorn.run") as mock_run:
            assert main.main(["--port", "8123"]) == 0

        mock_run.assert_called_once_with(main.app, host="0.0.0.0", port=8123)


class TestSendTestMessage:
    @pytest.mark.asyncio
    async def test_returns_true_when_test_message_succeeds(self):
        scheduler = MagicMock()
        scheduler.send_test_message = AsyncMock()

        with patch("main.create_notification_scheduler", return_value=scheduler):
            assert await main.send_test_message() is True

    @pytest.mark.asyncio
    async def test_returns_false_when_test_message_fails(self):
        scheduler = MagicMock()
        scheduler.send_test_message = AsyncMock(side_effect=SendFailure("HTTP 403"))

        with patch("main.create_notification_scheduler", return_value=scheduler):
            assert await main.send_test_message() is False

    @pytest.mark.asyncio
    async def test_returns_false_without_webhook_url(self):
        with patch(
            "main.create_notification_scheduler",
            side_effect=ValueError("SLACK_WEBHOOK_URL environment variable must be set"),
        ):
            assert await main.send_test_message() is False


class TestRequestRefresh:
    @pytest.mark.asyncio
    async def test_unreachable_server_returns_false(self):
        mock_client = MagicMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client.post = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with patch("main.httpx.AsyncClient", return_value=mock_client):
            assert await main.request_refresh("http://localhost:3000") is False

    @pytest.mark.asyncio
    async def test_server_error_returns_false(self):
        response = httpx.Response(
            500, json={"success": False, "error": "Scheduler refresh failed: boom"}
        )
        mock_client = MagicMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client.post = AsyncMock(return_value=response)

        with patch("main.httpx.AsyncClient", return_value=mock_client):
            assert await main.request_refresh("http://localhost:3000") is False

    @pytest.mark.asyncio
    async def test_success_returns_true(self):
        response = httpx.Response(200, json={"success": True, "count": 4})
        mock_client = MagicMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client.post = AsyncMock(return_value=response)

        with patch("main.httpx.AsyncClient", return_value=mock_client):
            assert await main.request_refresh("http://localhost:3000") is True

        mock_client.post.assert_awaited_once_with("http://localhost:3000/api/scheduler/refresh")
