# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

The app is used without its lifespan: no database and no real scheduler.
Each test gets a mocked NotificationScheduler on app.state and a mocked
connection behind get_connection/get_transaction.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Ensure we import from root main.py
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from core.notifications.scheduler import EngineState
from main import app


@pytest.fixture
def mock_scheduler():
    scheduler = MagicMock()
    scheduler.rearm_all = AsyncMock(return_value=3)
    scheduler.send_test_message = AsyncMock()
    scheduler.count.return_value = 3
    scheduler.list_jobs.return_value = ["notification_1", "notification_2", "notification_3"]
    scheduler.state = EngineState.armed
    return scheduler


@pytest.fixture
def client(mock_scheduler):
    app.state.scheduler = mock_scheduler
    yield TestClient(app)
    del app.state.scheduler


@pytest.fixture
def mock_conn():
    """Connection handed out by both get_connection and get_transaction."""
    conn = AsyncMock()
    with (
        patch("web_api.routes.notifications.get_connection") as mock_conn_ctx,
        patch("web_api.routes.notifications.get_transaction") as mock_tx_ctx,
    ):
        mock_conn_ctx.return_value.__aenter__ = AsyncMock(return_value=conn)
        mock_conn_ctx.return_value.__aexit__ = AsyncMock(return_value=False)
        mock_tx_ctx.return_value.__aenter__ = AsyncMock(return_value=conn)
        mock_tx_ctx.return_value.__aexit__ = AsyncMock(return_value=False)
        yield conn
