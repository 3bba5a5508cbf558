import os

# Settings are read at import time; give them something to read
os.environ.setdefault("POSTGRES_USER", "test")
os.environ.setdefault("POSTGRES_PASSWORD", "test")
os.environ.setdefault("SLOT_TIMEZONE", "Europe/Berlin")
os.environ.setdefault("APP_URL", "https://app.example.com")

import pytest
from unittest.mock import AsyncMock, MagicMock
from tests.helpers import make_result


@pytest.fixture
def mock_session():
    session = AsyncMock()

    # Ensure scalar_one_or_none returns a value, not a coroutine
    session.execute.side_effect = None
    session.execute.return_value = make_result()

    # Configure session.get to return None by default
    session.get.return_value = None

    # Standard methods
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()

    return session


@pytest.fixture
def mock_async_session_local(mock_session, monkeypatch):
    """Mock AsyncSessionLocal to return a mock session context manager."""
    mock_factory = MagicMock()
    mock_factory.return_value.__aenter__.return_value = mock_session

    # Patch in all modules that open their own sessions
    targets = [
        "app.api.events.AsyncSessionLocal",
        "app.api.bookings.AsyncSessionLocal",
        "app.api.groups.AsyncSessionLocal",
        "app.api.webhooks.AsyncSessionLocal",
        "app.services.reminder_service.AsyncSessionLocal",
    ]
    for target in targets:
        try:
            monkeypatch.setattr(target, mock_factory)
        except (AttributeError, ImportError):
            pass

    return mock_factory


@pytest.fixture(autouse=True)
def auto_mock_db(mock_async_session_local):
    """Automatically use mock_async_session_local for all tests."""
    return mock_async_session_local


@pytest.fixture
def mock_scheduler(monkeypatch):
    """Mock the global scheduler object in app.core.scheduler"""
    scheduler_mock = MagicMock()
    scheduler_mock.running = False
    monkeypatch.setattr("app.core.scheduler.scheduler", scheduler_mock)
    return scheduler_mock
