"""Shared fixtures for Google Calendar unit tests."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, create_autospec

import pytest
from google.oauth2.credentials import Credentials

from pic_schedule.models.events import ScheduledEvent


@pytest.fixture()
def mock_credentials() -> MagicMock:
    """Return a mock Credentials object that reports as valid."""
    creds = create_autospec(Credentials, instance=True)
    creds.valid = True
    creds.expired = False
    creds.refresh_token = "fake-refresh-token"
    creds.to_json.return_value = '{"token": "fake"}'
    return creds


@pytest.fixture()
def mock_expired_credentials() -> MagicMock:
    """Return a mock Credentials object that is expired but has a refresh token."""
    creds = create_autospec(Credentials, instance=True)
    creds.valid = False
    creds.expired = True
    creds.refresh_token = "fake-refresh-token"
    creds.to_json.return_value = '{"token": "refreshed"}'
    return creds


@pytest.fixture()
def tmp_credentials_file(tmp_path: Path) -> Path:
    """Write a minimal credentials.json to a temp directory and return its path."""
    creds_path = tmp_path / "credentials.json"
    creds_path.write_text('{"installed": {"client_id": "fake", "client_secret": "fake"}}')
    return creds_path


@pytest.fixture()
def tmp_token_file(tmp_path: Path) -> Path:
    """Return a path for token.json in a temp directory (file does not exist yet)."""
    return tmp_path / "token.json"


@pytest.fixture()
def timed_event() -> ScheduledEvent:
    """A one-hour event on 2025-04-10 at 14:30."""
    return ScheduledEvent(
        title="Team Sync",
        start=datetime(2025, 4, 10, 14, 30),
        end=datetime(2025, 4, 10, 15, 30),
        description="quarterly planning",
    )


@pytest.fixture()
def all_day_event() -> ScheduledEvent:
    """An all-day event on 2025-04-12."""
    return ScheduledEvent(
        title="Bake Sale",
        start=datetime(2025, 4, 12),
        end=datetime(2025, 4, 13),
        all_day=True,
    )
