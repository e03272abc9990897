"""
Pytest configuration and shared fixtures for tasktrack tests.
"""

import sqlite3
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from tasktrack.api.app import create_app
from tasktrack.core.config import clear_cache
from tasktrack.core.config.models import (
    DatabaseConfig,
    MailConfig,
    ReminderConfig,
    TrackerConfig,
)
from tasktrack.core.db.connection import get_connection, init_db
from tasktrack.core.exceptions import DeliveryError
from tasktrack.core.records.models import Project, Task
from tasktrack.core.records.store import RecordStore
from tasktrack.core.reminders.models import Digest

UTC = ZoneInfo("UTC")

# 20:45 UTC on March 10th: the default send time, so "tomorrow" is March 11th
REFERENCE_NOW = datetime(2025, 3, 10, 20, 45, tzinfo=UTC)

_ENV_VARS = (
    "TASKTRACK_DB",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "SMTP_FROM",
    "SMTP_SECURE",
    "REMINDER_EMAIL",
    "REMINDER_TIME",
    "TIMEZONE",
    "TASKTRACK_SCHEDULER",
)


@dataclass
class RecordingTransport:
    """
    MailTransport that keeps every (digest, recipient) pair instead of sending.

    Set ``fail`` to make every send raise DeliveryError.
    """

    sent: list[tuple[Digest, str]] = field(default_factory=list)
    fail: bool = False

    def send(self, digest: Digest, recipient: str) -> None:
        if self.fail:
            raise DeliveryError("connection refused", recipient=recipient)
        self.sent.append((digest, recipient))


# ==============================================================================
# Environment isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep the developer's shell env and config files out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Database fixtures
# ==============================================================================


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """An initialized, empty tracker database."""
    path = tmp_path / "tasktrack.db"
    init_db(path).close()
    return path


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    with get_connection(db_path) as connection:
        yield connection


@pytest.fixture
def store(conn: sqlite3.Connection) -> RecordStore:
    return RecordStore(conn)


@pytest.fixture
def make_task(store: RecordStore):
    """Insert a task (and its project, unless it already exists)."""

    def _make(
        task_id: str,
        title: str,
        deadline: str | None,
        *,
        project_id: str = "p1",
        project_name: str = "Launch",
        description: str = "",
        status: str = "To Do",
    ) -> Task:
        if not store.project_exists(project_id):
            store.insert_project(Project(id=project_id, name=project_name))
        task = Task(
            id=task_id,
            project_id=project_id,
            title=title,
            description=description,
            status=status,
            deadline=deadline,
        )
        store.insert_task(task)
        return task

    return _make


# ==============================================================================
# Configuration and API fixtures
# ==============================================================================


@pytest.fixture
def config(db_path: Path) -> TrackerConfig:
    return TrackerConfig(
        database=DatabaseConfig(path=str(db_path)),
        mail=MailConfig(host="smtp.example.com", user="bot@example.com"),
        reminder=ReminderConfig(recipient="team@example.com", enabled=False),
    )


@pytest.fixture
def reference_now() -> datetime:
    return REFERENCE_NOW


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def app(config: TrackerConfig, transport: RecordingTransport):
    application = create_app(config, transport=transport, start_scheduler=False)
    application.state.reminder_job.clock = lambda tz: REFERENCE_NOW.astimezone(tz)
    return application


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
