"""
FastAPI dependencies.

Each request gets its own SQLite connection; services are built on top of
it. The reminder job is created once per app and shared.
"""

import sqlite3
from collections.abc import Iterator
from pathlib import Path

from fastapi import Depends, Request

from tasktrack.core.auth.service import AuthService
from tasktrack.core.db.connection import get_connection
from tasktrack.core.records.service import ProjectService, TaskService, UserService
from tasktrack.core.records.store import RecordStore
from tasktrack.core.reminders.job import ReminderJob


def get_db_path(request: Request) -> Path:
    return request.app.state.db_path  # type: ignore[no-any-return]


def get_db(db_path: Path = Depends(get_db_path)) -> Iterator[sqlite3.Connection]:
    with get_connection(db_path) as conn:
        yield conn


def get_store(conn: sqlite3.Connection = Depends(get_db)) -> RecordStore:
    return RecordStore(conn)


def get_user_service(store: RecordStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_project_service(store: RecordStore = Depends(get_store)) -> ProjectService:
    return ProjectService(store)


def get_task_service(store: RecordStore = Depends(get_store)) -> TaskService:
    return TaskService(store)


def get_auth_service(store: RecordStore = Depends(get_store)) -> AuthService:
    return AuthService(store)


def get_reminder_job(request: Request) -> ReminderJob:
    return request.app.state.reminder_job  # type: ignore[no-any-return]
