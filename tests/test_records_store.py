"""
Tests for the SQLite record store and schema.

Tests validate:
- Tag (de)serialization, including legacy comma-joined rows
- Schema creation and version tracking
- Storage-level constraints (unique email, status check, cascade)
- sqlite3 errors translated into tracker exceptions
"""

import sqlite3
from datetime import date
from pathlib import Path

import pytest

from tasktrack.core.db.connection import get_connection, init_db
from tasktrack.core.db.schema import (
    SCHEMA_VERSION,
    create_schema,
    get_schema_version,
    needs_migration,
)
from tasktrack.core.exceptions import DuplicateKeyError, StorageError
from tasktrack.core.records.models import Project, Task, User
from tasktrack.core.records.store import RecordStore, deserialize_tags, serialize_tags


class TestTagSerialization:
    def test_json_list(self) -> None:
        assert serialize_tags(["ui", "backend"]) == '["ui", "backend"]'
        assert deserialize_tags('["ui", "backend"]') == ["ui", "backend"]

    def test_legacy_comma_text(self) -> None:
        assert deserialize_tags("ui, backend,") == ["ui", "backend"]

    def test_empty(self) -> None:
        assert deserialize_tags(None) == []
        assert deserialize_tags("") == []
        assert deserialize_tags("[]") == []


class TestSchema:
    def test_fresh_connection_needs_schema(self) -> None:
        conn = sqlite3.connect(":memory:")
        assert needs_migration(conn)
        assert get_schema_version(conn) is None

        create_schema(conn)

        assert get_schema_version(conn) == SCHEMA_VERSION
        assert not needs_migration(conn)

    def test_create_schema_is_idempotent(self) -> None:
        conn = sqlite3.connect(":memory:")
        create_schema(conn)
        create_schema(conn)
        tables = {
            row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        assert {"users", "projects", "tasks", "schema_info"} <= tables

    def test_init_db_force_recreate(self, tmp_path: Path) -> None:
        path = tmp_path / "t.db"
        conn = init_db(path)
        conn.execute("INSERT INTO projects (id, name) VALUES ('p1', 'Launch')")
        conn.commit()
        conn.close()

        conn = init_db(path, force_recreate=True)
        try:
            assert conn.execute("SELECT COUNT(*) AS n FROM projects").fetchone()["n"] == 0
        finally:
            conn.close()

    def test_get_connection_creates_missing_db(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "new.db"
        with get_connection(path) as conn:
            assert RecordStore(conn).list_projects() == []
        assert path.exists()


class TestRecordStore:
    def test_unique_email_enforced(self, store: RecordStore) -> None:
        store.insert_user(User(id="u1", name="Ada", email="a@example.com", role="admin"), "h")

        with pytest.raises(DuplicateKeyError) as exc_info:
            store.insert_user(User(id="u2", name="Bob", email="a@example.com", role="dev"), "h")

        assert exc_info.value.field == "email"
        assert [u.id for u in store.list_users()] == ["u1"]

    def test_status_check_constraint(self, store: RecordStore, conn: sqlite3.Connection) -> None:
        store.insert_project(Project(id="p1", name="Launch"))
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO tasks (id, project_id, title, status) "
                "VALUES ('t1', 'p1', 'x', 'Blocked')"
            )

    def test_foreign_key_enforced(self, store: RecordStore) -> None:
        task = Task(id="t1", project_id="missing", title="Ship", status="To Do")
        with pytest.raises(StorageError):
            store.insert_task(task)

    def test_cascade_delete(self, store: RecordStore) -> None:
        store.insert_project(Project(id="p1", name="Launch"))
        store.insert_task(Task(id="t1", project_id="p1", title="Ship", status="To Do"))

        assert store.delete_project("p1") is True
        assert store.get_task("t1") is None

    def test_reads_legacy_tag_rows(self, store: RecordStore, conn: sqlite3.Connection) -> None:
        store.insert_project(Project(id="p1", name="Launch"))
        conn.execute(
            "INSERT INTO tasks (id, project_id, title, status, tags) "
            "VALUES ('t1', 'p1', 'Ship', 'To Do', 'ui,backend')"
        )
        conn.commit()

        assert store.get_task("t1").tags == ["ui", "backend"]

    def test_completed_stored_as_integer(
        self, store: RecordStore, conn: sqlite3.Connection
    ) -> None:
        store.insert_project(Project(id="p1", name="Launch"))
        store.insert_task(
            Task(id="t1", project_id="p1", title="Ship", status="Done", completed=True)
        )

        row = conn.execute("SELECT completed FROM tasks WHERE id = 't1'").fetchone()

        assert row["completed"] == 1
        assert store.get_task("t1").completed is True

    def test_update_missing_row_returns_false(self, store: RecordStore) -> None:
        assert store.update_project("missing", {"name": "X"}) is False
        assert store.delete_task("missing") is False

    def test_tasks_due_on_orders_by_deadline(self, store: RecordStore) -> None:
        store.insert_project(Project(id="p1", name="Launch"))
        store.insert_task(
            Task(id="t1", project_id="p1", title="B", status="To Do", deadline="2025-03-11T15:00")
        )
        store.insert_task(
            Task(id="t2", project_id="p1", title="A", status="To Do", deadline="2025-03-11T09:00")
        )

        rows = store.tasks_due_on(date(2025, 3, 11))

        assert [r["title"] for r in rows] == ["A", "B"]
        assert set(rows[0]) == {"title", "description", "status", "deadline", "project_name"}
