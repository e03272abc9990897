"""
Storage adapter for users, projects and tasks.

Bridges raw SQLite rows and the Pydantic record models. This is the only
place that knows how tasks are flattened for storage:
- tags are stored as a JSON array (legacy comma-joined text is still read)
- completed is stored as INTEGER 0/1

sqlite3 errors are translated into tracker exceptions: UNIQUE violations
become DuplicateKeyError, everything else becomes StorageError.
"""

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

from tasktrack.core.db.connection import execute_one, execute_query
from tasktrack.core.exceptions import DuplicateKeyError, StorageError
from tasktrack.core.records.models import Project, Task, User

logger = logging.getLogger(__name__)

USER_COLUMNS = ("id", "name", "email", "role", "status")
PROJECT_COLUMNS = ("id", "name", "description")
TASK_COLUMNS = (
    "id",
    "project_id",
    "title",
    "description",
    "status",
    "deadline",
    "tags",
    "completed",
    "comments",
)


def serialize_tags(tags: list[str]) -> str:
    """Flatten a tag list for storage."""
    return json.dumps(list(tags))


def deserialize_tags(raw: str | None) -> list[str]:
    """
    Rebuild a tag list from its stored form.

    Example:
        >>> deserialize_tags('["ui", "backend"]')
        ['ui', 'backend']
        >>> deserialize_tags("ui, backend")
        ['ui', 'backend']
        >>> deserialize_tags(None)
        []
    """
    if not raw:
        return []
    text = raw.strip()
    if text.startswith("["):
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, list):
            return [str(item) for item in data]
    # Legacy rows hold comma-joined text
    return [item.strip() for item in text.split(",") if item.strip()]


def row_to_user(row: dict[str, Any]) -> User:
    return User(**{col: row[col] for col in USER_COLUMNS})


def row_to_project(row: dict[str, Any]) -> Project:
    return Project(id=row["id"], name=row["name"], description=row.get("description") or "")


def row_to_task(row: dict[str, Any]) -> Task:
    """Convert a database row to a Task, undoing the storage flattening."""
    return Task(
        id=row["id"],
        project_id=row["project_id"],
        title=row["title"],
        description=row.get("description") or "",
        status=row["status"],
        deadline=row.get("deadline") or None,
        tags=deserialize_tags(row.get("tags")),
        completed=bool(row.get("completed")),
        comments=row.get("comments") or "",
    )


def task_to_row(task: Task) -> dict[str, Any]:
    """Flatten a Task for storage."""
    return {
        "id": task.id,
        "project_id": task.project_id,
        "title": task.title,
        "description": task.description,
        "status": task.status,
        "deadline": task.deadline,
        "tags": serialize_tags(task.tags),
        "completed": 1 if task.completed else 0,
        "comments": task.comments,
    }


class RecordStore:
    """
    Table-level access to the tracker database.

    Every write commits immediately; SQLite serializes concurrent writers.

    Example:
        with get_connection(db_path) as conn:
            store = RecordStore(conn)
            store.insert_project(Project(id="p1", name="Launch"))
            tasks = store.list_tasks()
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    @contextmanager
    def _translate_errors(self, entity: str, action: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            message = str(e)
            if "UNIQUE constraint failed" in message:
                field = message.rsplit(".", 1)[-1].strip()
                raise DuplicateKeyError(entity, field) from e
            logger.error("Integrity error during %s %s: %s", action, entity, message)
            raise StorageError(f"Database constraint failed: {message}") from e
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error("Database error during %s %s: %s", action, entity, e)
            raise StorageError(f"Database operation failed: {e}") from e

    def _insert(self, table: str, entity: str, row: dict[str, Any]) -> None:
        columns = list(row)
        placeholders = ",".join("?" * len(columns))
        query = f"INSERT INTO {table} ({','.join(columns)}) VALUES ({placeholders})"
        with self._translate_errors(entity, "insert"):
            self.conn.execute(query, tuple(row[c] for c in columns))
            self.conn.commit()

    def _update(self, table: str, entity: str, record_id: str, fields: dict[str, Any]) -> bool:
        if not fields:
            return self._exists(table, record_id)
        assignments = ", ".join(f"{col} = ?" for col in fields)
        query = f"UPDATE {table} SET {assignments} WHERE id = ?"
        with self._translate_errors(entity, "update"):
            cursor = self.conn.execute(query, (*fields.values(), record_id))
            self.conn.commit()
        return cursor.rowcount > 0

    def _delete(self, table: str, entity: str, record_id: str) -> bool:
        with self._translate_errors(entity, "delete"):
            cursor = self.conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            self.conn.commit()
        return cursor.rowcount > 0

    def _exists(self, table: str, record_id: str) -> bool:
        with self._translate_errors(table, "lookup"):
            row = execute_one(self.conn, f"SELECT id FROM {table} WHERE id = ?", (record_id,))
        return row is not None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def insert_user(self, user: User, password_hash: str) -> None:
        row = user.model_dump()
        row["password"] = password_hash
        self._insert("users", "user", row)

    def list_users(self) -> list[User]:
        with self._translate_errors("user", "list"):
            rows = execute_query(self.conn, f"SELECT {', '.join(USER_COLUMNS)} FROM users")
        return [row_to_user(row) for row in rows]

    def get_user(self, user_id: str) -> User | None:
        with self._translate_errors("user", "get"):
            row = execute_one(
                self.conn,
                f"SELECT {', '.join(USER_COLUMNS)} FROM users WHERE id = ?",
                (user_id,),
            )
        return row_to_user(row) if row else None

    def get_credentials(self, email: str) -> tuple[User, str] | None:
        """Fetch a user and its password hash by email, for the auth check."""
        with self._translate_errors("user", "get"):
            row = execute_one(self.conn, "SELECT * FROM users WHERE email = ?", (email,))
        if row is None:
            return None
        return row_to_user(row), row["password"]

    def email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        with self._translate_errors("user", "lookup"):
            row = execute_one(
                self.conn,
                "SELECT id FROM users WHERE email = ? AND id IS NOT ?",
                (email, exclude_id),
            )
        return row is not None

    def update_user(self, user_id: str, fields: dict[str, Any]) -> bool:
        return self._update("users", "user", user_id, fields)

    def delete_user(self, user_id: str) -> bool:
        return self._delete("users", "user", user_id)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def insert_project(self, project: Project) -> None:
        self._insert("projects", "project", project.model_dump())

    def list_projects(self) -> list[Project]:
        with self._translate_errors("project", "list"):
            rows = execute_query(self.conn, "SELECT * FROM projects")
        return [row_to_project(row) for row in rows]

    def get_project(self, project_id: str) -> Project | None:
        with self._translate_errors("project", "get"):
            row = execute_one(self.conn, "SELECT * FROM projects WHERE id = ?", (project_id,))
        return row_to_project(row) if row else None

    def project_exists(self, project_id: str) -> bool:
        return self._exists("projects", project_id)

    def update_project(self, project_id: str, fields: dict[str, Any]) -> bool:
        return self._update("projects", "project", project_id, fields)

    def delete_project(self, project_id: str) -> bool:
        """Delete a project; its tasks go with it through ON DELETE CASCADE."""
        return self._delete("projects", "project", project_id)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def insert_task(self, task: Task) -> None:
        self._insert("tasks", "task", task_to_row(task))

    def list_tasks(self, project_id: str | None = None) -> list[Task]:
        with self._translate_errors("task", "list"):
            if project_id is None:
                rows = execute_query(self.conn, "SELECT * FROM tasks")
            else:
                rows = execute_query(
                    self.conn, "SELECT * FROM tasks WHERE project_id = ?", (project_id,)
                )
        return [row_to_task(row) for row in rows]

    def get_task(self, task_id: str) -> Task | None:
        with self._translate_errors("task", "get"):
            row = execute_one(self.conn, "SELECT * FROM tasks WHERE id = ?", (task_id,))
        return row_to_task(row) if row else None

    def replace_task(self, task: Task) -> bool:
        row = task_to_row(task)
        task_id = row.pop("id")
        return self._update("tasks", "task", task_id, row)

    def delete_task(self, task_id: str) -> bool:
        return self._delete("tasks", "task", task_id)

    def tasks_due_on(self, target_date: date) -> list[dict[str, Any]]:
        """
        Tasks whose deadline falls on ``target_date``, with their project name.

        Deadlines are stored in ISO form, so the date is the first ten
        characters as written; an offset is never shifted to another day.
        LEFT JOIN so a task whose project row is gone still shows up with a
        NULL project name. Raw sqlite3 errors propagate; the reminder job
        handles them itself.
        """
        return execute_query(
            self.conn,
            """
            SELECT
                t.title,
                t.description,
                t.status,
                t.deadline,
                p.name AS project_name
            FROM tasks t
            LEFT JOIN projects p ON t.project_id = p.id
            WHERE substr(t.deadline, 1, 10) = ?
            ORDER BY t.deadline, t.title, t.id
            """,
            (target_date.isoformat(),),
        )
