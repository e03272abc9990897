"""
CRUD services for users, projects and tasks.

Each service validates its input before touching the store, so a rejected
request never performs a partial write. Updates are merges: fields the
caller did not send keep their stored values.
"""

import logging
import uuid
from typing import Any

from tasktrack.core.auth.passwords import hash_password
from tasktrack.core.exceptions import (
    DuplicateKeyError,
    RecordNotFoundError,
    RecordValidationError,
)
from tasktrack.core.records.models import (
    DeleteResult,
    Project,
    ProjectCreate,
    ProjectUpdate,
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    User,
    UserCreate,
    UserUpdate,
)
from tasktrack.core.records.store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_USER_STATUS = "active"


def new_id() -> str:
    return str(uuid.uuid4())


def _require_status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError as e:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise RecordValidationError(
            f"Invalid task status: {value}. Must be one of: {allowed}", field="status"
        ) from e


class UserService:
    """Create, list, update and delete users. Password hashes never leave this layer."""

    def __init__(self, store: RecordStore):
        self.store = store

    def create(self, data: UserCreate) -> User:
        if self.store.email_taken(data.email):
            raise DuplicateKeyError("user", "email", "Email already exists")

        user = User(
            id=new_id(),
            name=data.name,
            email=data.email,
            role=data.role,
            status=data.status or DEFAULT_USER_STATUS,
        )
        self.store.insert_user(user, hash_password(data.password))
        logger.info("Created user %s", user.id)
        return user

    def list_all(self) -> list[User]:
        return self.store.list_users()

    def get(self, user_id: str) -> User:
        user = self.store.get_user(user_id)
        if user is None:
            raise RecordNotFoundError("user", user_id)
        return user

    def update(self, user_id: str, data: UserUpdate) -> User:
        self.get(user_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        if "email" in changes and self.store.email_taken(changes["email"], exclude_id=user_id):
            raise DuplicateKeyError("user", "email", "Email already exists")

        password = changes.pop("password", None)
        if password:
            changes["password"] = hash_password(password)

        if not self.store.update_user(user_id, changes):
            raise RecordNotFoundError("user", user_id)
        return self.get(user_id)

    def delete(self, user_id: str) -> DeleteResult:
        if not self.store.delete_user(user_id):
            raise RecordNotFoundError("user", user_id)
        logger.info("Deleted user %s", user_id)
        return DeleteResult(message="User deleted", id=user_id)


class ProjectService:
    """CRUD for projects. Deleting a project deletes its tasks (store cascade)."""

    def __init__(self, store: RecordStore):
        self.store = store

    def create(self, data: ProjectCreate) -> Project:
        if not data.name.strip():
            raise RecordValidationError("Project name is required", field="name")
        project = Project(id=new_id(), name=data.name, description=data.description or "")
        self.store.insert_project(project)
        return project

    def list_all(self) -> list[Project]:
        return self.store.list_projects()

    def get(self, project_id: str) -> Project:
        project = self.store.get_project(project_id)
        if project is None:
            raise RecordNotFoundError("project", project_id)
        return project

    def update(self, project_id: str, data: ProjectUpdate) -> Project:
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and not (changes["name"] or "").strip():
            raise RecordValidationError("Project name is required", field="name")
        if "description" in changes and changes["description"] is None:
            changes["description"] = ""
        changes = {k: v for k, v in changes.items() if v is not None}

        if not self.store.update_project(project_id, changes):
            raise RecordNotFoundError("project", project_id)
        return self.get(project_id)

    def delete(self, project_id: str) -> DeleteResult:
        if not self.store.delete_project(project_id):
            raise RecordNotFoundError("project", project_id)
        logger.info("Deleted project %s and its tasks", project_id)
        return DeleteResult(message="Project deleted", id=project_id)


def _require_title(title: str) -> None:
    if not title.strip():
        raise RecordValidationError("Task title is required", field="title")


class TaskService:
    """
    CRUD for tasks.

    The owning project must exist and the status must be one of TaskStatus
    before anything is written.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def _require_project(self, project_id: str) -> None:
        if not self.store.project_exists(project_id):
            raise RecordValidationError(f"Project not found: {project_id}", field="projectId")

    def create(self, data: TaskCreate) -> Task:
        _require_title(data.title)
        status = _require_status(data.status)
        self._require_project(data.project_id)

        task = Task(
            id=new_id(),
            project_id=data.project_id,
            title=data.title,
            description=data.description or "",
            status=status,
            deadline=data.deadline,
            tags=data.tags,
            completed=data.completed,
            comments=data.comments or "",
        )
        self.store.insert_task(task)
        return task

    def list_all(self, project_id: str | None = None) -> list[Task]:
        return self.store.list_tasks(project_id)

    def get(self, task_id: str) -> Task:
        task = self.store.get_task(task_id)
        if task is None:
            raise RecordNotFoundError("task", task_id)
        return task

    def update(self, task_id: str, data: TaskUpdate) -> Task:
        current = self.get(task_id)
        changes = data.model_dump(exclude_unset=True)

        # Required columns can't be cleared
        for required in ("project_id", "title", "status", "completed"):
            if changes.get(required, ...) is None:
                changes.pop(required)
        for text_field in ("description", "comments"):
            if text_field in changes and changes[text_field] is None:
                changes[text_field] = ""
        if "tags" in changes and changes["tags"] is None:
            changes["tags"] = []

        if "title" in changes:
            _require_title(changes["title"])
        if "status" in changes:
            changes["status"] = _require_status(changes["status"]).value
        if "project_id" in changes and changes["project_id"] != current.project_id:
            self._require_project(changes["project_id"])

        updated = current.model_copy(update=changes)
        if not self.store.replace_task(updated):
            raise RecordNotFoundError("task", task_id)
        return self.get(task_id)

    def delete(self, task_id: str) -> DeleteResult:
        if not self.store.delete_task(task_id):
            raise RecordNotFoundError("task", task_id)
        return DeleteResult(message="Task deleted", id=task_id)
