"""
Users, projects and tasks: models, storage adapter and CRUD services.
"""

from tasktrack.core.records.models import (
    DeleteResult,
    LoginRequest,
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
from tasktrack.core.records.service import ProjectService, TaskService, UserService
from tasktrack.core.records.store import RecordStore

__all__ = [
    "DeleteResult",
    "LoginRequest",
    "Project",
    "ProjectCreate",
    "ProjectService",
    "ProjectUpdate",
    "RecordStore",
    "Task",
    "TaskCreate",
    "TaskService",
    "TaskStatus",
    "TaskUpdate",
    "User",
    "UserCreate",
    "UserService",
    "UserUpdate",
]
