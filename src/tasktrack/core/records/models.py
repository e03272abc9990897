"""
Pydantic models for users, projects and tasks.

Create/Update models validate request bodies; the plain models are what the
service layer returns and what the API serializes. User models never carry
the password hash.

Task JSON uses the camelCase key ``projectId`` that existing clients send;
Python code uses ``project_id``.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(str, Enum):
    """Allowed task statuses. There is no automatic transition between them."""

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


def _normalize_deadline(v: object) -> str | None:
    if v is None:
        return None
    if isinstance(v, date):
        return v.isoformat()
    text = str(v).strip()
    if not text:
        return None
    # Stored in canonical ISO form so the first ten characters are the due date
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).isoformat()
    except ValueError as e:
        raise ValueError(f"deadline must be an ISO date or datetime, got {text!r}") from e


def _normalize_tags(v: object) -> list[str]:
    if v is None:
        return []
    if isinstance(v, str):
        items = v.split(",")
    elif isinstance(v, (list, tuple)):
        items = [str(item) for item in v]
    else:
        raise ValueError("tags must be a list of strings")
    return [item.strip() for item in items if item.strip()]


# ==============================================================================
# Users
# ==============================================================================


class User(BaseModel):
    """A user as returned by the API (no password hash)."""

    id: str
    name: str
    email: str
    role: str
    status: str = "active"


class UserCreate(BaseModel):
    """Request body for POST /api/users."""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    status: str | None = None


class UserUpdate(BaseModel):
    """Request body for PUT /api/users/{id}. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=1)
    password: str | None = None
    role: str | None = Field(default=None, min_length=1)
    status: str | None = None


class LoginRequest(BaseModel):
    """Request body for POST /api/login."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


# ==============================================================================
# Projects
# ==============================================================================


class Project(BaseModel):
    id: str
    name: str
    description: str = ""


class ProjectCreate(BaseModel):
    """Request body for POST /api/projects."""

    name: str = Field(..., min_length=1)
    description: str | None = ""


class ProjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None


# ==============================================================================
# Tasks
# ==============================================================================


class Task(BaseModel):
    """
    A task as returned by the API.

    Example:
        >>> task = Task(id="t1", projectId="p1", title="Ship", status="To Do")
        >>> task.model_dump(by_alias=True)["projectId"]
        'p1'
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str
    project_id: str = Field(..., alias="projectId")
    title: str
    description: str = ""
    status: TaskStatus
    deadline: str | None = None
    tags: list[str] = Field(default_factory=list)
    completed: bool = False
    comments: str = ""


class TaskCreate(BaseModel):
    """Request body for POST /api/tasks."""

    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(..., alias="projectId", min_length=1)
    title: str = Field(..., min_length=1)
    status: TaskStatus
    description: str | None = ""
    deadline: str | None = None
    tags: list[str] = Field(default_factory=list)
    completed: bool = False
    comments: str | None = ""

    normalize_deadline = field_validator("deadline", mode="before")(_normalize_deadline)
    normalize_tags = field_validator("tags", mode="before")(_normalize_tags)


class TaskUpdate(BaseModel):
    """Request body for PUT /api/tasks/{id}. Omitted fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    project_id: str | None = Field(default=None, alias="projectId", min_length=1)
    title: str | None = Field(default=None, min_length=1)
    status: TaskStatus | None = None
    description: str | None = None
    deadline: str | None = None
    tags: list[str] | None = None
    completed: bool | None = None
    comments: str | None = None

    normalize_deadline = field_validator("deadline", mode="before")(_normalize_deadline)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: object) -> list[str] | None:
        if v is None:
            return None
        return _normalize_tags(v)


class DeleteResult(BaseModel):
    """Confirmation body for DELETE endpoints."""

    message: str
    id: str
