"""
Models for the deadline reminder digest.
"""

from datetime import date

from pydantic import BaseModel, Field


class DueTask(BaseModel):
    """A task due on the target date, joined with its project name."""

    title: str
    description: str | None = None
    status: str
    deadline: str
    project_name: str | None = Field(
        default=None, description="None when the project row no longer exists"
    )


class Digest(BaseModel):
    """A rendered digest, ready to send."""

    target_date: date
    subject: str
    html: str
    text: str
    task_count: int = Field(..., ge=1)


class ReminderResult(BaseModel):
    """
    Outcome of one reminder run.

    skipped is True when nothing was sent because no task was due or the
    query failed; delivered is True only when the transport accepted the mail.
    """

    target_date: date
    task_count: int = 0
    delivered: bool = False
    skipped: bool = False
