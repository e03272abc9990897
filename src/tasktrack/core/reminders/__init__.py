"""
Deadline reminders: the "tasks due tomorrow" digest and its daily schedule.

Main components:
- job.py: target date, due-task query, digest rendering, dispatch
- mailer.py: SMTP transport
- scheduler.py: daily trigger thread
"""

from tasktrack.core.reminders.job import (
    ReminderJob,
    compute_target_date,
    find_due_tasks,
    now_in,
    render_digest,
)
from tasktrack.core.reminders.mailer import MailTransport, SmtpTransport
from tasktrack.core.reminders.models import Digest, DueTask, ReminderResult
from tasktrack.core.reminders.scheduler import DailyScheduler, next_run_after

__all__ = [
    "DailyScheduler",
    "Digest",
    "DueTask",
    "MailTransport",
    "ReminderJob",
    "ReminderResult",
    "SmtpTransport",
    "compute_target_date",
    "find_due_tasks",
    "next_run_after",
    "now_in",
    "render_digest",
]
