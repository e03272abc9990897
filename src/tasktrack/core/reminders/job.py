"""
Deadline reminder job.

One run:
1. compute the target date (the calendar date 24 hours after "now")
2. find tasks whose deadline falls on that date
3. render them into a digest (nothing due -> no digest)
4. dispatch the digest to the configured recipient

The daily scheduler and the manual trigger both call ReminderJob.run(), so
the two paths behave identically. The job never raises to its caller:
query and delivery failures are logged and reflected in the result.
"""

import html
import logging
import sqlite3
from collections.abc import Callable, Sequence
from datetime import date, datetime, timedelta, tzinfo
from pathlib import Path

from tasktrack.core.config.models import TrackerConfig
from tasktrack.core.db.connection import get_connection
from tasktrack.core.exceptions import DeliveryError, StorageError
from tasktrack.core.records.store import RecordStore
from tasktrack.core.reminders.mailer import MailTransport, SmtpTransport
from tasktrack.core.reminders.models import Digest, DueTask, ReminderResult

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"

Clock = Callable[[tzinfo], datetime]


def now_in(tz: tzinfo) -> datetime:
    """Current time in ``tz``. Shared by the job and the scheduler."""
    return datetime.now(tz)


def compute_target_date(now: datetime, tz: tzinfo) -> date:
    """
    Calendar date 24 hours after ``now``, as seen in ``tz``.

    A naive ``now`` is taken to already be in ``tz``.

    Example:
        >>> from zoneinfo import ZoneInfo
        >>> compute_target_date(datetime(2025, 3, 10, 20, 45), ZoneInfo("UTC"))
        datetime.date(2025, 3, 11)
    """
    local = now.replace(tzinfo=tz) if now.tzinfo is None else now.astimezone(tz)
    return (local + timedelta(hours=24)).date()


def find_due_tasks(store: RecordStore, target_date: date) -> list[DueTask]:
    """Tasks whose deadline's date part equals ``target_date``."""
    return [DueTask(**row) for row in store.tasks_due_on(target_date)]


def _cell(value: str | None) -> str:
    return html.escape(value) if value else PLACEHOLDER


def render_digest(target_date: date, tasks: Sequence[DueTask]) -> Digest | None:
    """
    Render the digest for ``tasks``.

    Returns None when there is nothing to report. Missing description or
    project name is shown as "-".
    """
    if not tasks:
        return None

    day = target_date.isoformat()
    subject = f"Tasks Due Tomorrow ({day})"

    rows = []
    lines = [subject, ""]
    for task in tasks:
        rows.append(
            "<tr>"
            f"<td>{html.escape(task.title)}</td>"
            f"<td>{_cell(task.description)}</td>"
            f"<td>{_cell(task.project_name)}</td>"
            f"<td>{html.escape(task.status)}</td>"
            f"<td>{html.escape(task.deadline)}</td>"
            "</tr>"
        )
        lines.append(
            f"- {task.title} | {task.description or PLACEHOLDER} | "
            f"{task.project_name or PLACEHOLDER} | {task.status} | {task.deadline}"
        )

    body = "\n".join(rows)
    html_content = (
        f"<h2>{subject}</h2>\n"
        '<table border="1" cellpadding="8" cellspacing="0" '
        'style="width: 100%; border-collapse: collapse;">\n'
        '<thead style="background-color: #f2f2f2;">\n'
        "<tr><th>Title</th><th>Description</th><th>Project</th>"
        "<th>Status</th><th>Deadline</th></tr>\n"
        "</thead>\n"
        f"<tbody>\n{body}\n</tbody>\n"
        "</table>"
    )

    return Digest(
        target_date=target_date,
        subject=subject,
        html=html_content,
        text="\n".join(lines),
        task_count=len(tasks),
    )


class ReminderJob:
    """
    The daily "due tomorrow" email.

    Configuration is passed in at construction; nothing is read from the
    process environment here.

    Example:
        job = ReminderJob(config, db_path=Path("tasktrack.db"))
        result = job.run()
        if result.skipped:
            print("nothing sent")
    """

    def __init__(
        self,
        config: TrackerConfig,
        db_path: Path | str | None = None,
        transport: MailTransport | None = None,
        clock: Clock = now_in,
    ):
        self.config = config
        self.db_path = Path(db_path or config.database.path)
        self.transport: MailTransport = transport or SmtpTransport(config.mail)
        self.clock = clock

    @property
    def tz(self) -> tzinfo:
        return self.config.reminder.tzinfo

    def compute_target_date(self, now: datetime | None = None) -> date:
        return compute_target_date(now if now is not None else self.clock(self.tz), self.tz)

    def find_due_tasks(self, target_date: date) -> list[DueTask]:
        with get_connection(self.db_path) as conn:
            return find_due_tasks(RecordStore(conn), target_date)

    def render_digest(self, target_date: date, tasks: Sequence[DueTask]) -> Digest | None:
        return render_digest(target_date, tasks)

    def dispatch(self, digest: Digest, recipient: str | None = None) -> bool:
        """
        Send ``digest``; returns True if the transport accepted it.

        Failures are logged, never raised.
        """
        recipient = recipient or self.config.reminder.recipient
        if not recipient:
            logger.error("Reminder email not sent: no recipient configured (REMINDER_EMAIL)")
            return False

        try:
            self.transport.send(digest, recipient)
        except DeliveryError as e:
            logger.error("Reminder email to %s failed: %s", recipient, e)
            return False

        logger.info(
            "Reminder sent to %s: %d task(s) due %s",
            recipient,
            digest.task_count,
            digest.target_date.isoformat(),
        )
        return True

    def run(self, now: datetime | None = None) -> ReminderResult:
        """Run the whole job once. Safe to call from any thread."""
        target = self.compute_target_date(now)
        logger.info("Checking tasks due %s", target.isoformat())

        try:
            tasks = self.find_due_tasks(target)
        except (sqlite3.Error, StorageError, OSError) as e:
            logger.error("Failed to fetch tasks for reminder email: %s", e)
            return ReminderResult(target_date=target, skipped=True)

        digest = self.render_digest(target, tasks)
        if digest is None:
            logger.info("No tasks due %s", target.isoformat())
            return ReminderResult(target_date=target, skipped=True)

        delivered = self.dispatch(digest)
        return ReminderResult(target_date=target, task_count=len(tasks), delivered=delivered)
