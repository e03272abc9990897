"""
Manual trigger for the deadline reminder.

- GET /test-send-email - Run the reminder job now, outside the schedule

The job runs after the response is sent, like the scheduled run it returns
nothing to a caller; its outcome only shows up in the logs.
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import PlainTextResponse

from tasktrack.api.deps import get_reminder_job
from tasktrack.core.reminders.job import ReminderJob

router = APIRouter()


@router.get("/test-send-email", response_class=PlainTextResponse)
def trigger_reminder(
    background_tasks: BackgroundTasks,
    job: ReminderJob = Depends(get_reminder_job),
) -> str:
    background_tasks.add_task(job.run)
    return "Triggered email reminder manually"
