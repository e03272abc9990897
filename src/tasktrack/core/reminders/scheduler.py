"""
Daily scheduler for the reminder job.

A single daemon thread sleeps until the next configured wall-clock time in
the configured timezone, runs the job, and repeats. A failing run is logged
and never stops the loop.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime, time, timedelta, tzinfo
from typing import Any

from tasktrack.core.config.models import ReminderConfig
from tasktrack.core.reminders.job import Clock, now_in

logger = logging.getLogger(__name__)


def next_run_after(now: datetime, send_time: time, tz: tzinfo) -> datetime:
    """
    Next moment strictly after ``now`` whose wall-clock time in ``tz`` is ``send_time``.

    Example:
        >>> from zoneinfo import ZoneInfo
        >>> utc = ZoneInfo("UTC")
        >>> next_run_after(datetime(2025, 3, 10, 21, 0, tzinfo=utc), time(20, 45), utc)
        datetime.datetime(2025, 3, 11, 20, 45, tzinfo=zoneinfo.ZoneInfo(key='UTC'))
    """
    local = now.replace(tzinfo=tz) if now.tzinfo is None else now.astimezone(tz)
    candidate = datetime.combine(local.date(), send_time, tzinfo=tz)
    # Aware datetimes sharing a zone compare on wall-clock fields
    if candidate.timestamp() <= local.timestamp():
        candidate = datetime.combine(local.date() + timedelta(days=1), send_time, tzinfo=tz)
    return candidate


class DailyScheduler:
    """
    Runs ``job`` once a day at ``config.send_time`` in ``config.timezone``.

    Example:
        scheduler = DailyScheduler(job.run, app_config.reminder)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        job: Callable[[], Any],
        config: ReminderConfig,
        clock: Clock = now_in,
    ):
        self.job = job
        self.config = config
        self.clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def send_time(self) -> time:
        hour, minute = self.config.hour_minute
        return time(hour, minute)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def next_run(self) -> datetime:
        tz = self.config.tzinfo
        return next_run_after(self.clock(tz), self.send_time, tz)

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run_forever,
            name="reminder-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "Reminder scheduler started: daily at %s (%s)",
            self.config.send_time,
            self.config.timezone,
        )

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("Reminder scheduler stopped")

    def run_once(self) -> None:
        """Run the job, logging instead of raising."""
        try:
            self.job()
        except Exception:
            logger.exception("Scheduled reminder run failed")

    def _run_forever(self) -> None:
        while not self._stop.is_set():
            target = self.next_run()
            delay = target.timestamp() - self.clock(self.config.tzinfo).timestamp()
            logger.debug("Next reminder run at %s (in %.0fs)", target.isoformat(), delay)
            if self._stop.wait(timeout=max(delay, 0.0)):
                break
            self.run_once()
