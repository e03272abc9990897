"""
Tests for the daily reminder scheduler.

Tests validate:
- next_run_after picks the next configured wall-clock time in the zone
- A failing run is logged and does not escape run_once
- The background thread fires at the configured time and stops cleanly
- The loop fires once a day at the configured local time across DST changes
"""

import logging
import threading
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from tasktrack.core.config.models import ReminderConfig
from tasktrack.core.reminders.scheduler import DailyScheduler, next_run_after

UTC = ZoneInfo("UTC")
NEW_YORK = ZoneInfo("America/New_York")


class TestNextRunAfter:
    def test_later_today(self) -> None:
        now = datetime(2025, 3, 10, 9, 0, tzinfo=UTC)
        assert next_run_after(now, time(20, 45), UTC) == datetime(2025, 3, 10, 20, 45, tzinfo=UTC)

    def test_already_passed_goes_to_tomorrow(self) -> None:
        now = datetime(2025, 3, 10, 21, 0, tzinfo=UTC)
        assert next_run_after(now, time(20, 45), UTC) == datetime(2025, 3, 11, 20, 45, tzinfo=UTC)

    def test_exact_time_goes_to_tomorrow(self) -> None:
        now = datetime(2025, 3, 10, 20, 45, tzinfo=UTC)
        assert next_run_after(now, time(20, 45), UTC) == datetime(2025, 3, 11, 20, 45, tzinfo=UTC)

    def test_wall_clock_in_configured_zone(self) -> None:
        helsinki = ZoneInfo("Europe/Helsinki")
        now = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)  # 14:00 in Helsinki

        result = next_run_after(now, time(20, 45), helsinki)

        assert result.astimezone(helsinki).time() == time(20, 45)
        assert result.astimezone(UTC) == datetime(2025, 1, 15, 18, 45, tzinfo=UTC)


class TestDailyScheduler:
    def test_send_time_from_config(self) -> None:
        scheduler = DailyScheduler(lambda: None, ReminderConfig(send_time="08:30"))
        assert scheduler.send_time == time(8, 30)

    def test_next_run_uses_clock(self) -> None:
        scheduler = DailyScheduler(
            lambda: None,
            ReminderConfig(send_time="20:45", timezone="UTC"),
            clock=lambda tz: datetime(2025, 3, 10, 21, 0, tzinfo=tz),
        )
        assert scheduler.next_run() == datetime(2025, 3, 11, 20, 45, tzinfo=UTC)

    def test_run_once_swallows_errors(self, caplog: pytest.LogCaptureFixture) -> None:
        def boom() -> None:
            raise RuntimeError("smtp exploded")

        scheduler = DailyScheduler(boom, ReminderConfig())

        with caplog.at_level(logging.ERROR):
            scheduler.run_once()

        assert "Scheduled reminder run failed" in caplog.text

    def test_fires_at_send_time_and_stops(self) -> None:
        """Clock is shifted to just before 20:45 so the first run is immediate."""
        fake_start = datetime(2025, 3, 10, 20, 44, 59, 900000, tzinfo=UTC)
        offset = fake_start - datetime.now(UTC)

        def clock(tz):
            return (datetime.now(UTC) + offset).astimezone(tz)

        ran = threading.Event()
        scheduler = DailyScheduler(
            ran.set, ReminderConfig(send_time="20:45", timezone="UTC"), clock=clock
        )

        scheduler.start()
        try:
            assert scheduler.is_running
            assert ran.wait(timeout=5)
        finally:
            scheduler.stop()

        assert not scheduler.is_running

    def test_keeps_running_after_failed_run(self) -> None:
        fake_start = datetime(2025, 3, 10, 20, 44, 59, 900000, tzinfo=UTC)
        offset = fake_start - datetime.now(UTC)
        attempted = threading.Event()

        def failing_job() -> None:
            attempted.set()
            raise RuntimeError("database locked")

        scheduler = DailyScheduler(
            failing_job,
            ReminderConfig(send_time="20:45", timezone="UTC"),
            clock=lambda tz: (datetime.now(UTC) + offset).astimezone(tz),
        )

        scheduler.start()
        try:
            assert attempted.wait(timeout=5)
            assert scheduler.is_running
        finally:
            scheduler.stop()

    def test_start_is_idempotent(self) -> None:
        scheduler = DailyScheduler(
            lambda: None,
            ReminderConfig(send_time="20:45", timezone="UTC"),
            clock=lambda tz: datetime(2025, 3, 10, 9, 0, tzinfo=tz),
        )
        scheduler.start()
        try:
            first = scheduler._thread
            scheduler.start()
            assert scheduler._thread is first
        finally:
            scheduler.stop()


class SteppingClock:
    """Fake clock holding an absolute instant; callers read it in any zone."""

    def __init__(self, start: datetime):
        self.now = start.astimezone(UTC)

    def __call__(self, tz):
        return self.now.astimezone(tz)


class SteppingStop:
    """Stand-in for the stop event: each wait advances the clock instead of sleeping."""

    def __init__(self, clock: SteppingClock, waits: int):
        self.clock = clock
        self.waits_left = waits
        self.timeouts: list[float] = []

    def is_set(self) -> bool:
        return self.waits_left <= 0

    def set(self) -> None:
        self.waits_left = 0

    def clear(self) -> None:
        pass

    def wait(self, timeout: float | None = None) -> bool:
        self.waits_left -= 1
        if self.waits_left <= 0:
            return True
        self.timeouts.append(timeout)
        self.clock.now += timedelta(seconds=timeout)
        return False


def _fire_times(start: datetime, runs: int) -> list[datetime]:
    clock = SteppingClock(start)
    fired: list[datetime] = []
    scheduler = DailyScheduler(
        lambda: fired.append(clock(NEW_YORK)),
        ReminderConfig(send_time="20:45", timezone="America/New_York"),
        clock=clock,
    )
    scheduler._stop = SteppingStop(clock, waits=runs + 1)

    scheduler._run_forever()

    return fired


class TestDaylightSavingTransitions:
    def test_fall_back_fires_at_local_send_time(self) -> None:
        """2025-11-02 is 25 hours long in New York."""
        fired = _fire_times(datetime(2025, 11, 1, 21, 0, tzinfo=NEW_YORK), runs=2)

        assert [(f.date().isoformat(), f.time()) for f in fired] == [
            ("2025-11-02", time(20, 45)),
            ("2025-11-03", time(20, 45)),
        ]
        assert fired[0].utcoffset() == timedelta(hours=-5)

    def test_spring_forward_fires_at_local_send_time(self) -> None:
        """2025-03-09 is 23 hours long in New York."""
        fired = _fire_times(datetime(2025, 3, 8, 21, 0, tzinfo=NEW_YORK), runs=2)

        assert [(f.date().isoformat(), f.time()) for f in fired] == [
            ("2025-03-09", time(20, 45)),
            ("2025-03-10", time(20, 45)),
        ]
        assert fired[0].utcoffset() == timedelta(hours=-4)

    def test_delay_is_real_elapsed_seconds(self) -> None:
        clock = SteppingClock(datetime(2025, 11, 1, 21, 0, tzinfo=NEW_YORK))
        scheduler = DailyScheduler(
            lambda: None,
            ReminderConfig(send_time="20:45", timezone="America/New_York"),
            clock=clock,
        )
        stop = SteppingStop(clock, waits=2)
        scheduler._stop = stop

        scheduler._run_forever()

        # 23h45m of wall clock plus the repeated hour
        assert stop.timeouts == [(24 * 60 + 45) * 60]

    def test_next_run_after_across_fall_back(self) -> None:
        now = datetime(2025, 11, 1, 21, 0, tzinfo=NEW_YORK)

        result = next_run_after(now, time(20, 45), NEW_YORK)

        assert result.astimezone(UTC) == datetime(2025, 11, 3, 1, 45, tzinfo=UTC)
