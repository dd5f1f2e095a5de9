"""Thread-based scheduler for an investment plan.

Two independent timers: ``invest`` on the plan period and ``monitor`` at the
top of every hour. Each timer runs on its own daemon thread, so a job stuck on
the network delays only its own timer. Job errors are logged and the timer
moves on to its next fire time.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Optional, Protocol

from core.plan.period import Period


logger = logging.getLogger(__name__)

MONITOR_SCHEDULE = "0 0 * * * *"


class SchedulablePlan(Protocol):
    def period(self) -> Period: ...

    def invest(self) -> object: ...

    def monitor(self) -> object: ...


def next_hour(after: datetime) -> datetime:
    """Top of the hour strictly after ``after``."""
    return after.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)


def run_job(name: str, job: Callable[[], object]) -> bool:
    """Run one job, logging instead of raising. Returns True on success."""
    try:
        job()
    except Exception:
        logger.exception("Scheduled %s failed", name)
        return False
    return True


class PlanScheduler:
    """Fires ``plan.invest`` per ``plan.period()`` and ``plan.monitor`` hourly."""

    def __init__(self, *, plan: SchedulablePlan, tz: Optional[tzinfo] = None) -> None:
        self._plan = plan
        self._tz = tz
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    def _now(self) -> datetime:
        return datetime.now(self._tz) if self._tz else datetime.now().astimezone()

    def _timer(self, name: str, next_fire: Callable[[datetime], datetime], job: Callable[[], object]) -> None:
        last_fire: Optional[datetime] = None
        while not self._stop.is_set():
            now = self._now()
            # The wait may wake marginally early; never fire the same slot twice.
            fire_at = next_fire(max(now, last_fire) if last_fire else now)
            logger.debug("Next %s at %s", name, fire_at.isoformat())
            if self._stop.wait(max(0.0, (fire_at - now).total_seconds())):
                break
            last_fire = fire_at
            run_job(name, job)

    def start(self) -> None:
        """Start both timer threads."""
        if self._threads:
            raise RuntimeError("scheduler already started")

        period = self._plan.period()
        logger.info("Scheduling invest at %r (%s), monitor at %r", period.schedule(), period.name, MONITOR_SCHEDULE)

        timers = (
            ("invest", period.next_after, self._plan.invest),
            ("monitor", next_hour, self._plan.monitor),
        )
        for name, next_fire, job in timers:
            thread = threading.Thread(
                target=self._timer,
                args=(name, next_fire, job),
                name=f"aip-{name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal both timers to stop and wait for the threads to exit.

        A job already running is not interrupted.
        """
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout)

    def wait(self) -> None:
        """Block until :meth:`stop` is called."""
        self._stop.wait()
