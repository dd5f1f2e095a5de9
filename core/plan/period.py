"""Investment periods.

A period is the cadence of an investment plan. It renders itself as a
six-field cron expression (``second minute hour day-of-month month
day-of-week``) and can compute its next fire time, which the bundled
scheduler uses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta


def _must_between(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValueError(f"invalid {name}: a valid value must be between {low} and {high} (inclusive) but got {value}")


@dataclass(frozen=True)
class Period(ABC):
    """Time of day at which the plan fires; subclasses add the calendar part."""

    hour: int = 0
    minute: int = 0
    second: int = 0

    def __post_init__(self) -> None:
        _must_between("hour", self.hour, 0, 23)
        _must_between("minute", self.minute, 0, 59)
        _must_between("second", self.second, 0, 59)

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name ('daily', 'weekly', 'monthly')."""

    @abstractmethod
    def schedule(self) -> str:
        """Cron expression with a leading seconds field."""

    @abstractmethod
    def _matches(self, day: datetime) -> bool:
        """Whether the plan fires on the calendar day of ``day``."""

    def next_after(self, after: datetime) -> datetime:
        """First fire time strictly later than ``after`` (same tzinfo).

        Monthly periods skip months that do not have the configured day.
        """
        day = after.replace(hour=0, minute=0, second=0, microsecond=0)
        # Monthly day 31 can be up to two months away.
        for _ in range(400):
            if self._matches(day):
                candidate = day.replace(hour=self.hour, minute=self.minute, second=self.second)
                if candidate > after:
                    return candidate
            day += timedelta(days=1)
        raise RuntimeError(f"no fire time found for {self.schedule()!r}")  # pragma: no cover


@dataclass(frozen=True)
class DailyPeriod(Period):
    name = "daily"

    def schedule(self) -> str:
        return f"{self.second} {self.minute} {self.hour} * * *"

    def _matches(self, day: datetime) -> bool:
        return True


@dataclass(frozen=True)
class WeeklyPeriod(Period):
    """Weekly on ``weekday`` (cron numbering: 0 = Sunday ... 6 = Saturday)."""

    weekday: int = 1
    name = "weekly"

    def __post_init__(self) -> None:
        super().__post_init__()
        _must_between("weekday", self.weekday, 0, 6)

    def schedule(self) -> str:
        return f"{self.second} {self.minute} {self.hour} * * {self.weekday}"

    def _matches(self, day: datetime) -> bool:
        # datetime.weekday(): Monday = 0; cron: Sunday = 0
        return (day.weekday() + 1) % 7 == self.weekday


@dataclass(frozen=True)
class MonthlyPeriod(Period):
    """Monthly on day ``day`` of the month."""

    day: int = 1
    name = "monthly"

    def __post_init__(self) -> None:
        super().__post_init__()
        _must_between("day", self.day, 1, 31)

    def schedule(self) -> str:
        return f"{self.second} {self.minute} {self.hour} {self.day} * *"

    def _matches(self, day: datetime) -> bool:
        return day.day == self.day


PERIODS: dict[str, type[Period]] = {
    "daily": DailyPeriod,
    "weekly": WeeklyPeriod,
    "monthly": MonthlyPeriod,
}


def period_from_name(name: str) -> Period:
    """Build the default period for a name.

    daily: every day at 00:00:00; weekly: Monday 00:00:00;
    monthly: day 1 at 00:00:00.
    """
    try:
        cls = PERIODS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown period: {name!r} (available: {', '.join(PERIODS)})") from None
    return cls()
