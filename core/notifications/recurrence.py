"""
Weekly recurrence rules for scheduled notifications.

A notification fires once a week at a fixed wall-clock time. WeeklyRecurrence
holds that rule as typed fields and only turns it into an APScheduler trigger
at the edge, so nothing else depends on cron syntax.
"""

from dataclasses import dataclass

import pytz
from apscheduler.triggers.cron import CronTrigger

from core.constants import CRON_DAY_NAMES, DAY_NAMES, TIME_PATTERN


@dataclass(frozen=True)
class WeeklyRecurrence:
    """Fire at hour:minute on day_of_week (0 = Sunday), every week."""

    minute: int
    hour: int
    day_of_week: int

    def __post_init__(self):
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be between 0 and 59, got {self.minute}")
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be between 0 and 23, got {self.hour}")
        if not 0 <= self.day_of_week <= 6:
            raise ValueError(
                f"day_of_week must be between 0 (Sunday) and 6 (Saturday), got {self.day_of_week}"
            )

    @classmethod
    def from_schedule(cls, day_of_week: int, time: str) -> "WeeklyRecurrence":
        """
        Build a recurrence from a stored day and "HH:MM" time.

        Raises:
            ValueError: If the time is not a 24-hour HH:MM string or the day is out of range
        """
        match = TIME_PATTERN.match(time or "")
        if not match:
            raise ValueError(f"time must be HH:MM (24-hour), got {time!r}")
        return cls(
            minute=int(match.group(2)),
            hour=int(match.group(1)),
            day_of_week=day_of_week,
        )

    def to_trigger(self, timezone: str = "UTC") -> CronTrigger:
        """APScheduler trigger: minute, hour, any day-of-month, any month, weekday."""
        return CronTrigger(
            minute=self.minute,
            hour=self.hour,
            day="*",
            month="*",
            day_of_week=CRON_DAY_NAMES[self.day_of_week],
            timezone=pytz.timezone(timezone),
        )

    def describe(self) -> str:
        """Human-readable form, e.g. "Wednesday at 14:05"."""
        return f"{DAY_NAMES[self.day_of_week]} at {self.hour:02d}:{self.minute:02d}"
