"""
Domain models for busy events, working windows and free intervals.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

import pendulum
from pendulum import Date, DateTime

from .exceptions import InvalidConfigError, InvalidIntervalError

WEEKEND_DAYS = (5, 6)  # Saturday, Sunday (date.weekday())


def local_date(value: date, tz: str) -> Date:
    """
    Return the calendar date of ``value`` as seen in ``tz``.

    Plain dates are taken as-is; datetimes are converted to ``tz`` first.
    """
    if isinstance(value, datetime):
        return pendulum.instance(value).in_timezone(tz).date()
    return pendulum.date(value.year, value.month, value.day)


@dataclass(frozen=True)
class TimeInterval:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidIntervalError(
                f"Start time {self.start} must be before end time {self.end}"
            )

    def duration_minutes(self) -> int:
        """Return the duration in whole minutes."""
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps with another."""
        return self.start < other.end and self.end > other.start

    def intersect(self, other: "TimeInterval") -> "TimeInterval | None":
        """
        Calculate the intersection of two intervals.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return TimeInterval(
            start=max(self.start, other.start),
            end=min(self.end, other.end),
        )

    def clip_to(self, bounds: "TimeInterval") -> "TimeInterval | None":
        """Truncate this interval to ``bounds``; never extends it."""
        return self.intersect(bounds)

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class FreeInterval(TimeInterval):
    """
    A span in which nobody concerned has a competing event.

    Structurally a TimeInterval, but only ever produced as a computation
    result.
    """

    @classmethod
    def from_interval(cls, interval: TimeInterval) -> "FreeInterval":
        return cls(start=interval.start, end=interval.end)

    def to_iso(self) -> Tuple[str, str]:
        """Return ISO-8601 start and end strings."""
        return self.start.isoformat(), self.end.isoformat()


@dataclass(frozen=True)
class BusyEvent:
    """
    A calendar entry that blocks time for one participant.

    The title is carried through for display only.
    """
    title: str
    interval: TimeInterval
    is_all_day: bool = False
    participant: str = ""
    event_id: str = ""
    location: Optional[str] = None

    @property
    def start(self) -> DateTime:
        return self.interval.start

    @property
    def end(self) -> DateTime:
        return self.interval.end

    def covers_day(self, day: date, tz: str) -> bool:
        """
        Check whether an all-day event occupies the given calendar date.

        All-day events end at midnight of the following day, so an end
        exactly at midnight does not count that date.
        """
        first = local_date(self.interval.start, tz)
        local_end = pendulum.instance(self.interval.end).in_timezone(tz)
        last = local_end.date()
        if local_end.time() == time(0, 0):
            last = last - timedelta(days=1)
        last = max(first, last)
        return first <= day <= last


@dataclass(frozen=True)
class WorkWindow:
    """
    Configuration for the daily window in which free time is searched.

    Passed explicitly into every computation and never mutated.
    """
    start_hour: int = 9
    end_hour: int = 19
    min_duration_minutes: int = 30
    exclude_weekends: bool = True
    timezone: str = "Asia/Tokyo"

    def __post_init__(self):
        for name in ("start_hour", "end_hour"):
            value = getattr(self, name)
            if not 0 <= value <= 23:
                raise InvalidConfigError(f"{name} must be between 0 and 23, got {value}")
        if self.start_hour >= self.end_hour:
            raise InvalidConfigError(
                f"start_hour ({self.start_hour}) must be before end_hour ({self.end_hour})"
            )
        if self.min_duration_minutes <= 0:
            raise InvalidConfigError(
                f"min_duration_minutes must be positive, got {self.min_duration_minutes}"
            )

    def is_working_day(self, day: date) -> bool:
        """Check if a given date is searched at all."""
        return not (self.exclude_weekends and day.weekday() in WEEKEND_DAYS)

    def window_for(self, day: date) -> TimeInterval:
        """Get the ``[start_hour, end_hour)`` interval for a calendar date."""
        start = pendulum.datetime(day.year, day.month, day.day, self.start_hour, tz=self.timezone)
        end = pendulum.datetime(day.year, day.month, day.day, self.end_hour, tz=self.timezone)
        return TimeInterval(start=start, end=end)


@dataclass
class TimeSlot:
    """
    Represents a found common free slot.
    """
    interval: FreeInterval
    participants: List[str] = field(default_factory=list)

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, DD.MM.YYYY | HH:mm – HH:mm (N min)
        """
        start = self.interval.start
        end = self.interval.end

        weekday = start.format("dddd")
        date_str = start.format("DD.MM.YYYY")
        time_str = f"{start.format('HH:mm')} – {end.format('HH:mm')}"
        duration = self.interval.duration_minutes()

        return f"{weekday}, {date_str} | {time_str} ({duration} min)"
