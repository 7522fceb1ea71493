"""
Domain models for weekly availability and booked time ranges.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict

import pendulum
from pendulum import DateTime

from .exceptions import InvalidSetting, ParseError
from .time_arithmetic import (
    MINUTES_PER_DAY,
    add_duration,
    from_minutes,
    to_12_hour,
    to_minutes,
)

DEFAULT_SLOT_START = "09:00"
ALLOWED_SESSION_DURATIONS = (30, 60, 90)
MIN_SLOTS_PER_DAY = 1
MAX_SLOTS_PER_DAY = 20


class DayKey(str, Enum):
    """Day of the week, Monday first."""
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @classmethod
    def parse(cls, value: "DayKey | str") -> "DayKey":
        """
        Resolve a day token.

        Raises:
            ParseError: If the token is not one of the seven lowercase keys
        """
        if isinstance(value, DayKey):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ParseError(
                f"Unknown day key '{value}', expected one of "
                f"{', '.join(day.value for day in cls)}"
            ) from None

    @classmethod
    def for_date(cls, day: date) -> "DayKey":
        return list(cls)[day.weekday()]

    @property
    def label(self) -> str:
        return _DAY_LABELS[self]


_DAY_LABELS = {
    DayKey.MON: "Monday",
    DayKey.TUE: "Tuesday",
    DayKey.WED: "Wednesday",
    DayKey.THU: "Thursday",
    DayKey.FRI: "Friday",
    DayKey.SAT: "Saturday",
    DayKey.SUN: "Sunday",
}


@dataclass(frozen=True)
class Slot:
    """
    One bookable window within a day, stored as minutes since midnight.

    Commands build slots through ``starting_at`` so that ``end`` is always
    derived from the start and the session duration. Slots read back from
    storage keep whatever end they were saved with.
    """
    start: int
    end: int

    def __post_init__(self):
        for value in (self.start, self.end):
            if not 0 <= value < MINUTES_PER_DAY:
                raise ParseError(f"Minute of day out of range: {value}")

    @classmethod
    def starting_at(cls, start: str, duration_minutes: int) -> "Slot":
        return cls(
            start=to_minutes(start),
            end=to_minutes(add_duration(start, duration_minutes)),
        )

    @classmethod
    def from_strings(cls, start: str, end: str) -> "Slot":
        return cls(start=to_minutes(start), end=to_minutes(end))

    @property
    def start_time(self) -> str:
        return from_minutes(self.start)

    @property
    def end_time(self) -> str:
        return from_minutes(self.end)

    @property
    def crosses_midnight(self) -> bool:
        return self.end < self.start

    def to_dict(self) -> Dict[str, str]:
        """Wire form: ``{"from": "09:00", "to": "09:30"}``."""
        return {"from": self.start_time, "to": self.end_time}

    def format_display(self) -> str:
        return f"{to_12_hour(self.start_time)} – {to_12_hour(self.end_time)}"

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time}"


def resolve_timezone(name: str) -> pendulum.Timezone:
    """Map a configured zone name to a timezone; ``"local"`` means the host zone."""
    if name == "local":
        return pendulum.local_timezone()
    return pendulum.timezone(name)


def parse_date(value: Any) -> pendulum.Date:
    """
    Coerce a ``date`` or an ISO string (``YYYY-MM-DD`` or a full timestamp)
    to a calendar date.

    Raises:
        ParseError: If the value cannot be read as a date
    """
    if isinstance(value, date):
        return pendulum.date(value.year, value.month, value.day)

    if not isinstance(value, str) or not value.strip():
        raise ParseError(f"Invalid date {value!r}, expected YYYY-MM-DD")

    try:
        parsed = pendulum.parse(value.strip(), exact=True)
    except (ValueError, TypeError) as exc:
        raise ParseError(f"Invalid date '{value}': {exc}") from exc

    if isinstance(parsed, DateTime):
        return parsed.date()
    if isinstance(parsed, date):
        return pendulum.date(parsed.year, parsed.month, parsed.day)
    raise ParseError(f"Invalid date '{value}', expected YYYY-MM-DD")


@dataclass(frozen=True)
class BreakDate:
    """
    A blocked calendar range. Only single-day blocks are created, so
    ``start == end`` in practice.
    """
    start: pendulum.Date
    end: pendulum.Date

    @classmethod
    def single_day(cls, day: pendulum.Date) -> "BreakDate":
        return cls(start=day, end=day)

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}

    def __str__(self) -> str:
        return self.start.format("ddd MMM DD YYYY")


@dataclass(frozen=True)
class AvailabilityConfig:
    """Session duration and per-day capacity."""
    session_duration_minutes: int = 30
    max_slots_per_day: int = 1

    def __post_init__(self):
        problem = (
            self.check_session_duration(self.session_duration_minutes)
            or self.check_max_slots_per_day(self.max_slots_per_day)
        )
        if problem:
            raise InvalidSetting(problem)

    @staticmethod
    def check_session_duration(minutes: int) -> str | None:
        """Return a problem description, or None when the value is valid."""
        if minutes not in ALLOWED_SESSION_DURATIONS:
            allowed = ", ".join(str(value) for value in ALLOWED_SESSION_DURATIONS)
            return f"Session duration must be one of {allowed} minutes, got {minutes}"
        return None

    @staticmethod
    def check_max_slots_per_day(count: int) -> str | None:
        if not MIN_SLOTS_PER_DAY <= count <= MAX_SLOTS_PER_DAY:
            return (
                f"Sessions per day must be between {MIN_SLOTS_PER_DAY} and "
                f"{MAX_SLOTS_PER_DAY}, got {count}"
            )
        return None

    def summary(self) -> str:
        return f"{self.session_duration_minutes} min sessions, up to {self.max_slots_per_day}/day"


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class BookableSlot:
    """
    A concrete, dated session window offered to candidates.
    """
    time_range: TimeRange
    available: bool = True

    def format_display(self) -> str:
        """
        Format: Weekday, DD.MM.YYYY | 09:00 AM - 09:30 AM
        """
        start = self.time_range.start
        end = self.time_range.end
        weekday = DayKey.for_date(start.date()).label
        times = f"{start.format('hh:mm A')} - {end.format('hh:mm A')}"
        suffix = "" if self.available else " (booked)"
        return f"{weekday}, {start.format('DD.MM.YYYY')} | {times}{suffix}"
