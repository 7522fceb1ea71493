"""
The Scheduler aggregate: one expert's availability snapshot and the commands
that change it.

Every command returns an ``Outcome``. On success the outcome holds a new
snapshot; on failure it holds this snapshot untouched plus the error, so a
caller never observes a half-applied change. Malformed day tokens, times and
dates raise ``ParseError`` instead because they indicate bad input data
rather than a rule violation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import List

from .exceptions import (
    CapacityExceeded,
    DuplicateBreakDate,
    IndexOutOfRange,
    InvalidSetting,
    SchedulingError,
)
from .models import (
    DEFAULT_SLOT_START,
    AvailabilityConfig,
    BreakDate,
    DayKey,
    Slot,
    parse_date,
)
from .outcome import Outcome
from .schedule import BreakRegister, WeeklySchedule
from .time_arithmetic import from_minutes, to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scheduler:
    """Immutable availability snapshot: config, weekly pattern and breaks."""
    config: AvailabilityConfig = field(default_factory=AvailabilityConfig)
    weekly: WeeklySchedule = field(default_factory=WeeklySchedule)
    breaks: BreakRegister = field(default_factory=BreakRegister)

    def __post_init__(self):
        busiest = self.weekly.busiest_day_count()
        if busiest > self.config.max_slots_per_day:
            raise CapacityExceeded(self.config.max_slots_per_day)

    @classmethod
    def empty(cls) -> "Scheduler":
        return cls()

    # Queries

    def slots(self, day: DayKey | str):
        return self.weekly.slots(DayKey.parse(day))

    def is_day_available(self, day: DayKey | str) -> bool:
        return self.weekly.is_available(DayKey.parse(day))

    def available_days(self) -> List[DayKey]:
        return self.weekly.available_days()

    def has_availability(self) -> bool:
        return bool(self.available_days())

    def is_blocked(self, day: date | str) -> bool:
        return self.breaks.is_blocked(parse_date(day))

    # Weekly pattern commands

    def add_slot(self, day: DayKey | str) -> Outcome[Scheduler]:
        day = DayKey.parse(day)
        current = self.weekly.slots(day)
        limit = self.config.max_slots_per_day

        if len(current) >= limit:
            return self._reject(CapacityExceeded(limit))

        slot = Slot.starting_at(DEFAULT_SLOT_START, self.config.session_duration_minutes)
        return self._accept(weekly=self.weekly.with_day(day, current + (slot,)))

    def update_slot_start(self, day: DayKey | str, index: int, new_start: str) -> Outcome[Scheduler]:
        """Move a slot; its end is always recomputed from the session duration."""
        day = DayKey.parse(day)
        start = from_minutes(to_minutes(new_start))
        current = self.weekly.slots(day)

        if not 0 <= index < len(current):
            return self._reject(IndexOutOfRange(index, len(current)))

        updated = list(current)
        updated[index] = Slot.starting_at(start, self.config.session_duration_minutes)
        return self._accept(weekly=self.weekly.with_day(day, updated))

    def remove_slot(self, day: DayKey | str, index: int) -> Outcome[Scheduler]:
        day = DayKey.parse(day)
        current = self.weekly.slots(day)

        if not 0 <= index < len(current):
            return self._reject(IndexOutOfRange(index, len(current)))

        return self._accept(weekly=self.weekly.with_day(day, current[:index] + current[index + 1:]))

    def clear_day(self, day: DayKey | str) -> Outcome[Scheduler]:
        return self._accept(weekly=self.weekly.with_day(DayKey.parse(day), ()))

    def copy_day_schedule(self, source_day: DayKey | str) -> Outcome[Scheduler]:
        """Replace every other day's slots with those of ``source_day``."""
        source_day = DayKey.parse(source_day)
        source_slots = self.weekly.slots(source_day)
        weekly = WeeklySchedule.from_mapping({day: source_slots for day in DayKey})
        return self._accept(weekly=weekly)

    # Config commands

    def set_session_duration(self, minutes: int) -> Outcome[Scheduler]:
        problem = AvailabilityConfig.check_session_duration(minutes)
        if problem:
            return self._reject(InvalidSetting(problem))
        # Existing slot ends are left as stored.
        return self._accept(config=replace(self.config, session_duration_minutes=minutes))

    def set_max_slots_per_day(self, count: int) -> Outcome[Scheduler]:
        problem = AvailabilityConfig.check_max_slots_per_day(count)
        if problem:
            return self._reject(InvalidSetting(problem))
        if self.weekly.busiest_day_count() > count:
            return self._reject(CapacityExceeded(count))
        return self._accept(config=replace(self.config, max_slots_per_day=count))

    # Break date commands

    def add_break_date(self, day: date | str) -> Outcome[Scheduler]:
        day = parse_date(day)
        if self.breaks.has_start(day):
            return self._reject(DuplicateBreakDate())
        return self._accept(breaks=self.breaks.appended(BreakDate.single_day(day)))

    def remove_break_date(self, index: int) -> Outcome[Scheduler]:
        if not 0 <= index < len(self.breaks):
            return self._reject(IndexOutOfRange(index, len(self.breaks)))
        return self._accept(breaks=self.breaks.without(index))

    # Serialization

    def to_document(self) -> dict:
        """The whole snapshot in the backend's wire shape."""
        return {
            "sessionDuration": self.config.session_duration_minutes,
            "maxPerDay": self.config.max_slots_per_day,
            "weekly": self.weekly.to_dict(),
            "breakDates": self.breaks.to_list(),
        }

    def _accept(self, **changes) -> Outcome[Scheduler]:
        return Outcome.success(replace(self, **changes))

    def _reject(self, error: SchedulingError) -> Outcome[Scheduler]:
        logger.debug("Command rejected: %s", error)
        return Outcome.failure(self, error)
