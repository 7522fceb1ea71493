"""
Immutable containers for the weekly slot pattern and the blocked dates.

Both containers return new instances from every change; none of their
methods validate capacity or duplicates, that is the aggregate's job.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterator, List, Mapping, Sequence, Tuple

from .models import BreakDate, DayKey, Slot


def _empty_days() -> Tuple[Tuple[Slot, ...], ...]:
    return tuple(() for _ in DayKey)


@dataclass(frozen=True)
class WeeklySchedule:
    """
    Recurring per-day slot lists, in Monday-first order.

    A day with an empty list is unavailable, a day with at least one slot is
    available; there is no separate on/off flag.
    """
    days: Tuple[Tuple[Slot, ...], ...] = field(default_factory=_empty_days)

    def __post_init__(self):
        if len(self.days) != len(DayKey):
            raise ValueError(f"Expected {len(DayKey)} day lists, got {len(self.days)}")

    @classmethod
    def from_mapping(cls, slots_by_day: Mapping[DayKey, Sequence[Slot]]) -> "WeeklySchedule":
        return cls(days=tuple(tuple(slots_by_day.get(day, ())) for day in DayKey))

    def slots(self, day: DayKey) -> Tuple[Slot, ...]:
        return self.days[_position(day)]

    def with_day(self, day: DayKey, slots: Sequence[Slot]) -> "WeeklySchedule":
        days = list(self.days)
        days[_position(day)] = tuple(slots)
        return WeeklySchedule(days=tuple(days))

    def is_available(self, day: DayKey) -> bool:
        return bool(self.slots(day))

    def available_days(self) -> List[DayKey]:
        return [day for day in DayKey if self.is_available(day)]

    def busiest_day_count(self) -> int:
        return max(len(slots) for slots in self.days)

    def items(self) -> Iterator[Tuple[DayKey, Tuple[Slot, ...]]]:
        return zip(DayKey, self.days)

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {day.value: [slot.to_dict() for slot in slots] for day, slots in self.items()}


def _position(day: DayKey) -> int:
    return list(DayKey).index(day)


@dataclass(frozen=True)
class BreakRegister:
    """Blocked calendar dates that suppress the weekly pattern."""
    entries: Tuple[BreakDate, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[BreakDate]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> BreakDate:
        return self.entries[index]

    def has_start(self, day: date) -> bool:
        return any(entry.start == day for entry in self.entries)

    def is_blocked(self, day: date) -> bool:
        return any(entry.covers(day) for entry in self.entries)

    def appended(self, entry: BreakDate) -> "BreakRegister":
        return BreakRegister(entries=self.entries + (entry,))

    def without(self, index: int) -> "BreakRegister":
        return BreakRegister(entries=self.entries[:index] + self.entries[index + 1:])

    def to_list(self) -> List[Dict[str, str]]:
        return [entry.to_dict() for entry in self.entries]
