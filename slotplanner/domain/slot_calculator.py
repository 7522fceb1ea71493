"""
Expansion of the weekly pattern into dated, bookable session windows.

Pure domain logic: no API calls, no I/O. The current instant is passed in.
"""

from datetime import date
from typing import List, Sequence

import pendulum
from pendulum import DateTime

from .models import BookableSlot, DayKey, Slot, TimeRange, resolve_timezone
from .scheduler import Scheduler
from .session import Session
from .time_arithmetic import MINUTES_PER_DAY


class BookableSlotCalculator:
    """
    Turns a Scheduler snapshot into the windows a candidate can pick.

    Algorithm, per calendar day:
    1. Nothing on a blocked date or a day without weekly slots
    2. Cut each weekly range into consecutive session-length windows that
       fit entirely inside it (an end before the start means overnight)
    3. Drop windows on today's date that have already started
    4. Mark windows overlapping a non-cancelled booking as unavailable
    """

    def __init__(self, scheduler: Scheduler, timezone: str = "local"):
        self.scheduler = scheduler
        self.timezone = resolve_timezone(timezone)

    def slots_for_date(
        self,
        day: date,
        booked_sessions: Sequence[Session] = (),
        now: DateTime | None = None,
    ) -> List[BookableSlot]:
        """
        Find the bookable windows on a single date.

        Args:
            day: Calendar date to expand
            booked_sessions: Sessions already booked with this expert
            now: Current instant, defaults to the wall clock

        Returns:
            Windows sorted by start time
        """
        now = now or pendulum.now(self.timezone)

        if self.scheduler.is_blocked(day):
            return []

        weekly_ranges = self.scheduler.slots(DayKey.for_date(day))
        if not weekly_ranges:
            return []

        bookings = [
            session.time_range for session in booked_sessions
            if not session.is_cancelled
        ]

        windows: List[BookableSlot] = []
        for weekly_range in weekly_ranges:
            for time_range in self._cut_range(day, weekly_range):
                if time_range.start.date() == now.date() and time_range.start < now:
                    continue
                windows.append(
                    BookableSlot(
                        time_range=time_range,
                        available=not any(time_range.overlaps(b) for b in bookings),
                    )
                )

        return sorted(windows, key=lambda w: w.time_range.start)

    def slots_between(
        self,
        start_date: date,
        end_date: date,
        booked_sessions: Sequence[Session] = (),
        now: DateTime | None = None,
    ) -> List[BookableSlot]:
        """Expand every date from ``start_date`` to ``end_date`` inclusive."""
        now = now or pendulum.now(self.timezone)
        windows: List[BookableSlot] = []

        current = pendulum.date(start_date.year, start_date.month, start_date.day)
        while current <= end_date:
            windows.extend(self.slots_for_date(current, booked_sessions, now))
            current = current.add(days=1)

        return windows

    def _cut_range(self, day: date, weekly_range: Slot) -> List[TimeRange]:
        """
        Split one weekly range into session-length windows.

        Example (60 minute sessions):
        Range: 09:00 - 11:30
        Result: [09:00-10:00, 10:00-11:00]
        """
        duration = self.scheduler.config.session_duration_minutes
        current = weekly_range.start
        end = weekly_range.end
        if end < current:
            end += MINUTES_PER_DAY

        midnight = pendulum.datetime(day.year, day.month, day.day, tz=self.timezone)
        ranges: List[TimeRange] = []

        while current + duration <= end:
            ranges.append(
                TimeRange(
                    start=midnight.add(minutes=current),
                    end=midnight.add(minutes=current + duration),
                )
            )
            current += duration

        return ranges
