"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .models import AvailabilityConfig, BookableSlot, BreakDate, DayKey, Slot, TimeRange
from .outcome import Outcome
from .schedule import BreakRegister, WeeklySchedule
from .scheduler import Scheduler
from .session import Review, Session, SessionQuery, SessionState
from .slot_calculator import BookableSlotCalculator

__all__ = [
    "AvailabilityConfig",
    "BookableSlot",
    "BookableSlotCalculator",
    "BreakDate",
    "BreakRegister",
    "DayKey",
    "Outcome",
    "Review",
    "Scheduler",
    "Session",
    "SessionQuery",
    "SessionState",
    "Slot",
    "TimeRange",
    "WeeklySchedule",
]
