"""
Validated wire shapes for the marketplace backend.

Fetched JSON is loosely typed; it is checked here and converted into domain
objects. Anything that does not fit (unknown day keys, malformed times or
dates, impossible settings) is rejected with ``ParseError`` instead of being
coerced.
"""

from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..config import DefaultsConfig
from ..domain.exceptions import CapacityExceeded, InvalidSetting, ParseError
from ..domain.models import (
    AvailabilityConfig,
    BreakDate,
    DayKey,
    Slot,
    parse_date,
    resolve_timezone,
)
from ..domain.schedule import BreakRegister, WeeklySchedule
from ..domain.scheduler import Scheduler
from ..domain.session import Session


class SlotDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: str = Field(alias="from")
    end: str = Field(alias="to")


class BreakDateDTO(BaseModel):
    start: str
    end: Optional[str] = None


class AvailabilityDTO(BaseModel):
    """``{sessionDuration, maxPerDay, weekly, breakDates}``"""
    model_config = ConfigDict(populate_by_name=True)

    session_duration: Optional[int] = Field(default=None, alias="sessionDuration")
    max_per_day: Optional[int] = Field(default=None, alias="maxPerDay")
    weekly: Dict[str, Optional[List[SlotDTO]]] = Field(default_factory=dict)
    break_dates: List[BreakDateDTO] = Field(default_factory=list, alias="breakDates")


class SessionDTO(BaseModel):
    """One entry of the expert's session list."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: str = Field(alias="sessionId")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    status: str = "confirmed"
    candidate_name: str = Field(default="", alias="candidateName")
    topics: List[str] = Field(default_factory=list)
    expert_review: Optional[Dict[str, Any]] = Field(default=None, alias="expertReview")

    @model_validator(mode="before")
    @classmethod
    def fallback_to_document_id(cls, data: Any) -> Any:
        """Older records only carry the storage ``_id``."""
        if isinstance(data, dict) and "sessionId" not in data and "_id" in data:
            data = {**data, "sessionId": str(data["_id"])}
        return data


def scheduler_from_document(data: Any, defaults: DefaultsConfig | None = None) -> Scheduler:
    """
    Build a Scheduler from a fetched availability document.

    Args:
        data: The decoded JSON ``data`` object, or None for an expert that
            never saved availability
        defaults: Settings to use where the document has none

    Raises:
        ParseError: If the document violates the contract
    """
    defaults = defaults or DefaultsConfig()
    if data is None:
        return Scheduler.empty()

    try:
        dto = AvailabilityDTO.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"Malformed availability document: {exc}") from exc

    try:
        config = AvailabilityConfig(
            session_duration_minutes=dto.session_duration or defaults.session_duration_minutes,
            max_slots_per_day=dto.max_per_day or defaults.max_slots_per_day,
        )
    except InvalidSetting as exc:
        raise ParseError(f"Stored availability settings are invalid: {exc.message}") from exc

    slots_by_day: Dict[DayKey, List[Slot]] = {}
    for key, slots in dto.weekly.items():
        slots_by_day[DayKey.parse(key)] = [
            Slot.from_strings(slot.start, slot.end) for slot in slots or []
        ]

    breaks = BreakRegister()
    for entry in dto.break_dates:
        start = parse_date(entry.start)
        end = parse_date(entry.end) if entry.end else start
        if breaks.has_start(start):
            raise ParseError(f"Break date {start.isoformat()} is listed twice")
        breaks = breaks.appended(BreakDate(start=start, end=end))

    try:
        return Scheduler(
            config=config,
            weekly=WeeklySchedule.from_mapping(slots_by_day),
            breaks=breaks,
        )
    except CapacityExceeded as exc:
        raise ParseError(f"Stored weekly schedule exceeds the daily limit: {exc.message}") from exc


def _parse_instant(value: str, timezone: str) -> DateTime:
    try:
        parsed = pendulum.parse(value, tz=resolve_timezone(timezone))
    except (ValueError, TypeError) as exc:
        raise ParseError(f"Invalid timestamp '{value}': {exc}") from exc

    if not isinstance(parsed, DateTime):
        raise ParseError(f"Expected a date and time, got '{value}'")
    return parsed


def session_from_record(record: Any, timezone: str = "local") -> Session:
    """
    Convert one fetched session record.

    Raises:
        ParseError: If required fields are missing or timestamps are malformed
    """
    try:
        dto = SessionDTO.model_validate(record)
    except ValidationError as exc:
        raise ParseError(f"Malformed session record: {exc}") from exc

    return Session(
        id=dto.session_id,
        start_time=_parse_instant(dto.start_time, timezone),
        end_time=_parse_instant(dto.end_time, timezone),
        status=dto.status,
        reviewed=dto.expert_review is not None,
        candidate_name=dto.candidate_name,
        topics=tuple(dto.topics),
    )
