"""
Wall-clock arithmetic on ``HH:MM`` strings.

Times carry no date and no zone. Internally a time of day is the number of
minutes since midnight in ``[0, 1440)``.
"""

from .exceptions import ParseError

MINUTES_PER_DAY = 24 * 60


def to_minutes(hhmm: str) -> int:
    """
    Parse a 24-hour ``HH:MM`` string into minutes since midnight.

    Raises:
        ParseError: If the string is not two numeric fields within
            ``[0, 23]:[0, 59]``
    """
    if not isinstance(hhmm, str):
        raise ParseError(f"Time must be a string in HH:MM format, got {hhmm!r}")

    parts = hhmm.strip().split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise ParseError(f"Invalid time '{hhmm}', expected HH:MM")

    hours, minutes = int(parts[0]), int(parts[1])
    if not 0 <= hours <= 23 or not 0 <= minutes <= 59:
        raise ParseError(f"Time out of range: '{hhmm}'")

    return hours * 60 + minutes


def from_minutes(total_minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``, wrapping past midnight."""
    adjusted = total_minutes % MINUTES_PER_DAY
    return f"{adjusted // 60:02d}:{adjusted % 60:02d}"


def add_duration(start: str, duration_minutes: int) -> str:
    """
    Return the end time of a window that starts at ``start``.

    Crossing midnight is not an error: ``add_duration("23:30", 60)`` is
    ``"00:30"``.
    """
    return from_minutes(to_minutes(start) + duration_minutes)


def to_12_hour(hhmm: str) -> str:
    """Display form used by the editor, e.g. ``"14:30"`` -> ``"02:30 PM"``."""
    minutes = to_minutes(hhmm)
    hours = minutes // 60
    period = "PM" if hours >= 12 else "AM"
    display_hour = hours % 12 or 12
    return f"{display_hour:02d}:{minutes % 60:02d} {period}"
