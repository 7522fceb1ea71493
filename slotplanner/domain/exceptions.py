"""
Domain-specific exception hierarchy for the availability scheduler.

Expected domain violations are not raised by the core; they travel inside an
``Outcome`` instead. Only ``ParseError`` (bad input data) is raised directly,
and ``PersistenceFailure`` is raised by adapters and converted by services.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""

    default_message = "Scheduling error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ParseError(SchedulingError, ValueError):
    """Raised when a time string, date or day key is malformed."""

    default_message = "Invalid input"


class CapacityExceeded(SchedulingError):
    """A day already holds the maximum number of slots."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Daily limit reached ({limit} sessions)")


class DuplicateBreakDate(SchedulingError):
    default_message = "Date already blocked"


class IndexOutOfRange(SchedulingError):
    """An index points past the end of a (possibly shrunk) list."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Index {index} is out of range (list has {size} entries)")


class InvalidSetting(SchedulingError):
    default_message = "Invalid availability setting"


class NotJoinable(SchedulingError):
    default_message = "Cannot join session at this time"


class SessionNotEnded(SchedulingError):
    default_message = "Session has not ended yet"


class AlreadyReviewed(SchedulingError):
    default_message = "Review already submitted for this session"


class InvalidReview(SchedulingError):
    default_message = "Invalid review"


class PersistenceFailure(SchedulingError):
    """Raised when the backend store cannot be read or written."""

    default_message = "Failed to reach the availability store"
