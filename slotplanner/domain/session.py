"""
Time-driven lifecycle of a single booked session.

Nothing here stores an "active" flag: the state is recomputed from the
current instant on every call, so these functions are cheap and safe to poll
once a second. The only real mutation is recording a review.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import (
    AlreadyReviewed,
    InvalidReview,
    NotJoinable,
    ParseError,
    SessionNotEnded,
)
from .models import TimeRange
from .outcome import Outcome

JOIN_BUFFER = pendulum.duration(minutes=10)
PAGE_SIZE = 6
MAX_FEEDBACK_LENGTH = 2000


class SessionState(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    ENDED = "ended"
    REVIEWED = "reviewed"


@dataclass(frozen=True)
class Session:
    """
    A booked session as seen by the expert.

    ``status`` is the backend's stored label and is informational only.
    """
    id: str
    start_time: DateTime
    end_time: DateTime
    status: str = "confirmed"
    reviewed: bool = False
    candidate_name: str = ""
    topics: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ParseError(
                f"Session {self.id} ends ({self.end_time}) before it starts ({self.start_time})"
            )

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    @property
    def is_cancelled(self) -> bool:
        return self.status.lower() == "cancelled"


@dataclass(frozen=True)
class Review:
    """Expert feedback for a finished session."""
    overall_rating: int
    technical_rating: int | None = None
    communication_rating: int | None = None
    feedback: str = ""
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()

    def __post_init__(self):
        ratings = {
            "overall": self.overall_rating,
            "technical": self.technical_rating,
            "communication": self.communication_rating,
        }
        for name, value in ratings.items():
            if value is None and name != "overall":
                continue
            if not isinstance(value, int) or not 1 <= value <= 5:
                raise InvalidReview(f"{name.capitalize()} rating must be between 1 and 5")
        if len(self.feedback) > MAX_FEEDBACK_LENGTH:
            raise InvalidReview(f"Feedback is limited to {MAX_FEEDBACK_LENGTH} characters")

    @classmethod
    def from_form(
        cls,
        overall_rating: int,
        technical_rating: int | None = None,
        communication_rating: int | None = None,
        feedback: str = "",
        strengths: str = "",
        weaknesses: str = "",
    ) -> "Review":
        """Build a review from free-text fields; strengths/weaknesses are comma separated."""
        return cls(
            overall_rating=overall_rating,
            technical_rating=technical_rating,
            communication_rating=communication_rating,
            feedback=feedback.strip(),
            strengths=split_tags(strengths),
            weaknesses=split_tags(weaknesses),
        )

    def to_payload(self) -> dict:
        payload = {
            "overallRating": self.overall_rating,
            "feedback": self.feedback,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "reviewerRole": "expert",
        }
        if self.technical_rating is not None:
            payload["technicalRating"] = self.technical_rating
        if self.communication_rating is not None:
            payload["communicationRating"] = self.communication_rating
        return payload


def split_tags(text: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in text.split(",") if part.strip())


def is_active(now: DateTime, start: DateTime, end: DateTime) -> bool:
    """True iff ``start - 10 min <= now < end``."""
    return start - JOIN_BUFFER <= now < end


def state_at(session: Session, now: DateTime) -> SessionState:
    if session.reviewed:
        return SessionState.REVIEWED
    if now >= session.end_time:
        return SessionState.ENDED
    if is_active(now, session.start_time, session.end_time):
        return SessionState.ACTIVE
    return SessionState.SCHEDULED


def join(session: Session, now: DateTime) -> Outcome[Session]:
    """Permit joining only inside the join window."""
    if state_at(session, now) is not SessionState.ACTIVE:
        if now < session.start_time - JOIN_BUFFER:
            opens = (session.start_time - JOIN_BUFFER).format("HH:mm")
            return Outcome.failure(session, NotJoinable(f"Session opens for joining at {opens}"))
        return Outcome.failure(session, NotJoinable("Session has ended"))
    return Outcome.success(session)


def submit_review(session: Session, review: Review, now: DateTime) -> Outcome[Session]:
    """Record a review once the session has ended; a second review is rejected."""
    state = state_at(session, now)
    if state is SessionState.REVIEWED:
        return Outcome.failure(session, AlreadyReviewed())
    if state is not SessionState.ENDED:
        return Outcome.failure(session, SessionNotEnded())
    return Outcome.success(replace(session, reviewed=True))


def _ceil_minutes(seconds: float) -> int:
    return math.ceil(seconds / 60)


def timer_display(now: DateTime, start: DateTime, end: DateTime) -> str:
    """
    Countdown label for a session card.

    Minutes are rounded up so the last seconds before a boundary still read
    "1m". Countdowns longer than an hour switch to whole (rounded up) hours.
    """
    if now < start:
        minutes = _ceil_minutes((start - now).total_seconds())
        if minutes > 60:
            return f"Starts in {math.ceil(minutes / 60)}h"
        return f"Starts in {minutes}m"

    if now < end:
        return f"Ends in {_ceil_minutes((end - now).total_seconds())}m"

    return "Ended"


@dataclass(frozen=True)
class SessionQuery:
    """Search, status filter and paging over the expert's session list."""
    search: str = ""
    status: str = "all"

    def matches(self, session: Session) -> bool:
        if self.status.lower() != "all" and session.status.lower() != self.status.lower():
            return False

        term = self.search.strip().lower()
        if not term:
            return True
        return (
            term in session.id.lower()
            or term in session.candidate_name.lower()
            or any(term in topic.lower() for topic in session.topics)
        )

    def apply(self, sessions: Iterable[Session]) -> List[Session]:
        """Matching sessions, newest first."""
        matching = [session for session in sessions if self.matches(session)]
        return sorted(matching, key=lambda s: s.start_time, reverse=True)

    @staticmethod
    def page_count(sessions: Sequence[Session]) -> int:
        return math.ceil(len(sessions) / PAGE_SIZE)

    @staticmethod
    def page(sessions: Sequence[Session], number: int) -> List[Session]:
        """One-based page of at most ``PAGE_SIZE`` sessions."""
        start = (max(number, 1) - 1) * PAGE_SIZE
        return list(sessions[start:start + PAGE_SIZE])
