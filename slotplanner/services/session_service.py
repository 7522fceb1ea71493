"""
Application service for the expert's booked sessions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

import pendulum
from pendulum import DateTime

from ..adapters.dto import session_from_record
from ..domain import session as lifecycle
from ..domain.exceptions import ParseError, PersistenceFailure
from ..domain.outcome import Outcome
from ..domain.session import Review, Session, SessionQuery

logger = logging.getLogger(__name__)


class SessionStoreProtocol(Protocol):
    """Protocol describing the session calls needed by the service."""

    async def get_sessions(self, user_id: str) -> List[Dict[str, Any]]:
        """Return raw session records for the expert."""

    async def join_session(self, session_id: str, user_id: str) -> Dict[str, Any]:
        """Return meeting access details."""

    async def post_review(self, session_id: str, payload: Dict[str, Any]) -> None:
        """Store the expert's review."""


@dataclass(frozen=True)
class JoinTicket:
    session: Session
    meeting_id: str | None = None


class SessionService:
    """
    Lists sessions and performs the join and review actions.

    State checks happen locally before any request is sent, so a refused
    join or an early review never reaches the backend.
    """

    def __init__(self, store: SessionStoreProtocol, user_id: str, timezone: str = "local") -> None:
        self._store = store
        self._user_id = user_id
        self._timezone = timezone

    async def list_sessions(self, query: SessionQuery | None = None) -> List[Session]:
        """
        Fetch, parse and filter the expert's sessions, newest first.

        Records that cannot be parsed are skipped with a warning.
        """
        records = await self._store.get_sessions(self._user_id)

        sessions: List[Session] = []
        for record in records:
            try:
                sessions.append(session_from_record(record, self._timezone))
            except ParseError as exc:
                logger.warning("Skipping session record: %s", exc.message)

        return (query or SessionQuery()).apply(sessions)

    async def find_session(self, session_id: str) -> Session | None:
        for session in await self.list_sessions():
            if session.id == session_id:
                return session
        return None

    async def join(self, session: Session, now: DateTime | None = None) -> Outcome[JoinTicket]:
        now = now or pendulum.now()
        check = lifecycle.join(session, now)
        if not check.ok:
            return Outcome.failure(JoinTicket(session), check.error)

        try:
            access = await self._store.join_session(session.id, self._user_id)
        except PersistenceFailure as exc:
            logger.warning("Joining session %s failed: %s", session.id, exc.message)
            return Outcome.failure(JoinTicket(session), exc)

        return Outcome.success(JoinTicket(session, access.get("meetingId")))

    async def submit_review(self, session: Session, review: Review, now: DateTime | None = None) -> Outcome[Session]:
        """Submit once, after the session ended; the returned session is marked reviewed."""
        now = now or pendulum.now()
        outcome = lifecycle.submit_review(session, review, now)
        if not outcome.ok:
            return outcome

        try:
            await self._store.post_review(session.id, review.to_payload())
        except PersistenceFailure as exc:
            logger.warning("Submitting review for %s failed: %s", session.id, exc.message)
            return Outcome.failure(session, exc)

        return outcome
