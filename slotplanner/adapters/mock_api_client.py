"""
Mock marketplace backend for running without a server.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pendulum

from ..domain.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)


def _seed_store() -> Dict[str, Any]:
    """Demo data: a weekday pattern and a few sessions around the current time."""
    now = pendulum.now().start_of("minute")

    def session(session_id: str, name: str, starts_in: int, topics: List[str]) -> Dict[str, Any]:
        start = now.add(minutes=starts_in)
        return {
            "sessionId": session_id,
            "candidateName": name,
            "startTime": start.to_iso8601_string(),
            "endTime": start.add(minutes=30).to_iso8601_string(),
            "status": "confirmed",
            "topics": topics,
        }

    return {
        "availability": {
            "sessionDuration": 30,
            "maxPerDay": 4,
            "weekly": {
                "mon": [{"from": "09:00", "to": "09:30"}, {"from": "14:00", "to": "14:30"}],
                "wed": [{"from": "10:00", "to": "10:30"}],
                "fri": [{"from": "16:00", "to": "16:30"}],
            },
            "breakDates": [],
        },
        "sessions": [
            session("SES-1001", "Asha Verma", -120, ["System Design"]),
            session("SES-1002", "Rahul Nair", 5, ["Python", "APIs"]),
            session("SES-1003", "Meera Iyer", 24 * 60, ["Behavioural"]),
        ],
        "reviews": {},
    }


class MockApiClient:
    """
    Stand-in for ``ExpertApiClient`` backed by a JSON file.

    The store is seeded with demo data on first use and written back after
    every successful write, so CLI runs in mock mode see each other's edits.
    Set ``fail_writes`` to simulate an unreachable backend.
    """

    def __init__(self, data_file: Path | None = None, fail_writes: bool = False):
        """
        Initialize the mock client.

        Args:
            data_file: Where to persist the store; in-memory only when None
            fail_writes: Raise PersistenceFailure on every write
        """
        self.data_file = data_file
        self.fail_writes = fail_writes
        self.store = self._load_store()

    def _load_store(self) -> Dict[str, Any]:
        if self.data_file and self.data_file.exists():
            try:
                with open(self.data_file, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (OSError, ValueError) as exc:
                logger.warning("Could not read mock store %s, reseeding: %s", self.data_file, exc)
        return _seed_store()

    def _save_store(self) -> None:
        if self.data_file is None:
            return
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.data_file, "w", encoding="utf-8") as f:
                json.dump(self.store, f, indent=2)
        except OSError as exc:
            raise PersistenceFailure(f"Could not write mock store {self.data_file}: {exc}") from exc

    def _check_writable(self) -> None:
        if self.fail_writes:
            raise PersistenceFailure("Mock backend is configured to reject writes")

    async def get_availability(self) -> Dict[str, Any] | None:
        return copy.deepcopy(self.store.get("availability"))

    async def put_availability(self, document: Dict[str, Any]) -> None:
        self._check_writable()
        self.store["availability"] = copy.deepcopy(document)
        self._save_store()

    async def get_sessions(self, user_id: str) -> List[Dict[str, Any]]:
        reviews = self.store.get("reviews", {})
        records = []
        for record in self.store.get("sessions", []):
            record = copy.deepcopy(record)
            key = str(record.get("sessionId") or record.get("_id"))
            if key in reviews:
                record["expertReview"] = reviews[key]
            records.append(record)
        return records

    async def join_session(self, session_id: str, user_id: str) -> Dict[str, Any]:
        return {"permitted": True, "meetingId": f"mock-{session_id}"}

    async def post_review(self, session_id: str, payload: Dict[str, Any]) -> None:
        self._check_writable()
        reviews = self.store.setdefault("reviews", {})
        if session_id in reviews:
            raise PersistenceFailure("Review already submitted for this session")
        reviews[session_id] = copy.deepcopy(payload)
        self._save_store()
