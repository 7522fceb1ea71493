"""
Tests for the SessionService orchestration layer.
"""

import asyncio
from typing import Any, Dict, List

import pendulum

from slotplanner.adapters.mock_api_client import MockApiClient
from slotplanner.domain.exceptions import (
    AlreadyReviewed,
    NotJoinable,
    PersistenceFailure,
    SessionNotEnded,
)
from slotplanner.domain.session import Review, SessionQuery
from slotplanner.services.session_service import SessionService

TZ = "UTC"
NOW = pendulum.datetime(2024, 11, 25, 10, 0, tz=TZ)


def _record(session_id: str, start: str, end: str, **extra) -> Dict[str, Any]:
    return {"sessionId": session_id, "startTime": start, "endTime": end, **extra}


class StubSessionStore:
    """Minimal stub matching SessionStoreProtocol."""

    def __init__(self, records: List[Dict[str, Any]], fail_writes: bool = False):
        self.records = records
        self.fail_writes = fail_writes
        self.joined: List[str] = []
        self.reviews: Dict[str, Dict[str, Any]] = {}

    async def get_sessions(self, user_id):
        return self.records

    async def join_session(self, session_id, user_id):
        self.joined.append(session_id)
        return {"permitted": True, "meetingId": f"room-{session_id}"}

    async def post_review(self, session_id, payload):
        if self.fail_writes:
            raise PersistenceFailure("backend unreachable")
        self.reviews[session_id] = payload


def _service(records, **kwargs):
    store = StubSessionStore(records, **kwargs)
    return SessionService(store, user_id="expert-1", timezone=TZ), store


def test_list_sessions_skips_malformed_records():
    """A bad record is logged and skipped; the rest still load."""
    service, _ = _service([
        _record("SES-1", "2024-11-25T08:00:00Z", "2024-11-25T08:30:00Z"),
        _record("SES-2", "garbage", "2024-11-25T08:30:00Z"),
        _record("SES-3", "2024-11-25T12:00:00Z", "2024-11-25T12:30:00Z"),
    ])

    sessions = asyncio.run(service.list_sessions())

    assert [s.id for s in sessions] == ["SES-3", "SES-1"]


def test_list_sessions_with_query():
    service, _ = _service([
        _record("SES-1", "2024-11-25T08:00:00Z", "2024-11-25T08:30:00Z", candidateName="Asha"),
        _record("SES-2", "2024-11-25T09:00:00Z", "2024-11-25T09:30:00Z", candidateName="Rahul"),
    ])

    sessions = asyncio.run(service.list_sessions(SessionQuery(search="asha")))

    assert [s.id for s in sessions] == ["SES-1"]


def test_find_session():
    service, _ = _service([_record("SES-1", "2024-11-25T08:00:00Z", "2024-11-25T08:30:00Z")])
    assert asyncio.run(service.find_session("SES-1")).id == "SES-1"
    assert asyncio.run(service.find_session("SES-9")) is None


def test_join_inside_window():
    service, store = _service([_record("SES-1", "2024-11-25T10:05:00Z", "2024-11-25T10:35:00Z")])
    session = asyncio.run(service.find_session("SES-1"))

    outcome = asyncio.run(service.join(session, now=NOW))

    assert outcome.ok
    assert outcome.value.meeting_id == "room-SES-1"
    assert store.joined == ["SES-1"]


def test_join_too_early_does_not_call_backend():
    service, store = _service([_record("SES-1", "2024-11-25T11:00:00Z", "2024-11-25T11:30:00Z")])
    session = asyncio.run(service.find_session("SES-1"))

    outcome = asyncio.run(service.join(session, now=NOW))

    assert isinstance(outcome.error, NotJoinable)
    assert store.joined == []


def test_submit_review_after_end():
    service, store = _service([_record("SES-1", "2024-11-25T08:00:00Z", "2024-11-25T08:30:00Z")])
    session = asyncio.run(service.find_session("SES-1"))

    outcome = asyncio.run(service.submit_review(session, Review(overall_rating=5, feedback="Great"), now=NOW))

    assert outcome.ok
    assert outcome.value.reviewed
    assert store.reviews["SES-1"]["overallRating"] == 5


def test_submit_review_before_end():
    service, store = _service([_record("SES-1", "2024-11-25T09:45:00Z", "2024-11-25T10:15:00Z")])
    session = asyncio.run(service.find_session("SES-1"))

    outcome = asyncio.run(service.submit_review(session, Review(overall_rating=5), now=NOW))

    assert isinstance(outcome.error, SessionNotEnded)
    assert store.reviews == {}


def test_submit_review_twice():
    service, _ = _service([
        _record("SES-1", "2024-11-25T08:00:00Z", "2024-11-25T08:30:00Z", expertReview={"overallRating": 4}),
    ])
    session = asyncio.run(service.find_session("SES-1"))

    outcome = asyncio.run(service.submit_review(session, Review(overall_rating=5), now=NOW))

    assert isinstance(outcome.error, AlreadyReviewed)


def test_submit_review_backend_failure():
    service, _ = _service(
        [_record("SES-1", "2024-11-25T08:00:00Z", "2024-11-25T08:30:00Z")],
        fail_writes=True,
    )
    session = asyncio.run(service.find_session("SES-1"))

    outcome = asyncio.run(service.submit_review(session, Review(overall_rating=5), now=NOW))

    assert isinstance(outcome.error, PersistenceFailure)
    assert not outcome.value.reviewed


def test_mock_store_marks_reviewed_sessions(tmp_path):
    """After a review the mock store reports the session as reviewed."""
    store = MockApiClient(data_file=tmp_path / "store.json")
    service = SessionService(store, user_id="expert-1")
    session = asyncio.run(service.find_session("SES-1001"))

    outcome = asyncio.run(service.submit_review(session, Review(overall_rating=4)))
    reloaded = asyncio.run(service.find_session("SES-1001"))

    assert outcome.ok
    assert reloaded.reviewed


def test_mock_store_accepts_document_id_records():
    """Records stored with only ``_id`` still list and pick up reviews."""
    store = MockApiClient()
    store.store["sessions"] = [
        {"_id": "abc123", "startTime": "2024-11-25T08:00:00Z", "endTime": "2024-11-25T08:30:00Z"},
    ]
    store.store["reviews"] = {"abc123": {"overallRating": 4}}
    service = SessionService(store, user_id="expert-1", timezone=TZ)

    sessions = asyncio.run(service.list_sessions())

    assert [s.id for s in sessions] == ["abc123"]
    assert sessions[0].reviewed
