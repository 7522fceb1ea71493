"""
Tests for the REST client, with ``requests.Session`` mocked out.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
import requests

from slotplanner.adapters.api_client import ExpertApiClient
from slotplanner.domain.exceptions import PersistenceFailure


def _response(status: int = 200, body=None, content: bytes = b"x"):
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.content = content
    response.json.return_value = body
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


def _client(response) -> tuple:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = response
    return ExpertApiClient("https://api.example.com/", token="tok", session=session), session


class TestExpertApiClient:
    """Tests for ExpertApiClient."""

    def test_get_availability_unwraps_data(self):
        client, session = _client(_response(body={"data": {"sessionDuration": 30}}))

        document = asyncio.run(client.get_availability())

        assert document == {"sessionDuration": 30}
        method, url = session.request.call_args.args
        assert (method, url) == ("GET", "https://api.example.com/api/expert/availability")
        assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_put_availability_sends_document(self):
        client, session = _client(_response(body={"success": True}))

        asyncio.run(client.put_availability({"maxPerDay": 2}))

        assert session.request.call_args.args[0] == "PUT"
        assert session.request.call_args.kwargs["json"] == {"maxPerDay": 2}

    def test_get_sessions(self):
        client, session = _client(_response(body=[{"sessionId": "SES-1"}]))

        records = asyncio.run(client.get_sessions("expert-1"))

        assert records == [{"sessionId": "SES-1"}]
        assert session.request.call_args.args[1].endswith("/api/sessions/user/expert-1/role/expert")

    def test_get_sessions_unexpected_payload(self):
        client, _ = _client(_response(body={"sessions": []}))
        assert asyncio.run(client.get_sessions("expert-1")) == []

    def test_join_session_permitted(self):
        client, _ = _client(_response(body={"permitted": True, "meetingId": "m-1"}))
        assert asyncio.run(client.join_session("SES-1", "expert-1"))["meetingId"] == "m-1"

    def test_join_session_refused(self):
        client, _ = _client(_response(body={"permitted": False, "message": "Too early"}))
        with pytest.raises(PersistenceFailure, match="Too early"):
            asyncio.run(client.join_session("SES-1", "expert-1"))

    def test_http_error_uses_backend_message(self):
        client, _ = _client(_response(status=400, body={"message": "Review already submitted"}))
        with pytest.raises(PersistenceFailure, match="Review already submitted"):
            asyncio.run(client.post_review("SES-1", {"overallRating": 5}))

    def test_http_error_without_message(self):
        client, _ = _client(_response(status=500, body=None, content=b""))
        with pytest.raises(PersistenceFailure, match="status 500"):
            asyncio.run(client.get_availability())

    def test_transport_error(self):
        session = MagicMock(spec=requests.Session)
        session.request.side_effect = requests.exceptions.ConnectionError("refused")
        client = ExpertApiClient("https://api.example.com", session=session)

        with pytest.raises(PersistenceFailure):
            asyncio.run(client.get_availability())

    def test_empty_body(self):
        client, _ = _client(_response(body=None, content=b""))
        assert asyncio.run(client.get_availability()) is None

    def test_no_token_no_auth_header(self):
        client = ExpertApiClient("https://api.example.com", session=MagicMock(spec=requests.Session))
        assert "Authorization" not in client.headers
