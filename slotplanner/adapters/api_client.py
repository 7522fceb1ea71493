"""
Marketplace REST client for availability and session data.
"""

import asyncio
import logging
from typing import Any, Dict, List

import requests

from ..domain.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)


class ExpertApiClient:
    """
    Client for the expert-facing endpoints of the marketplace backend.

    Each call is a single request/response with no retry. Blocking HTTP is
    pushed to a worker thread so the methods can be awaited.
    """

    def __init__(self, base_url: str, token: str = "", timeout: int = 30, session: requests.Session | None = None):
        """
        Initialize the API client.

        Args:
            base_url: Backend root, e.g. ``https://api.example.com``
            token: Bearer token; omitted from headers when empty
            timeout: Per-request timeout in seconds
            session: Optional preconfigured ``requests.Session``
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    async def get_availability(self) -> Dict[str, Any] | None:
        """Fetch the expert's availability document (``data`` of the response)."""
        body = await self._request("GET", "/api/expert/availability")
        return body.get("data") if isinstance(body, dict) else None

    async def put_availability(self, document: Dict[str, Any]) -> None:
        """Replace the stored availability document as a whole."""
        await self._request("PUT", "/api/expert/availability", json=document)

    async def get_sessions(self, user_id: str) -> List[Dict[str, Any]]:
        body = await self._request("GET", f"/api/sessions/user/{user_id}/role/expert")
        if not isinstance(body, list):
            logger.warning("Unexpected session list payload of type %s", type(body).__name__)
            return []
        return body

    async def join_session(self, session_id: str, user_id: str) -> Dict[str, Any]:
        """Ask the backend for meeting access; only called inside the join window."""
        body = await self._request("POST", f"/api/sessions/{session_id}/join", json={"userId": user_id})
        if not isinstance(body, dict) or not body.get("permitted"):
            message = body.get("message") if isinstance(body, dict) else None
            raise PersistenceFailure(message or "Backend refused to open the session")
        return body

    async def post_review(self, session_id: str, payload: Dict[str, Any]) -> None:
        await self._request("POST", f"/api/sessions/{session_id}/review", json=payload)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._send, method, path, **kwargs)

    def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Perform one HTTP call and decode the JSON body.

        Raises:
            PersistenceFailure: On transport errors, non-2xx responses or
                undecodable bodies
        """
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            raise PersistenceFailure(self._error_message(exc.response, method, path)) from exc
        except requests.exceptions.RequestException as exc:
            raise PersistenceFailure(f"{method} {path} failed: {exc}") from exc

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise PersistenceFailure(f"{method} {path} returned invalid JSON") from exc

    @staticmethod
    def _error_message(response: requests.Response | None, method: str, path: str) -> str:
        """Prefer the backend's own ``message`` field for user-facing errors."""
        if response is None:
            return f"{method} {path} failed"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
        return f"{method} {path} failed with status {response.status_code}"
