"""
Application service for loading and saving an expert's availability.

Saving is transactional from the caller's point of view: a command is applied
to a working copy, the copy is persisted, and only a successful write makes it
the new committed snapshot. On failure the committed snapshot comes back
unchanged together with the error. Any optimistic state the caller already
showed is not reverted here.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Protocol

from ..adapters.dto import scheduler_from_document
from ..config import DefaultsConfig
from ..domain.exceptions import PersistenceFailure
from ..domain.outcome import Outcome
from ..domain.scheduler import Scheduler

logger = logging.getLogger(__name__)

Command = Callable[[Scheduler], Outcome[Scheduler]]


class AvailabilityStoreProtocol(Protocol):
    """Protocol describing the persistence calls needed by the service."""

    async def get_availability(self) -> Dict[str, Any] | None:
        """Return the stored document, or None if nothing was saved yet."""

    async def put_availability(self, document: Dict[str, Any]) -> None:
        """Replace the stored document."""


class AvailabilityService:
    """
    Reads and writes whole Scheduler snapshots.

    Concurrent editors are not reconciled: the last successful save wins.
    """

    def __init__(
        self,
        store: AvailabilityStoreProtocol,
        defaults: DefaultsConfig | None = None,
    ) -> None:
        self._store = store
        self._defaults = defaults or DefaultsConfig()

    async def load(self) -> Scheduler:
        """
        Fetch and validate the stored snapshot.

        Raises:
            PersistenceFailure: If the store cannot be reached
            ParseError: If the stored document violates the contract
        """
        document = await self._store.get_availability()
        return scheduler_from_document(document, self._defaults)

    async def save(self, working: Scheduler, committed: Scheduler) -> Outcome[Scheduler]:
        """Persist ``working``; on failure hand back ``committed`` untouched."""
        try:
            await self._store.put_availability(working.to_document())
        except PersistenceFailure as exc:
            logger.warning("Saving availability failed: %s", exc.message)
            return Outcome.failure(committed, exc)

        return Outcome.success(working)

    async def apply(self, committed: Scheduler, command: Command) -> Outcome[Scheduler]:
        """
        Run one command against a working copy and save the result.

        Rejected commands are returned as-is without touching the store.
        """
        outcome = command(committed)
        if not outcome.ok:
            return outcome
        return await self.save(outcome.value, committed)
