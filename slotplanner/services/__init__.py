"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import AvailabilityService, AvailabilityStoreProtocol
from .session_service import JoinTicket, SessionService, SessionStoreProtocol

__all__ = [
    "AvailabilityService",
    "AvailabilityStoreProtocol",
    "JoinTicket",
    "SessionService",
    "SessionStoreProtocol",
]
