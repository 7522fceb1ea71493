"""
Adapters layer - External integrations (marketplace REST backend).
"""

from .api_client import ExpertApiClient
from .dto import scheduler_from_document, session_from_record
from .mock_api_client import MockApiClient

__all__ = ["ExpertApiClient", "MockApiClient", "scheduler_from_document", "session_from_record"]
