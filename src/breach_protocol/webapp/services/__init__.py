"""Services for the webapp."""

from .session_registry import SessionRegistry
from .session_service import SessionService, get_session_service

__all__ = ["SessionRegistry", "SessionService", "get_session_service"]
