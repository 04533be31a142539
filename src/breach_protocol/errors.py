"""Exception hierarchy for Breach Protocol.

Catalog problems are fatal at startup. Everything else rejects a single
operation and leaves session state untouched.
"""

from __future__ import annotations

from typing import Any


class BreachProtocolError(Exception):
    """Base class for all domain errors."""


class ValidationError(BreachProtocolError):
    """Authored scenario content is malformed.

    Raised once, when the catalog is loaded. The application cannot start
    with an invalid catalog.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class UnknownChoiceError(BreachProtocolError):
    """A submitted choice id does not belong to the scenario."""

    def __init__(self, scenario_id: str, choice_id: str) -> None:
        super().__init__(f"Choice '{choice_id}' not found in scenario '{scenario_id}'")
        self.scenario_id = scenario_id
        self.choice_id = choice_id


class InvalidStateError(BreachProtocolError):
    """An engine operation was called in the wrong lifecycle state."""

    def __init__(self, operation: str, status: str) -> None:
        super().__init__(f"Cannot {operation} while session is {status}")
        self.operation = operation
        self.status = status


class SessionNotFoundError(BreachProtocolError):
    """No live session is registered under this id (never created, deleted or evicted)."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session '{session_id}' not found")
        self.session_id = session_id


class RelayUnavailable(BreachProtocolError):
    """The upstream text-generation service failed or could not be reached.

    Attributes:
        status_code: HTTP status the web layer should answer with (502 for
            upstream failures, 500 for unexpected shapes or local faults)
        details: Optional payload forwarded to the client
    """

    def __init__(self, message: str, status_code: int = 502, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details
