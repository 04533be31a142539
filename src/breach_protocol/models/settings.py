"""Per-session presentation settings."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

FontSize = Literal["small", "medium", "large"]


class SessionSettings(BaseModel):
    """Educational and accessibility preferences for one session.

    `educational_analytics` controls whether display events are written to
    the session's event log.
    """

    model_config = ConfigDict(extra="forbid")

    show_hints: bool = True
    detailed_feedback: bool = True
    learning_objectives: bool = True
    educational_analytics: bool = True
    high_contrast: bool = False
    reduced_motion: bool = False
    font_size: FontSize = "medium"

    @classmethod
    def from_stored(cls, stored: dict[str, Any]) -> "SessionSettings":
        """Build settings from a stored map, ignoring keys no longer known."""
        known = {k: v for k, v in stored.items() if k in cls.model_fields}
        return cls.model_validate(known)


DEFAULT_SETTINGS = SessionSettings()
