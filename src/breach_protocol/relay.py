"""Text relay to the Anthropic Messages API.

The relay is stateless: each call sends the wargame system prompt, the
caller's conversation history and the new user message, and returns the text
of the first content block. It never touches session state.

Failure mapping (carried on RelayUnavailable.status_code):
- 502: not configured, unreachable, timed out, non-JSON body, error payload
- 500: any other response shape
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import requests

from breach_protocol.errors import RelayUnavailable
from breach_protocol.prompts import RELAY_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_RELAY_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_RELAY_MODEL = "claude-3-haiku-20240307"
DEFAULT_MAX_TOKENS = 256
DEFAULT_TIMEOUT = 30.0
ANTHROPIC_VERSION = "2023-06-01"


@dataclass
class RelayConfig:
    """Connection settings for the upstream API."""

    api_key: str | None = None
    url: str = DEFAULT_RELAY_URL
    model: str = DEFAULT_RELAY_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Read relay settings from environment variables."""
        return cls(
            api_key=os.environ.get("ANTHROPIC_API_KEY"),
            url=os.environ.get("BREACH_PROTOCOL_RELAY_URL", DEFAULT_RELAY_URL),
            model=os.environ.get("BREACH_PROTOCOL_RELAY_MODEL", DEFAULT_RELAY_MODEL),
            max_tokens=int(os.environ.get("BREACH_PROTOCOL_RELAY_MAX_TOKENS", DEFAULT_MAX_TOKENS)),
            timeout=float(os.environ.get("BREACH_PROTOCOL_RELAY_TIMEOUT", DEFAULT_TIMEOUT)),
        )


def build_messages(user: str, history: Any = None) -> list[dict]:
    """Prior turns followed by the new user message.

    History that is not a list is ignored, as are entries that are not objects.
    """
    messages = []
    if isinstance(history, list):
        messages.extend(entry for entry in history if isinstance(entry, dict))
    messages.append({"role": "user", "content": user})
    return messages


class RelayService:
    """Synchronous bridge to the upstream text-generation API."""

    def __init__(self, config: RelayConfig | None = None, system_prompt: str = RELAY_SYSTEM_PROMPT):
        self.config = config or RelayConfig.from_env()
        self.system_prompt = system_prompt

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    def complete(self, user: str, history: Any = None) -> str:
        """Send one user message and return the reply text.

        Args:
            user: New user message (non-empty)
            history: Prior turns as a list of {role, content} dicts

        Returns:
            Text of the first content block in the upstream response

        Raises:
            RelayUnavailable: On any upstream or configuration failure
        """
        if not self.is_configured:
            logger.warning("Relay called but ANTHROPIC_API_KEY is not set")
            raise RelayUnavailable("Relay is not configured: ANTHROPIC_API_KEY is not set")

        payload = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "system": self.system_prompt,
            "messages": build_messages(user, history),
        }
        headers = {
            "x-api-key": self.config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        try:
            response = requests.post(
                self.config.url, json=payload, headers=headers, timeout=self.config.timeout
            )
        except requests.Timeout as e:
            logger.error(f"Upstream request timed out after {self.config.timeout}s")
            raise RelayUnavailable("Upstream request timed out", details=str(e)) from e
        except requests.RequestException as e:
            logger.error(f"Upstream request failed: {e}")
            raise RelayUnavailable("Upstream service unreachable", details=str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Upstream returned non-JSON response (HTTP {response.status_code})")
            raise RelayUnavailable(
                "Anthropic API returned non-JSON response", details=response.text
            ) from e

        if isinstance(data, dict) and data.get("error"):
            logger.error(f"Upstream error payload: {data['error']}")
            raise RelayUnavailable("Anthropic API error", details=data["error"])

        text = _first_text(data)
        if text is None:
            logger.error("Upstream response carried no text content")
            raise RelayUnavailable("No valid content from Anthropic", status_code=500, details=data)

        return text


def _first_text(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    content = data.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    return text if isinstance(text, str) and text else None
