"""Route blueprints for the webapp."""

from . import relay, sessions

__all__ = ["relay", "sessions"]
