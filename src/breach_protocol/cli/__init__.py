"""Breach Protocol CLI module.

Provides a Textual-based terminal interface for the AI safety simulation.

Usage:
    breach-protocol

Or directly:
    python -m breach_protocol.cli.app
"""

from breach_protocol.cli.app import BreachProtocolApp, main

__all__ = ["BreachProtocolApp", "main"]
