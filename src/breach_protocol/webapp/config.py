"""Flask configuration."""

import os
from pathlib import Path


class Config:
    """Base configuration."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-in-prod")
    MAX_CONTENT_LENGTH = 1024 * 1024

    # Storage - instance folder is at project root
    PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
    INSTANCE_PATH = PROJECT_ROOT / "instance"
    STORAGE_BACKEND = os.environ.get("BREACH_PROTOCOL_STORAGE_BACKEND", "file")
    DATA_PATH = os.environ.get("BREACH_PROTOCOL_DATA_PATH", str(INSTANCE_PATH / "data"))
    DATABASE_URI = os.environ.get(
        "BREACH_PROTOCOL_DATABASE_URI", str(INSTANCE_PATH / "breach_protocol.db")
    )

    # Live sessions - least recently used is evicted past the cap
    MAX_SESSIONS = int(os.environ.get("BREACH_PROTOCOL_MAX_SESSIONS", 1000))
    SESSION_IDLE_TIMEOUT = float(os.environ.get("BREACH_PROTOCOL_SESSION_IDLE_TIMEOUT", 3600))

    # Scenarios - None means the bundled catalog
    SCENARIOS_FILE = os.environ.get("BREACH_PROTOCOL_SCENARIOS_FILE")

    # Relay
    ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY")
    RELAY_URL = os.environ.get("BREACH_PROTOCOL_RELAY_URL", "https://api.anthropic.com/v1/messages")
    RELAY_MODEL = os.environ.get("BREACH_PROTOCOL_RELAY_MODEL", "claude-3-haiku-20240307")
    RELAY_MAX_TOKENS = int(os.environ.get("BREACH_PROTOCOL_RELAY_MAX_TOKENS", 256))
    RELAY_TIMEOUT = float(os.environ.get("BREACH_PROTOCOL_RELAY_TIMEOUT", 30))


class TestConfig(Config):
    """Testing configuration."""

    TESTING = True
    SECRET_KEY = "test-secret-key"
    ANTHROPIC_API_KEY = "test-api-key"
    SCENARIOS_FILE = None
    STORAGE_BACKEND = "file"
