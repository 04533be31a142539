"""Flask application factory."""

import logging
import os

from flask import Flask, jsonify

from breach_protocol.engine import ScenarioCatalog
from breach_protocol.relay import RelayConfig, RelayService
from breach_protocol.storage import StorageBackend, get_event_log_repository, get_settings_repository

from .config import Config
from .services.session_registry import SessionRegistry
from .services.session_service import SessionService

logger = logging.getLogger(__name__)


def load_catalog(scenarios_file: str | None) -> ScenarioCatalog:
    """Load the configured catalog, or the bundled one.

    Raises:
        ValidationError: If the catalog is malformed. The app must not start.
    """
    if scenarios_file:
        return ScenarioCatalog.from_file(scenarios_file)
    return ScenarioCatalog.default()


def create_app(config_class=Config):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Validate content at startup - FAIL HARD on a broken catalog
    catalog = load_catalog(app.config.get("SCENARIOS_FILE"))

    backend = StorageBackend(app.config.get("STORAGE_BACKEND", "file").lower())
    data_path = app.config["DATA_PATH"]
    database_uri = app.config["DATABASE_URI"]

    relay = RelayService(
        RelayConfig(
            api_key=app.config.get("ANTHROPIC_API_KEY"),
            url=app.config["RELAY_URL"],
            model=app.config["RELAY_MODEL"],
            max_tokens=app.config["RELAY_MAX_TOKENS"],
            timeout=app.config["RELAY_TIMEOUT"],
        )
    )
    if not relay.is_configured:
        logger.warning("ANTHROPIC_API_KEY is not set - POST /api/ai will answer 502")

    app.extensions["breach_protocol.catalog"] = catalog
    app.extensions["breach_protocol.relay"] = relay
    app.extensions["breach_protocol.sessions"] = SessionService(
        catalog=catalog,
        registry=SessionRegistry(
            catalog,
            max_sessions=app.config["MAX_SESSIONS"],
            idle_timeout=app.config["SESSION_IDLE_TIMEOUT"],
        ),
        event_log=get_event_log_repository(backend, data_path=data_path, database_uri=database_uri),
        settings_store=get_settings_repository(backend, data_path=data_path, database_uri=database_uri),
    )

    # Register blueprints
    from .routes import relay as relay_routes
    from .routes import sessions

    app.register_blueprint(relay_routes.bp)
    app.register_blueprint(sessions.bp)

    @app.route("/health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "scenarios": len(catalog),
                "relay_configured": relay.is_configured,
            }
        )

    logger.info(f"Breach Protocol ready: {len(catalog)} scenarios, storage={backend.value}")
    return app


def main():
    """Entry point for `breach-protocol-web` command."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5173)))


if __name__ == "__main__":
    main()
