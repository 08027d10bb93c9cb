"""Flask application serving the admin authentication test pages."""

import logging
import secrets
import signal
import sys
from datetime import datetime, timezone

from flask import Flask, jsonify, render_template, request

from .. import __version__
from ..auth.sources import AuthSourceRegistry
from ..auth.state import ExceptionStateStore
from ..config.manager import load_config
from ..config.schema import Config
from ..utils.exceptions import SAMLTestUtilError


# Server state tracking
_server_start_time: datetime | None = None
_request_count: int = 0
_config: Config | None = None
_registry: AuthSourceRegistry | None = None
_state_store: ExceptionStateStore | None = None

# Create Flask app
app = Flask(__name__)

logger = logging.getLogger("saml_test_util.web")


@app.before_request
def log_request():
    """Log all incoming requests."""
    global _request_count
    _request_count += 1

    logger.info(f"Request #{_request_count}: {request.method} {request.path}")


@app.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint.

    Returns JSON with server status, version, configured sources, pending
    exception states, uptime, request count, and timestamp.
    """
    uptime_seconds = 0
    if _server_start_time:
        uptime_seconds = int((datetime.now(timezone.utc) - _server_start_time).total_seconds())

    health_response = {
        "status": "healthy",
        "version": __version__,
        "auth_sources": [source["id"] for source in _registry.available()] if _registry else [],
        "pending_states": len(_state_store) if _state_store is not None else 0,
        "uptime_seconds": uptime_seconds,
        "request_count": _request_count,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    return jsonify(health_response), 200


@app.errorhandler(SAMLTestUtilError)
def handle_saml_test_util_error(error: SAMLTestUtilError):
    """Render the error page for application errors."""
    logger.warning(f"{error.error_code} on {request.path}: {error}")
    return (
        render_template(
            "error.html",
            error_code=error.error_code,
            message=str(error),
            http_status=error.http_status,
        ),
        error.http_status,
    )


@app.errorhandler(500)
def internal_error(error):
    """Render the error page for unhandled errors."""
    logger.error(f"Internal server error on {request.path}: {error}")
    return (
        render_template(
            "error.html",
            error_code="UNHANDLEDEXCEPTION",
            message="Internal Server Error",
            http_status=500,
        ),
        500,
    )


def setup_graceful_shutdown():
    """Setup graceful shutdown handlers for SIGTERM and SIGINT.

    Note: Signal handlers can only be registered in the main thread.
    When running in a background thread, this logs a warning and continues.
    """
    def shutdown_handler(signum, frame):
        logger.info(f"Received shutdown signal ({signum}), cleaning up...")
        logger.info("Server shutdown complete")
        sys.exit(0)

    try:
        signal.signal(signal.SIGTERM, shutdown_handler)
        signal.signal(signal.SIGINT, shutdown_handler)
        logger.info("Graceful shutdown handlers registered successfully")
    except ValueError as e:
        logger.warning(
            f"Could not register signal handlers (not in main thread): {e}. "
            f"Graceful shutdown via signals will not be available."
        )


def initialize_app(config: Config) -> Flask:
    """Initialize Flask app with configuration.

    Builds the authentication source registry and the exception state store,
    sets the session signing key and registers the page blueprints.

    Args:
        config: Application configuration

    Returns:
        The configured Flask app
    """
    global _config, _registry, _state_store, _server_start_time
    _config = config
    _registry = AuthSourceRegistry(config)
    _state_store = ExceptionStateStore(lifetime_seconds=config.state.lifetime_seconds)
    _server_start_time = datetime.now(timezone.utc)

    if config.server.secret_key:
        app.secret_key = config.server.secret_key
    else:
        logger.warning(
            "No secret key configured (SAML_TEST_SECRET_KEY); generated a random key. "
            "Sessions will not survive a restart."
        )
        app.secret_key = secrets.token_hex(32)

    from .admin_endpoint import register_admin_endpoint
    from .login_endpoint import register_login_endpoint

    register_admin_endpoint(app, config, _registry, _state_store)
    register_login_endpoint(app, _registry, _state_store)

    logger.info(
        f"Application initialized with {len(config.auth_sources)} auth source(s), "
        f"admin protected: {config.admin.protected}"
    )
    return app


def run_server(
    host: str | None = None,
    port: int | None = None,
    config: Config | None = None,
    debug: bool = False,
) -> None:
    """Run the Flask server.

    Args:
        host: Host address (default: from config)
        port: Port number (default: from config)
        config: Application configuration (loads from file if not provided)
        debug: Enable debug mode (default: False)
    """
    # Load config if not provided
    if config is None:
        config = load_config()

    initialize_app(config)
    setup_graceful_shutdown()

    host = host or config.server.host
    port = port or config.server.port

    logger.info(f"Starting SAML test server on http://{host}:{port}")
    logger.info(f"Admin test pages available at: http://{host}:{port}{config.server.base_path}/test")

    app.run(
        host=host,
        port=port,
        debug=debug,
        use_reloader=False  # Disable reloader to avoid duplicate startup
    )


if __name__ == "__main__":
    run_server()
