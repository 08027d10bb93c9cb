"""Admin diagnostic pages: source list, per-source test page and logout."""

import logging

from flask import Blueprint, request, session, url_for

from ..admin.controller import AdminTestController
from ..auth.sources import AuthSourceRegistry
from ..auth.state import ExceptionStateStore, resume_or_fail
from ..config.schema import Config
from ..models.requests import EXCEPTION_PARAM
from .responses import current_url, to_diagnostic_request, to_response

# Create Blueprint
admin_bp = Blueprint("admin", __name__)

admin_logger = logging.getLogger("saml_test_util.web.admin")

# Endpoints reachable without passing the admin gate
GATE_EXEMPT_ENDPOINTS = {"admin.logout_page", "admin.error_page"}

_config: Config | None = None
_registry: AuthSourceRegistry | None = None
_state_store: ExceptionStateStore | None = None


def _controller() -> AdminTestController:
    return AdminTestController(session, _registry, _state_store)


@admin_bp.before_request
def require_admin():
    """Redirect to the admin source login unless the session is an admin."""
    if _config is None or not _config.admin.protected:
        return None
    if request.endpoint in GATE_EXEMPT_ENDPOINTS:
        return None

    source = _registry.bind(_config.admin.auth_source, session)
    if source.is_authenticated():
        return None

    admin_logger.info(f"Admin login required for {request.path}")
    return to_response(source.login(current_url(request), url_for("admin.error_page")))


@admin_bp.route("/test", methods=["GET"])
@admin_bp.route("/test/<auth_source_id>", methods=["GET"])
def test_page(auth_source_id: str | None = None):
    """Test an authentication source and show the released attributes."""
    instruction = _controller().main(to_diagnostic_request(request), auth_source_id)
    return to_response(instruction)


@admin_bp.route("/logout", methods=["GET"])
def logout_page():
    """Show the logged-out confirmation."""
    return to_response(_controller().logout(to_diagnostic_request(request)))


@admin_bp.route("/error", methods=["GET"])
def error_page():
    """Re-raise a failure captured outside a per-source test page."""
    resume_or_fail(_state_store, request.args.get(EXCEPTION_PARAM))


def register_admin_endpoint(
    app,
    config: Config,
    registry: AuthSourceRegistry,
    state_store: ExceptionStateStore,
) -> None:
    """Register the admin pages with the Flask app.

    Args:
        app: Flask application instance
        config: Application configuration
        registry: Authentication source registry
        state_store: Exception state store
    """
    global _config, _registry, _state_store
    _config = config
    _registry = registry
    _state_store = state_store

    # Register Blueprint (only if not already registered)
    if admin_bp.name not in app.blueprints:
        app.register_blueprint(admin_bp, url_prefix=config.server.base_path)
        admin_logger.info(f"Registered admin pages under {config.server.base_path}")
    else:
        admin_logger.debug("Admin pages already registered")
