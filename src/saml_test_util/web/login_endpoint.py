"""Username/password login form for password authentication sources."""

import logging

from flask import Blueprint, abort, redirect, render_template, request, session

from ..auth.sources import AuthSourceRegistry, PasswordAuthSource
from ..auth.state import ExceptionStateStore, capture_and_suspend
from ..models.requests import is_local_url
from ..utils.exceptions import AuthenticationError, ConfigurationError
from .responses import to_response

login_bp = Blueprint("login", __name__)

login_logger = logging.getLogger("saml_test_util.web.login")

_registry: AuthSourceRegistry | None = None
_state_store: ExceptionStateStore | None = None


@login_bp.route("/login/<auth_source_id>", methods=["GET", "POST"])
def login_form(auth_source_id: str):
    """Show the login form or check the submitted credentials.

    A rejected login is stored as an exception state and the user is sent to
    the error URL, where the admin page re-raises it.
    """
    source = _registry.bind(auth_source_id, session)
    if not isinstance(source, PasswordAuthSource):
        raise ConfigurationError(
            f"Auth source '{auth_source_id}' does not use a login form"
        )

    return_to = request.values.get("ReturnTo")
    error_url = request.values.get("ErrorURL")
    if not is_local_url(return_to) or not is_local_url(error_url):
        login_logger.warning(f"Rejected login redirect targets for '{auth_source_id}'")
        abort(400, description="ReturnTo and ErrorURL must be local paths")

    if request.method == "GET":
        return render_template(
            "login.html",
            source_id=auth_source_id,
            return_to=return_to,
            error_url=error_url,
        )

    try:
        source.authenticate(
            request.form.get("username", ""),
            request.form.get("password", ""),
        )
    except AuthenticationError as e:
        login_logger.info(f"Login failed for auth source '{auth_source_id}': {e.error_code}")
        return to_response(capture_and_suspend(_state_store, e, error_url))

    return redirect(return_to)


def register_login_endpoint(app, registry: AuthSourceRegistry, state_store: ExceptionStateStore) -> None:
    """Register the login form with the Flask app."""
    global _registry, _state_store
    _registry = registry
    _state_store = state_store

    if login_bp.name not in app.blueprints:
        app.register_blueprint(login_bp)
        login_logger.info("Registered login form endpoint")
    else:
        login_logger.debug("Login form endpoint already registered")
