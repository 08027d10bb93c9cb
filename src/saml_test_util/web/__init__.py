"""Flask binding for the admin authentication test pages."""

from saml_test_util.web.app import app, initialize_app, run_server

__all__ = ["app", "initialize_app", "run_server"]
