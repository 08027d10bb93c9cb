"""Authentication sources and exception state handling.

Usage:
    from saml_test_util.auth import AuthSourceRegistry, ExceptionStateStore

    registry = AuthSourceRegistry(config)
    source = registry.bind("example-static", session)
    if not source.is_authenticated():
        redirect = source.login(return_url, error_url)
"""

from saml_test_util.auth.protocol import (
    AuthSourceProtocol,
    AuthSourceProviderProtocol,
    ExceptionStateStoreProtocol,
)
from saml_test_util.auth.sources import (
    NAMEID_AUTH_DATA,
    SESSION_KEY,
    AuthSourceRegistry,
    PasswordAuthSource,
    SessionAuthSource,
    StaticAuthSource,
)
from saml_test_util.auth.state import (
    ExceptionState,
    ExceptionStateStore,
    capture_and_suspend,
    generate_reference_id,
    resume_or_fail,
)

__all__ = [
    "AuthSourceProtocol",
    "AuthSourceProviderProtocol",
    "AuthSourceRegistry",
    "ExceptionState",
    "ExceptionStateStore",
    "ExceptionStateStoreProtocol",
    "NAMEID_AUTH_DATA",
    "PasswordAuthSource",
    "SESSION_KEY",
    "SessionAuthSource",
    "StaticAuthSource",
    "capture_and_suspend",
    "generate_reference_id",
    "resume_or_fail",
]
