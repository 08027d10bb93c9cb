"""Custom exception classes for SAML Test Utility.

All exceptions inherit from SAMLTestUtilError to allow catching all custom exceptions.
Each carries an ``error_code`` and ``http_status`` used by the web layer to render
a specific error page.
"""

from typing import Optional


class SAMLTestUtilError(Exception):
    """Base exception for all SAML Test Utility custom exceptions.

    Attributes:
        error_code: Short machine-readable code shown on error pages
        http_status: HTTP status used when the error reaches the web layer
    """

    error_code = "UNHANDLEDEXCEPTION"
    http_status = 500


class ConfigurationError(SAMLTestUtilError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Missing required configuration
        - Invalid configuration file format
        - Configuration value out of range
    """

    error_code = "CONFIG"


class UnknownAuthSourceError(ConfigurationError):
    """Raised when a request names an authentication source that is not configured."""

    error_code = "NOAUTHSOURCE"
    http_status = 404

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        super().__init__(
            f"Authentication source '{source_id}' is not configured. "
            f"Check the auth_sources section of config.json."
        )


class NoStateError(SAMLTestUtilError):
    """Raised when an exception reference does not resolve to a stored state.

    The message is always ``NOSTATE`` so error pages can tell the user their
    session expired instead of showing a generic failure.
    """

    error_code = "NOSTATE"
    http_status = 400

    def __init__(self, reference_id: Optional[str] = None) -> None:
        self.reference_id = reference_id
        super().__init__(self.error_code)


class AuthenticationError(SAMLTestUtilError):
    """Raised when an authentication source rejects a login attempt.

    Examples:
        - Wrong username or password
        - Identity provider reported a failure
    """

    error_code = "AUTHFAILED"
    http_status = 403


class WrongUserPassError(AuthenticationError):
    """Raised when the supplied username/password pair is not accepted."""

    error_code = "WRONGUSERPASS"

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        super().__init__(f"Incorrect username or password for source '{source_id}'")
