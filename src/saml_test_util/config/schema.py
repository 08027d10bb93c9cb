"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ServerConfig(BaseModel):
    """Configuration for the web server.

    Attributes:
        host: Server host address
        port: Server port
        secret_key: Key used to sign session cookies (generated at startup if unset)
        base_path: URL prefix of the admin pages
    """

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8080, description="Server port")
    secret_key: Optional[str] = Field(
        default=None,
        description="Session signing key; set via SAML_TEST_SECRET_KEY",
    )
    base_path: str = Field(default="/admin", description="URL prefix of the admin pages")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Invalid port {v}. Must be between 1 and 65535.")
        return v

    @field_validator("base_path")
    @classmethod
    def validate_base_path(cls, v: str) -> str:
        """Validate base path is absolute and normalize the trailing slash."""
        if not v.startswith("/"):
            raise ValueError(f"Invalid base_path: {v}. Must start with '/'")
        return v.rstrip("/") or "/"


class AdminConfig(BaseModel):
    """Configuration for the admin access gate.

    Attributes:
        protected: Whether admin pages require an authenticated admin session
        auth_source: Authentication source used for the admin login
    """

    protected: bool = True
    auth_source: str = Field(default="admin", description="Admin authentication source")


class StateConfig(BaseModel):
    """Configuration for stored exception states.

    Attributes:
        lifetime_seconds: Seconds a stored state stays resolvable
    """

    lifetime_seconds: int = Field(
        default=3600,
        ge=1,
        description="Seconds a stored exception state stays resolvable",
    )


class NameIDConfig(BaseModel):
    """NameID released by a static authentication source."""

    value: str
    format: Optional[str] = None
    name_qualifier: Optional[str] = None
    sp_name_qualifier: Optional[str] = None
    sp_provided_id: Optional[str] = None


class AuthSourceConfig(BaseModel):
    """Configuration of one authentication source.

    Attributes:
        type: Source type ("static" or "password")
        attributes: Attributes released after login, in display order
        name_id: Optional NameID released after login
        username: Accepted username (password sources)
        password_env_var: Environment variable holding the accepted password
        session_duration: Seconds a login stays valid
    """

    type: Literal["static", "password"]
    attributes: Dict[str, List[str]] = Field(default_factory=dict)
    name_id: Optional[NameIDConfig] = None
    username: Optional[str] = None
    password_env_var: str = Field(
        default="SAML_TEST_ADMIN_PASSWORD",
        description="Environment variable for the source password",
    )
    session_duration: int = Field(
        default=8 * 3600,
        ge=1,
        description="Seconds a login stays valid",
    )

    @model_validator(mode="after")
    def validate_password_source(self) -> "AuthSourceConfig":
        """Validate password sources name the accepted username.

        Raises:
            ValueError: If a password source has no username
        """
        if self.type == "password" and not self.username:
            raise ValueError(
                "Password authentication sources require a username. "
                "Fix: Set 'username' for the source in config.json."
            )
        return self


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_attributes: Whether to redact identity values from logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/saml-test-util.log"),
        description="Log file path"
    )
    redact_attributes: bool = Field(
        default=False,
        description="Redact identity values from logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Raises:
            ValueError: If log level is not valid
        """
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        server: Web server configuration
        admin: Admin gate configuration
        state: Exception state configuration
        auth_sources: Authentication sources by identifier, in display order
        logging: Logging configuration

    Example:
        >>> config = Config(
        ...     admin=AdminConfig(protected=False),
        ...     auth_sources={"example": AuthSourceConfig(type="static")},
        ... )
        >>> list(config.auth_sources)
        ['example']
    """

    server: ServerConfig = ServerConfig()
    admin: AdminConfig = AdminConfig()
    state: StateConfig = StateConfig()
    auth_sources: Dict[str, AuthSourceConfig] = Field(default_factory=dict)
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def validate_admin_source(self) -> "Config":
        """Validate the admin gate source exists when the gate is enabled.

        Raises:
            ValueError: If admin.protected is set and the source is missing
        """
        if self.admin.protected and self.admin.auth_source not in self.auth_sources:
            raise ValueError(
                f"Admin authentication source '{self.admin.auth_source}' is not "
                f"configured. Fix: Add it to auth_sources or set admin.protected=false."
            )
        return self
