"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from saml_test_util.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from saml_test_util.config.schema import (
    AuthSourceConfig,
    Config,
    LoggingConfig,
    ServerConfig,
)
from saml_test_util.utils.exceptions import ConfigurationError, UnknownAuthSourceError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "SAML_TEST_"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (SAML_TEST_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> sources = list(config.auth_sources)
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Raises:
        ConfigurationError: If JSON is malformed or the file cannot be read
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
            return config_dict
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e

    logger.info(f"Config file not found: {config_path}. Using default configuration.")
    # Deep copy of defaults to avoid mutation
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with SAML_TEST_ prefix.

    Supported variables: SAML_TEST_HOST, SAML_TEST_PORT, SAML_TEST_SECRET_KEY,
    SAML_TEST_BASE_PATH, SAML_TEST_ADMIN_PROTECTED, SAML_TEST_ADMIN_SOURCE,
    SAML_TEST_STATE_LIFETIME, SAML_TEST_LOG_LEVEL, SAML_TEST_LOG_FILE,
    SAML_TEST_REDACT_ATTRIBUTES.

    Raises:
        ConfigurationError: If a numeric override is not an integer
    """
    # Server section
    if host := os.getenv(f"{ENV_PREFIX}HOST"):
        config_dict.setdefault("server", {})["host"] = host
        logger.debug("Override: host from environment")

    if port := os.getenv(f"{ENV_PREFIX}PORT"):
        config_dict.setdefault("server", {})["port"] = _parse_int(f"{ENV_PREFIX}PORT", port)
        logger.debug("Override: port from environment")

    if secret_key := os.getenv(f"{ENV_PREFIX}SECRET_KEY"):
        config_dict.setdefault("server", {})["secret_key"] = secret_key
        logger.debug("Override: secret_key from environment")

    if base_path := os.getenv(f"{ENV_PREFIX}BASE_PATH"):
        config_dict.setdefault("server", {})["base_path"] = base_path
        logger.debug("Override: base_path from environment")

    # Admin section
    if protected := os.getenv(f"{ENV_PREFIX}ADMIN_PROTECTED"):
        config_dict.setdefault("admin", {})["protected"] = _parse_bool(protected)
        logger.debug("Override: admin.protected from environment")

    if admin_source := os.getenv(f"{ENV_PREFIX}ADMIN_SOURCE"):
        config_dict.setdefault("admin", {})["auth_source"] = admin_source
        logger.debug("Override: admin.auth_source from environment")

    # State section
    if lifetime := os.getenv(f"{ENV_PREFIX}STATE_LIFETIME"):
        config_dict.setdefault("state", {})["lifetime_seconds"] = _parse_int(
            f"{ENV_PREFIX}STATE_LIFETIME", lifetime
        )
        logger.debug("Override: state.lifetime_seconds from environment")

    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")

    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")

    if redact := os.getenv(f"{ENV_PREFIX}REDACT_ATTRIBUTES"):
        config_dict.setdefault("logging", {})["redact_attributes"] = _parse_bool(redact)
        logger.debug("Override: redact_attributes from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string (case-insensitive)."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_int(env_key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid value for {env_key}: '{value}'. Must be an integer."
        ) from e


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn when passwords are written into the configuration file.

    Passwords belong in the environment variable named by ``password_env_var``.
    """
    for source_id, source in config_dict.get("auth_sources", {}).items():
        if isinstance(source, dict) and "password" in source:
            logger.warning(
                f"WARNING: Password found in configuration for auth source '{source_id}'! "
                f"Passwords are read from environment variables, not config files. "
                f"The value is ignored; set {source.get('password_env_var', ENV_PREFIX + 'ADMIN_PASSWORD')} instead."
            )
            del source["password"]


def get_auth_source_config(config: Config, source_id: str) -> AuthSourceConfig:
    """Get authentication source configuration by identifier.

    Raises:
        UnknownAuthSourceError: If the source is not configured

    Example:
        >>> config = load_config()
        >>> admin = get_auth_source_config(config, "admin")
    """
    try:
        return config.auth_sources[source_id]
    except KeyError:
        raise UnknownAuthSourceError(source_id) from None


def get_server_config(config: Config) -> ServerConfig:
    """Get web server configuration."""
    return config.server


def get_logging_config(config: Config) -> LoggingConfig:
    """Get logging configuration.

    Example:
        >>> config = load_config()
        >>> logging_cfg = get_logging_config(config)
        >>> log_level = logging_cfg.level
    """
    return config.logging
