"""Config module.

This module provides configuration management functionality.
"""

from saml_test_util.config.manager import (
    get_auth_source_config,
    get_logging_config,
    get_server_config,
    load_config,
)
from saml_test_util.config.schema import (
    AdminConfig,
    AuthSourceConfig,
    Config,
    LoggingConfig,
    NameIDConfig,
    ServerConfig,
    StateConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    # Helper functions
    "get_auth_source_config",
    "get_logging_config",
    "get_server_config",
    # Configuration models
    "AdminConfig",
    "AuthSourceConfig",
    "Config",
    "LoggingConfig",
    "NameIDConfig",
    "ServerConfig",
    "StateConfig",
]
