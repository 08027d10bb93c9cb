"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
        "base_path": "/admin",
    },
    "admin": {
        # Admin pages require a login on the "admin" source
        "protected": True,
        "auth_source": "admin",
    },
    "state": {
        "lifetime_seconds": 3600,
    },
    "auth_sources": {
        "admin": {
            "type": "password",
            "username": "admin",
            # Password is never stored in the config file
            "password_env_var": "SAML_TEST_ADMIN_PASSWORD",
            "attributes": {"user": ["admin"]},
        },
        "example-static": {
            "type": "static",
            "attributes": {
                "uid": ["testuser"],
                "eduPersonAffiliation": ["member", "employee"],
            },
            "name_id": {
                "value": "_b806c4f98188b42e48d3eb5444db613dbde463e2e8",
                "format": "urn:oasis:names:tc:SAML:2.0:nameid-format:transient",
            },
        },
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/saml-test-util.log",
        # Identity values are logged in clear unless the user opts in
        "redact_attributes": False,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
