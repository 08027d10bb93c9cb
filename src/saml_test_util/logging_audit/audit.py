"""Audit trail functionality for the SAML Test Utility.

This module provides structured audit logging for admin diagnostic logins,
logouts and recovered failures.
"""

import time
import uuid
from typing import Any, Dict

from .logger import get_logger

logger = get_logger(__name__)

# Key fields in the order they appear in audit lines
FIELD_ORDER = [
    "status",
    "auth_source",
    "attribute_count",
    "reference_id",
    "error_code",
    "error_message",
    "correlation_id",
]


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Audit events are logged at INFO level for successful operations and ERROR
    level for failures. ``details`` is not modified.

    Args:
        event_type: Type of operation (e.g., "AUTH_TEST_LOGIN_STARTED",
                   "AUTH_TEST_ATTRIBUTES_SHOWN", "AUTH_TEST_LOGOUT",
                   "AUTH_TEST_EXCEPTION_RESUMED", "AUTH_SOURCE_LOGIN_FAILED")
        details: Event details. Common fields include:
                - status: "success" or "failure"
                - auth_source: Authentication source identifier
                - attribute_count: Number of attributes released
                - reference_id: Exception state reference
                - error_code / error_message: Failure details
                - correlation_id: Optional correlation ID for related events

    Example:
        >>> log_audit_event("AUTH_TEST_LOGOUT", {
        ...     "status": "success",
        ...     "auth_source": "example-static",
        ... })
    """
    details = dict(details)
    details.setdefault("timestamp", time.time())
    details.setdefault("correlation_id", str(uuid.uuid4()))

    message_parts = [f"AUDIT [{event_type}]"]

    for field in FIELD_ORDER:
        if field in details:
            message_parts.append(f"{field}={details[field]}")

    for key, value in details.items():
        if key not in FIELD_ORDER and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if details.get("status", "unknown") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)
