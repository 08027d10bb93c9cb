"""Custom log formatters for the SAML Test Utility.

This module provides specialized formatters for logging, including redaction of
identity values released by authentication sources.
"""

import logging
import re
from typing import List, Tuple


class AttributeRedactingFormatter(logging.Formatter):
    """Formatter that redacts identity values from log messages.

    Applies regex-based pattern matching to hide e-mail addresses, NameID values
    and password fields before records reach a handler.

    Attributes:
        redact_attributes: Whether to enable redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = AttributeRedactingFormatter(redact_attributes=True)
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_attributes: bool = False,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_attributes = redact_attributes

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # E-mail addresses: user@example.org
            (re.compile(r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)+\b"), "[EMAIL-REDACTED]"),

            # Serialized NameID elements: <saml:NameID ...>value</saml:NameID>
            (re.compile(r"(<(?:\w+:)?NameID\b[^>]*>)[^<]*(</(?:\w+:)?NameID>)"),
             r"\1[NAMEID-REDACTED]\2"),

            # Key/value pairs: nameid=..., password=...
            (re.compile(r"\b(nameid|password)=\S+", re.IGNORECASE), r"\1=[REDACTED]"),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional redaction."""
        original = super().format(record)

        if self.redact_attributes:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
