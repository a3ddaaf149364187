# SPDX-License-Identifier: GPL-3.0-only
"""Common type definitions for the application."""

from enum import Enum


class KeyType(Enum):
    """Nkey categories understood by the key pair generator."""

    USER = "user"
    ACCOUNT = "account"
    SERVER = "server"
    CLUSTER = "cluster"
    OPERATOR = "operator"
    CURVE = "curve"

    @classmethod
    def parse(cls, value):
        """Return the member for ``value``, ignoring case and surrounding spaces.

        Raises:
            ValueError: If ``value`` names no known category.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid nkey type: {value!r}")
        return cls(value.strip().lower())

    @classmethod
    def values(cls):
        """Return the accepted category names in declaration order."""
        return [member.value for member in cls]


class DiagnosticSeverity(Enum):
    """Diagnostic severities."""

    ERROR = "error"
    WARNING = "warning"
