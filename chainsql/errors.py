"""Custom exception hierarchy for chainsql.

All public errors inherit from ChainSQLError so callers can catch the base
class for any chainsql-specific failure.
"""
from __future__ import annotations

from typing import Any


class ChainSQLError(Exception):
    """Base exception for all chainsql errors."""


class TableNotSetError(ChainSQLError):
    """Raised when a statement needs a source table and none was configured.

    Args:
        operation: The operation that required the table (e.g. ``'insert'``).
    """

    def __init__(self, operation: str | None = None) -> None:
        super().__init__("Table not set")
        self.operation = operation


class StatementError(ChainSQLError):
    """Raised when the builder is used in a way it does not support.

    These are programmer errors: a second ``from_()`` call, an empty data
    mapping, an empty ``IN`` list, a negative limit.

    Args:
        message: Human-readable description.
        clause: The clause being configured when the error occurred.
    """

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause


class DriverError(ChainSQLError):
    """Raised by a driver adapter when the database rejects a statement.

    The native exception is always chained as ``__cause__``.

    Args:
        message: Human-readable description.
        sql: The SQL text that was being prepared or executed.
        params: The bound values, in placeholder order.
    """

    def __init__(
        self,
        message: str,
        sql: str | None = None,
        params: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.sql = sql
        self.params: list[Any] = params or []


class ConfigError(ChainSQLError):
    """Raised when a StatementConfig is given invalid values.

    Args:
        message: Human-readable description.
        errors: The structured error list reported by pydantic.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors: list[dict[str, Any]] = errors or []
