"""Driver abstractions: the boundary between chainsql and a database.

The Template Method pattern (GoF) is used, as in the compiler layer:

- ``Driver`` prepares SQL and reports the last generated identifier.
- ``PreparedStatement`` binds typed positional parameters, executes, and
  exposes either a row cursor or an affected-row count.

Concrete adapters live in :mod:`chainsql.execute.sqlite` and
:mod:`chainsql.execute.sqlalchemy`.  Adapters translate every native failure
into :class:`~chainsql.errors.DriverError`, chaining the original exception.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class ParamType(str, Enum):
    """Type tag passed to :meth:`PreparedStatement.bind`."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    REAL = "real"
    BLOB = "blob"
    TEXT = "text"


def classify(value: Any) -> ParamType:
    """Return the :class:`ParamType` for a runtime value.

    ``bool`` is checked before ``int`` because it is an ``int`` subclass.
    Anything without a native tag is bound as text.
    """
    if value is None:
        return ParamType.NULL
    if isinstance(value, bool):
        return ParamType.BOOLEAN
    if isinstance(value, int):
        return ParamType.INTEGER
    if isinstance(value, float):
        return ParamType.REAL
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ParamType.BLOB
    return ParamType.TEXT


class PreparedStatement(ABC):
    """One prepared SQL statement.

    Positions passed to :meth:`bind` are 0-based and must be bound in
    ascending order before :meth:`execute` is called.
    """

    def __init__(self, sql: str) -> None:
        self.sql = sql

    @abstractmethod
    def bind(self, position: int, value: Any, param_type: ParamType) -> None:
        """Bind ``value`` to the placeholder at ``position``.

        Args:
            position: 0-based placeholder index.
            value: The raw Python value.
            param_type: Tag from :func:`classify`.
        """

    @abstractmethod
    def execute(self) -> None:
        """Execute with the bound parameters.

        Raises:
            DriverError: If the database rejects the statement.
        """

    @property
    @abstractmethod
    def columns(self) -> list[str]:
        """Result column names in driver order (empty for mutations)."""

    @abstractmethod
    def fetchone(self) -> dict[str, Any] | None:
        """Return the next row as an ordered mapping, or ``None`` when done."""

    @property
    @abstractmethod
    def rowcount(self) -> int:
        """Number of rows affected by the last mutation."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying cursor.  Safe to call more than once."""


class Driver(ABC):
    """A connection handle shared by every statement built on it."""

    @abstractmethod
    def prepare(self, sql: str) -> PreparedStatement:
        """Return a :class:`PreparedStatement` for ``sql``."""

    @abstractmethod
    def last_insert_id(self) -> int | None:
        """Identifier generated by the most recent insert, or ``None``."""
