"""SQLAlchemy connection driver adapter.

Requires the optional ``sqlalchemy`` extra::

    pip install "chainsql[sqlalchemy]"

Usage::

    from sqlalchemy import create_engine
    from chainsql import Statement
    from chainsql.execute.sqlalchemy import SQLAlchemyDriver

    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        rows = Statement(SQLAlchemyDriver(conn)).from_("users").get()

Compiled qmark placeholders are rewritten to named bind parameters
(``:p0``, ``:p1``, …) and each one is typed from its
:class:`~chainsql.execute.driver.ParamType` tag, so the dialect's own
paramstyle and type processors are used.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from chainsql.compile.base import placeholder_positions
from chainsql.errors import DriverError
from chainsql.execute.driver import Driver, ParamType, PreparedStatement

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, CursorResult

# A ":name" that SQLAlchemy's text() would otherwise treat as a bind parameter.
_COLON_BIND = re.compile(r"(?<![:\\]):(?=\w)")


def _require_sqlalchemy() -> None:
    try:
        import sqlalchemy  # noqa: F401
    except ImportError as exc:
        raise ImportError(
            "SQLAlchemy is required for SQLAlchemyDriver. "
            'Install it with: pip install "chainsql[sqlalchemy]"'
        ) from exc


def to_named_binds(sql: str) -> tuple[str, list[str]]:
    """Rewrite ``?`` placeholders to ``:p0``, ``:p1``, … for ``text()``.

    Literal colons are escaped first so they survive ``text()`` parsing.

    Returns:
        ``(sql, names)`` with ``names`` in placeholder order.
    """
    escaped = _COLON_BIND.sub(r"\\:", sql)
    positions = placeholder_positions(escaped)
    names = [f"p{index}" for index in range(len(positions))]
    for position, name in zip(reversed(positions), reversed(names)):
        escaped = f"{escaped[:position]}:{name}{escaped[position + 1:]}"
    return escaped, names


def _sqlalchemy_type(param_type: ParamType) -> Any:
    from sqlalchemy import types

    return {
        ParamType.NULL: types.NullType(),
        ParamType.BOOLEAN: types.Boolean(),
        ParamType.INTEGER: types.Integer(),
        ParamType.REAL: types.Float(),
        ParamType.BLOB: types.LargeBinary(),
        ParamType.TEXT: types.String(),
    }[param_type]


class SQLAlchemyPreparedStatement(PreparedStatement):
    """Prepared statement executed through ``Connection.execute(text(...))``."""

    def __init__(self, driver: SQLAlchemyDriver, sql: str) -> None:
        super().__init__(sql)
        self._driver = driver
        self._text_sql, self._names = to_named_binds(sql)
        self._binds: list[Any] = []
        self._values: list[Any] = []
        self._result: CursorResult | None = None
        self._rows: Any = None
        self._columns: list[str] = []

    def bind(self, position: int, value: Any, param_type: ParamType) -> None:
        from sqlalchemy import bindparam

        if position != len(self._binds) or position >= len(self._names):
            raise DriverError(
                f"Parameter {position} does not match a placeholder.",
                sql=self.sql,
                params=self._values,
            )
        if param_type is ParamType.TEXT and not isinstance(value, str):
            value = str(value)
        self._binds.append(bindparam(self._names[position], value, type_=_sqlalchemy_type(param_type)))
        self._values.append(value)

    def execute(self) -> None:
        from sqlalchemy import text
        from sqlalchemy.exc import SQLAlchemyError

        statement = text(self._text_sql).bindparams(*self._binds)
        try:
            self._result = self._driver.connection.execute(statement)
        except SQLAlchemyError as exc:
            raise DriverError(str(exc), sql=self.sql, params=self._values) from exc
        if self._result.returns_rows:
            self._columns = list(self._result.keys())
            self._rows = self._result.mappings()
        if self.sql.lstrip()[:6].upper() == "INSERT":
            self._driver._record_insert_id(self._result.lastrowid)

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def fetchone(self) -> dict[str, Any] | None:
        if self._rows is None:
            return None
        from sqlalchemy.exc import SQLAlchemyError

        try:
            row = self._rows.fetchone()
        except SQLAlchemyError as exc:
            raise DriverError(str(exc), sql=self.sql, params=self._values) from exc
        if row is None:
            return None
        return {column: row[column] for column in self._columns}

    @property
    def rowcount(self) -> int:
        if self._result is None:
            return 0
        return max(self._result.rowcount, 0)

    def close(self) -> None:
        if self._result is not None:
            self._result.close()
            self._result = None
            self._rows = None


class SQLAlchemyDriver(Driver):
    """Driver over a SQLAlchemy :class:`~sqlalchemy.engine.Connection`.

    Transactions stay under the caller's control: chainsql never commits,
    rolls back or closes the connection.

    Args:
        connection: An open SQLAlchemy connection.

    Raises:
        ImportError: If ``sqlalchemy`` is not installed.
    """

    def __init__(self, connection: Connection) -> None:
        _require_sqlalchemy()
        self.connection = connection
        self._last_insert_id: int | None = None

    def prepare(self, sql: str) -> SQLAlchemyPreparedStatement:
        return SQLAlchemyPreparedStatement(self, sql)

    def last_insert_id(self) -> int | None:
        return self._last_insert_id

    def _record_insert_id(self, rowid: int | None) -> None:
        self._last_insert_id = rowid or None
