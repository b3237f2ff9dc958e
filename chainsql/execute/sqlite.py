"""``sqlite3`` driver adapter.

sqlite3 natively understands qmark placeholders, so compiled SQL is passed
through unchanged.  Type tags map onto the Python types sqlite3 binds
natively; BOOLEAN is stored as ``0`` / ``1``.
"""
from __future__ import annotations

import sqlite3
from typing import Any

from chainsql.errors import DriverError
from chainsql.execute.driver import Driver, ParamType, PreparedStatement


def _convert(value: Any, param_type: ParamType) -> Any:
    if param_type is ParamType.NULL:
        return None
    if param_type is ParamType.BOOLEAN:
        return int(bool(value))
    if param_type is ParamType.INTEGER:
        return int(value)
    if param_type is ParamType.REAL:
        return float(value)
    if param_type is ParamType.BLOB:
        return bytes(value)
    return value if isinstance(value, str) else str(value)


class SQLitePreparedStatement(PreparedStatement):
    """Prepared statement backed by a ``sqlite3.Cursor``."""

    def __init__(self, driver: SQLiteDriver, sql: str) -> None:
        super().__init__(sql)
        self._driver = driver
        self._params: list[Any] = []
        self._cursor: sqlite3.Cursor | None = None
        self._columns: list[str] = []

    def bind(self, position: int, value: Any, param_type: ParamType) -> None:
        if position != len(self._params):
            raise DriverError(
                f"Parameter {position} bound out of order.", sql=self.sql, params=self._params
            )
        self._params.append(_convert(value, param_type))

    def execute(self) -> None:
        try:
            self._cursor = self._driver.connection.execute(self.sql, self._params)
        except sqlite3.Error as exc:
            raise DriverError(str(exc), sql=self.sql, params=self._params) from exc
        description = self._cursor.description or ()
        self._columns = [column[0] for column in description]
        self._driver._record_insert_id(self._cursor.lastrowid)

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def fetchone(self) -> dict[str, Any] | None:
        if self._cursor is None:
            return None
        try:
            row = self._cursor.fetchone()
        except sqlite3.Error as exc:
            raise DriverError(str(exc), sql=self.sql, params=self._params) from exc
        if row is None:
            return None
        return dict(zip(self._columns, tuple(row)))

    @property
    def rowcount(self) -> int:
        if self._cursor is None:
            return 0
        return max(self._cursor.rowcount, 0)

    def close(self) -> None:
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None


class SQLiteDriver(Driver):
    """Driver over an open ``sqlite3.Connection``.

    The connection's ``row_factory`` is ignored; rows are always returned as
    ordered ``dict`` objects keyed by column name.

    Args:
        connection: An open connection.  chainsql never commits or closes it.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection
        self._last_insert_id: int | None = None

    @classmethod
    def connect(cls, database: str = ":memory:", **kwargs: Any) -> SQLiteDriver:
        """Open a new connection and wrap it."""
        try:
            return cls(sqlite3.connect(database, **kwargs))
        except sqlite3.Error as exc:
            raise DriverError(f"Cannot open SQLite database '{database}': {exc}") from exc

    def prepare(self, sql: str) -> SQLitePreparedStatement:
        return SQLitePreparedStatement(self, sql)

    def last_insert_id(self) -> int | None:
        return self._last_insert_id

    def _record_insert_id(self, rowid: int | None) -> None:
        self._last_insert_id = rowid or None
