"""Test fixtures: sample schema DDL and an in-memory recording driver."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from chainsql.errors import DriverError
from chainsql.execute.driver import Driver, ParamType, PreparedStatement

_FIXTURES_DIR = Path(__file__).parent


def load_ddl() -> str:
    """Return the sample SQLite DDL (``users`` and ``posts`` tables)."""
    return (_FIXTURES_DIR / "ddl_sqlite.sql").read_text()


class RecordingStatement(PreparedStatement):
    """Prepared statement that records binds and replays canned rows."""

    def __init__(self, driver: RecordingDriver, sql: str) -> None:
        super().__init__(sql)
        self.driver = driver
        self.binds: list[tuple[int, Any, ParamType]] = []
        self.executed = False
        self.closed = False
        self._rows = [dict(row) for row in driver.rows]

    def bind(self, position: int, value: Any, param_type: ParamType) -> None:
        self.binds.append((position, value, param_type))

    def execute(self) -> None:
        if self.driver.fail_with is not None:
            raise DriverError(self.driver.fail_with, sql=self.sql)
        self.executed = True

    @property
    def columns(self) -> list[str]:
        return list(self._rows[0]) if self._rows else []

    def fetchone(self) -> dict[str, Any] | None:
        return self._rows.pop(0) if self._rows else None

    @property
    def rowcount(self) -> int:
        return self.driver.rowcount

    def close(self) -> None:
        self.closed = True


class RecordingDriver(Driver):
    """Driver that never touches a database.

    Args:
        rows: Rows every prepared statement will yield.
        rowcount: Affected-row count reported for mutations.
        insert_id: Value reported by :meth:`last_insert_id`.
        fail_with: When set, ``execute()`` raises ``DriverError`` with it.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        rowcount: int = 0,
        insert_id: int | None = None,
        fail_with: str | None = None,
    ) -> None:
        self.rows = rows or []
        self.rowcount = rowcount
        self.insert_id = insert_id
        self.fail_with = fail_with
        self.prepared: list[RecordingStatement] = []

    def prepare(self, sql: str) -> RecordingStatement:
        statement = RecordingStatement(self, sql)
        self.prepared.append(statement)
        return statement

    def last_insert_id(self) -> int | None:
        return self.insert_id
