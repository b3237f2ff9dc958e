"""Bind-and-run bridge between compiled SQL and a :class:`Driver`.

The executor never catches :class:`~chainsql.errors.DriverError`: failures are
logged and propagate to the caller unchanged.  There is no retry, no
reconnection, and no fallback query path.
"""
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterator
from typing import Any

from chainsql.compile.base import CompiledSQL
from chainsql.errors import DriverError, StatementError
from chainsql.execute.driver import Driver, PreparedStatement, classify
from chainsql.schema.config import StatementConfig

logger = logging.getLogger("chainsql")

Row = dict[str, Any]


class Executor:
    """Runs compiled statements on one driver.

    Args:
        driver: The shared connection handle.
        config: Controls statement logging.
    """

    def __init__(self, driver: Driver, config: StatementConfig | None = None) -> None:
        self.driver = driver
        self._config = config or StatementConfig()

    def run(self, compiled: CompiledSQL) -> PreparedStatement:
        """Prepare, bind every param with its type tag, and execute.

        The caller owns the returned statement and must close it.

        Raises:
            StatementError: If the result has two columns with the same name,
                since rows are keyed by column name.
        """
        if self._config.log_statements:
            logger.debug("Executing %s with %d binding(s)", compiled.sql, len(compiled.params))
        statement = self.driver.prepare(compiled.sql)
        try:
            for position, value in enumerate(compiled.params):
                statement.bind(position, value, classify(value))
            statement.execute()
        except DriverError:
            logger.error("Statement failed: %s", compiled.sql)
            statement.close()
            raise
        columns = Counter(statement.columns)
        duplicates = sorted(name for name, count in columns.items() if count > 1)
        if duplicates:
            statement.close()
            raise StatementError(
                f"Duplicate result column name(s): {', '.join(duplicates)}; alias them apart.",
                clause="SELECT",
            )
        return statement

    def fetch_all(self, compiled: CompiledSQL) -> list[Row]:
        statement = self.run(compiled)
        try:
            rows: list[Row] = []
            while (row := statement.fetchone()) is not None:
                rows.append(row)
            return rows
        finally:
            statement.close()

    def iterate(
        self,
        compiled: CompiledSQL,
        transform: Callable[..., Any],
        spread: bool = False,
    ) -> Iterator[Any]:
        """Lazily execute and yield ``transform`` applied to each row.

        Nothing runs until the first value is pulled.  The cursor is released
        when the rows are exhausted, when the generator is closed, or when
        ``transform`` raises.
        """
        statement = self.run(compiled)
        try:
            while (row := statement.fetchone()) is not None:
                yield transform(*row.values()) if spread else transform(row)
        finally:
            statement.close()

    def insert(self, compiled: CompiledSQL) -> int | None:
        statement = self.run(compiled)
        statement.close()
        return self.driver.last_insert_id()

    def affect(self, compiled: CompiledSQL) -> int:
        """Execute a mutation and return the affected-row count."""
        statement = self.run(compiled)
        try:
            return statement.rowcount
        finally:
            statement.close()
