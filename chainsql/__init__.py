"""chainsql – a fluent SQL statement builder and executor.

Chain calls. Bind everything.

Public API
----------
``Statement``
    Fluent builder for SELECT / INSERT / UPDATE / DELETE statements.  Compiles
    to qmark-parameterized SQL plus an ordered binding list and runs it
    through a driver.

``SQLiteDriver`` / ``SQLAlchemyDriver``
    Driver adapters for ``sqlite3`` connections and SQLAlchemy connections
    (the latter requires ``pip install "chainsql[sqlalchemy]"``).

Re-exported types
-----------------
``CompiledSQL``, ``StatementConfig``, ``ParamType``, the ``Driver`` ABCs,
and all error classes.

Example::

    import sqlite3
    from chainsql import SQLiteDriver, Statement

    driver = SQLiteDriver(sqlite3.connect("app.db"))
    active = (
        Statement(driver)
        .select("id", "name")
        .from_("users")
        .where("status", "=", "active")
        .limit(10)
        .get()
    )
"""

from __future__ import annotations

from chainsql.compile.base import CompiledSQL
from chainsql.compile.conditions import MISSING
from chainsql.errors import (
    ChainSQLError,
    ConfigError,
    DriverError,
    StatementError,
    TableNotSetError,
)
from chainsql.execute.driver import Driver, ParamType, PreparedStatement, classify
from chainsql.execute.sqlite import SQLiteDriver
from chainsql.schema.config import StatementConfig
from chainsql.statement import Statement

__all__ = [
    # Builder
    "Statement",
    "StatementConfig",
    "CompiledSQL",
    "MISSING",
    # Drivers
    "Driver",
    "PreparedStatement",
    "ParamType",
    "classify",
    "SQLiteDriver",
    "SQLAlchemyDriver",
    # Errors
    "ChainSQLError",
    "TableNotSetError",
    "StatementError",
    "DriverError",
    "ConfigError",
]


def __getattr__(name: str):
    # SQLAlchemy is optional; import its adapter only on first use.
    if name == "SQLAlchemyDriver":
        from chainsql.execute.sqlalchemy import SQLAlchemyDriver

        return SQLAlchemyDriver
    raise AttributeError(f"module 'chainsql' has no attribute '{name}'")
