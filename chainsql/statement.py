"""The fluent :class:`Statement` builder.

``Statement`` is the top-level orchestrator.  Fluent calls mutate one owned
:class:`~chainsql.schema.state.StatementState`; terminal calls hand that state
to the :class:`~chainsql.compile.assembler.SQLAssembler` and run the result
through an :class:`~chainsql.execute.executor.Executor`.

Sub-builder wiring
------------------
Statement
  ├── ConditionResolver   (compile/conditions.py)
  ├── FromClauseBuilder   (compile/clause_builders.py)
  ├── JoinClauseBuilder   (compile/clause_builders.py)
  ├── UnionBuilder        (compile/clause_builders.py)
  └── SQLAssembler        (compile/assembler.py)

Nested statements
-----------------
FROM subqueries, union branches, subquery conditions and condition groups
are built by callbacks that receive a *fresh* ``Statement`` sharing only the
driver and config.  The nested statement is compiled immediately and only its
SQL text and bindings are kept, so a parent never references a child.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from chainsql.compile.assembler import SQLAssembler
from chainsql.compile.base import CompiledSQL
from chainsql.compile.clause_builders import FromClauseBuilder, JoinClauseBuilder, UnionBuilder
from chainsql.compile.conditions import (
    MISSING,
    ClauseName,
    ConditionResolver,
    normalize_connector,
)
from chainsql.errors import StatementError
from chainsql.execute.driver import Driver
from chainsql.execute.executor import Executor, Row
from chainsql.schema.config import StatementConfig
from chainsql.schema.state import StatementState

#: Callback that configures a nested statement.
Builder = Callable[["Statement"], Any]


class Statement:
    """Builds, compiles and runs one SQL statement.

    Example::

        users = (
            Statement(SQLiteDriver(conn))
            .select("id", "name")
            .from_("users")
            .where("status", "=", "active")
            .order("name")
            .limit(10)
            .get()
        )

    Args:
        driver: Connection handle used by terminal calls.  Optional when the
            statement is only compiled.
        config: Shared options; defaults to ``StatementConfig()``.
    """

    def __init__(
        self,
        driver: Driver | None = None,
        config: StatementConfig | None = None,
    ) -> None:
        self._driver = driver
        self._config = config or StatementConfig()
        self._state = StatementState()
        self._assembler = SQLAssembler()
        self._resolver = ConditionResolver(self._spawn, self._config.empty_group_predicate)
        self._from_builder = FromClauseBuilder()
        self._join_builder = JoinClauseBuilder()
        self._union_builder = UnionBuilder()

    def __repr__(self) -> str:
        source = self._state.source.sql if self._state.source else None
        return f"Statement(source={source!r})"

    def _spawn(self) -> Statement:
        return Statement(self._driver, self._config)

    def _run_nested(self, callback: Builder) -> CompiledSQL:
        nested = self._spawn()
        callback(nested)
        return nested.compile()

    # ------------------------------------------------------------------
    # Projection and source
    # ------------------------------------------------------------------

    def select(self, *columns: str | Iterable[str]) -> Statement:
        """Append projection columns; repeated calls accumulate."""
        for column in columns:
            if isinstance(column, str):
                self._state.columns.append(column)
            else:
                self._state.columns.extend(column)
        return self

    def from_(self, source: str | Builder, alias: str | None = None) -> Statement:
        """Set the table, or a subquery built by ``source``, exactly once.

        Raises:
            StatementError: If a source was already set.
        """
        if self._state.source is not None:
            raise StatementError(
                f"Source already set to '{self._state.source.sql}'.", clause="FROM"
            )
        if callable(source):
            compiled = self._run_nested(source)
            self._state.source = self._from_builder.subquery(
                compiled, alias or self._config.subquery_alias
            )
        else:
            self._state.source = self._from_builder.table(source)
        return self

    def table(self, name: str) -> Statement:
        return self.from_(name)

    def into(self, name: str) -> Statement:
        return self.from_(name)

    # ------------------------------------------------------------------
    # Joins
    # ------------------------------------------------------------------

    def join(
        self,
        table: str,
        first: str | None = None,
        operator: str | None = None,
        second: str | None = None,
        kind: str = "",
        *,
        using: str | Iterable[str] | None = None,
    ) -> Statement:
        """Append a join.

        Omitted ``first`` / ``second`` columns are inferred as
        ``<source alias>.id`` and ``<join alias>.<source table>_id``.
        ``using`` renders ``USING(col, …)`` instead of ``ON``; CROSS and
        NATURAL joins render neither.
        """
        self._state.joins.append(
            self._join_builder.build(
                table, first, operator, second, kind, using, self._state.source
            )
        )
        return self

    def inner_join(
        self, table: str, first: str | None = None, operator: str | None = None, second: str | None = None
    ) -> Statement:
        return self.join(table, first, operator, second, "INNER")

    def left_join(
        self, table: str, first: str | None = None, operator: str | None = None, second: str | None = None
    ) -> Statement:
        return self.join(table, first, operator, second, "LEFT")

    def right_join(
        self, table: str, first: str | None = None, operator: str | None = None, second: str | None = None
    ) -> Statement:
        return self.join(table, first, operator, second, "RIGHT")

    def cross_join(self, table: str) -> Statement:
        return self.join(table, kind="CROSS")

    def natural_join(self, table: str) -> Statement:
        return self.join(table, kind="NATURAL")

    # ------------------------------------------------------------------
    # Unions
    # ------------------------------------------------------------------

    def union(self, callback: Builder, kind: str = "") -> Statement:
        """Append a ``UNION [kind]`` branch built by ``callback``."""
        compiled = self._run_nested(callback)
        self._state.unions.append(self._union_builder.build(compiled, kind))
        return self

    def union_all(self, callback: Builder) -> Statement:
        return self.union(callback, "ALL")

    # ------------------------------------------------------------------
    # WHERE / HAVING
    # ------------------------------------------------------------------

    def _add_condition(
        self,
        clause: ClauseName,
        column: str | Builder,
        operator: Any,
        value: Any,
        boolean: str,
    ) -> Statement:
        condition = self._resolver.resolve(
            column, operator, value, normalize_connector(boolean, clause), clause
        )
        getattr(self._state, clause).append(condition)
        return self

    def where(
        self,
        column: str | Builder,
        operator: Any = MISSING,
        value: Any = MISSING,
        boolean: str = "AND",
    ) -> Statement:
        """Add a WHERE condition.

        Accepted forms::

            .where("id", 5)                       # id = ?
            .where("age", ">=", 18)               # age >= ?
            .where("deleted_at", "IS NULL")       # no binding
            .where("id", "IN", [1, 2, 3])         # id IN (?, ?, ?)
            .where("id", "IN", lambda q: ...)     # id IN (SELECT …)
            .where(lambda q: q.where(...).or_where(...))   # ( … )
        """
        return self._add_condition("where", column, operator, value, boolean)

    def or_where(self, column: str | Builder, operator: Any = MISSING, value: Any = MISSING) -> Statement:
        return self.where(column, operator, value, "OR")

    def where_in(self, column: str, values: Iterable[Any] | Builder, boolean: str = "AND") -> Statement:
        return self.where(column, "IN", values if callable(values) else list(values), boolean)

    def where_not_in(self, column: str, values: Iterable[Any] | Builder, boolean: str = "AND") -> Statement:
        return self.where(column, "NOT IN", values if callable(values) else list(values), boolean)

    def where_null(self, column: str, boolean: str = "AND") -> Statement:
        return self.where(column, "IS NULL", boolean=boolean)

    def where_not_null(self, column: str, boolean: str = "AND") -> Statement:
        return self.where(column, "IS NOT NULL", boolean=boolean)

    def or_where_null(self, column: str) -> Statement:
        return self.where_null(column, "OR")

    def or_where_not_null(self, column: str) -> Statement:
        return self.where_not_null(column, "OR")

    def having(
        self,
        column: str | Builder,
        operator: Any = MISSING,
        value: Any = MISSING,
        boolean: str = "AND",
    ) -> Statement:
        """Add a HAVING condition; same argument forms as :meth:`where`."""
        return self._add_condition("having", column, operator, value, boolean)

    def or_having(self, column: str | Builder, operator: Any = MISSING, value: Any = MISSING) -> Statement:
        return self.having(column, operator, value, "OR")

    # ------------------------------------------------------------------
    # Grouping, ordering, paging
    # ------------------------------------------------------------------

    def group(self, *columns: str | Iterable[str]) -> Statement:
        for column in columns:
            if isinstance(column, str):
                self._state.group_by.append(column)
            else:
                self._state.group_by.extend(column)
        return self

    group_by = group

    def order(self, column: str, direction: str = "ASC") -> Statement:
        self._state.order_by.append(f"{column} {direction.strip().upper()}")
        return self

    order_by = order

    def limit(self, limit: int, offset: int | None = None) -> Statement:
        """Set LIMIT and OFFSET, replacing any earlier pair.

        Raises:
            StatementError: If either value is negative.
        """
        if limit < 0 or (offset is not None and offset < 0):
            raise StatementError("LIMIT and OFFSET must be non-negative.", clause="LIMIT")
        self._state.limit = limit
        self._state.offset = offset
        return self

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def compile_select(self) -> str:
        return self._assembler.compile_select(self._state)

    def compile_where(self) -> str:
        return self._assembler.compile_where(self._state)

    def compile_having(self) -> str:
        return self._assembler.compile_having(self._state)

    def where_bindings(self) -> list[Any]:
        return self._assembler.where_params(self._state)

    def having_bindings(self) -> list[Any]:
        return self._assembler.having_params(self._state)

    def get_bindings(self) -> list[Any]:
        """All accumulated bindings: source, where, having, union."""
        return (
            self._state.source_bindings
            + self.where_bindings()
            + self.having_bindings()
            + self._state.union_bindings
        )

    def compile(self) -> CompiledSQL:
        """Compile the SELECT with exactly the bindings its placeholders need."""
        return self._assembler.compile(self._state)

    def to_sql(self) -> str:
        return self.compile_select()

    def compile_insert(self, data: Mapping[str, Any]) -> CompiledSQL:
        return self._assembler.compile_insert(self._state, data)

    def compile_update(self, data: Mapping[str, Any]) -> CompiledSQL:
        return self._assembler.compile_update(self._state, data)

    def compile_delete(self) -> CompiledSQL:
        return self._assembler.compile_delete(self._state)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _executor(self) -> Executor:
        if self._driver is None:
            raise StatementError("No driver configured for this statement.")
        return Executor(self._driver, self._config)

    def get(self) -> list[Row]:
        """Run the SELECT and return every row as a column → value dict.

        Raises:
            StatementError: If two result columns share a name; alias them.
        """
        compiled = self.compile()
        return self._executor().fetch_all(compiled)

    def first(self) -> Row | None:
        """Run the SELECT with ``LIMIT 1``; ``None`` when nothing matches."""
        self._state.limit = 1
        rows = self.get()
        return rows[0] if rows else None

    def morph(self, transform: Callable[..., Any], spread: bool = False) -> Iterator[Any]:
        """Return a lazy iterator of ``transform`` applied to each row.

        With ``spread`` the row's values are passed positionally in column
        order; otherwise the row dict is passed as one argument.  The query
        runs on the first pull.  Close the iterator (or exhaust it) to release
        the cursor.
        """
        compiled = self.compile()
        return self._executor().iterate(compiled, transform, spread)

    def insert(self, data: Mapping[str, Any]) -> int | None:
        """Insert one row and return the generated identifier, if any."""
        compiled = self.compile_insert(data)
        return self._executor().insert(compiled)

    def update(self, data: Mapping[str, Any]) -> int:
        """Update matching rows and return the affected-row count."""
        compiled = self.compile_update(data)
        return self._executor().affect(compiled)

    def delete(self) -> int:
        """Delete matching rows and return the affected-row count."""
        compiled = self.compile_delete()
        return self._executor().affect(compiled)
