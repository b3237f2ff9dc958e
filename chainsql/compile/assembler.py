"""Fixed-order assembly of statement state into SQL.

``SQLAssembler`` is the only place that knows clause order.  Every method is a
pure function of the :class:`~chainsql.schema.state.StatementState` it is
given, so compiling twice without mutation yields identical output.

SELECT clause order
-------------------
``SELECT`` → ``FROM`` → joins → ``WHERE`` → ``GROUP BY`` → ``HAVING`` →
``ORDER BY`` → ``LIMIT`` / ``OFFSET`` → ``UNION`` branches.

Bindings are returned in the same order: source subquery, where, having
(only when the HAVING clause is emitted), union branches.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from chainsql.compile.base import CompiledSQL, placeholders
from chainsql.compile.clause_builders import UnionBuilder
from chainsql.compile.conditions import ConditionCompiler
from chainsql.errors import StatementError, TableNotSetError
from chainsql.schema.state import SourceRef, StatementState


class SQLAssembler:
    """Compiles a :class:`StatementState` to SQL text and ordered params."""

    def __init__(self, conditions: ConditionCompiler | None = None) -> None:
        self._conditions = conditions or ConditionCompiler()

    # ------------------------------------------------------------------
    # Clause bodies
    # ------------------------------------------------------------------

    def compile_where(self, state: StatementState) -> str:
        return self._conditions.render_clause(state.where)

    def compile_having(self, state: StatementState) -> str:
        return self._conditions.render_clause(state.having)

    def where_params(self, state: StatementState) -> list[Any]:
        return self._conditions.params(state.where)

    def having_params(self, state: StatementState) -> list[Any]:
        return self._conditions.params(state.having)

    @staticmethod
    def emits_having(state: StatementState) -> bool:
        return bool(state.having) and bool(state.group_by)

    # ------------------------------------------------------------------
    # SELECT
    # ------------------------------------------------------------------

    def compile_select(self, state: StatementState) -> str:
        """Render the full SELECT statement.

        Raises:
            TableNotSetError: If no source has been configured.
        """
        source = self._require_source(state, "select")
        columns = ", ".join(state.columns) if state.columns else "*"
        sql = f"SELECT {columns} FROM {source.sql}"

        if state.joins:
            sql += " " + " ".join(state.joins)

        where = self.compile_where(state)
        if where:
            sql += f" WHERE {where}"

        if state.group_by:
            sql += f" GROUP BY {', '.join(state.group_by)}"
            having = self.compile_having(state)
            if having:
                sql += f" HAVING {having}"

        if state.order_by:
            sql += f" ORDER BY {', '.join(state.order_by)}"

        if state.limit is not None:
            sql += f" LIMIT {state.limit}"
            if state.offset:
                sql += f" OFFSET {state.offset}"

        for branch in state.unions:
            sql += UnionBuilder.render(branch)

        return sql

    def select_params(self, state: StatementState) -> list[Any]:
        """Bindings matching :meth:`compile_select`, in placeholder order."""
        params = state.source_bindings + self.where_params(state)
        if self.emits_having(state):
            params += self.having_params(state)
        return params + state.union_bindings

    def compile(self, state: StatementState) -> CompiledSQL:
        return CompiledSQL(sql=self.compile_select(state), params=self.select_params(state))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def compile_insert(self, state: StatementState, data: Mapping[str, Any]) -> CompiledSQL:
        source = self._require_table(state, "insert")
        self._require_data(data, "insert")
        columns = ", ".join(data.keys())
        sql = f"INSERT INTO {source.sql} ({columns}) VALUES ({placeholders(len(data))})"
        return CompiledSQL(sql=sql, params=list(data.values()))

    def compile_update(self, state: StatementState, data: Mapping[str, Any]) -> CompiledSQL:
        source = self._require_table(state, "update")
        self._require_data(data, "update")
        assignments = ", ".join(f"{column} = ?" for column in data)
        sql = f"UPDATE {source.sql} SET {assignments}"
        where = self.compile_where(state)
        if where:
            sql += f" WHERE {where}"
        params = list(data.values()) + self.where_params(state)
        return CompiledSQL(sql=sql, params=params)

    def compile_delete(self, state: StatementState) -> CompiledSQL:
        source = self._require_table(state, "delete")
        sql = f"DELETE FROM {source.sql}"
        where = self.compile_where(state)
        if where:
            sql += f" WHERE {where}"
        return CompiledSQL(sql=sql, params=self.where_params(state))

    # ------------------------------------------------------------------

    @staticmethod
    def _require_source(state: StatementState, operation: str) -> SourceRef:
        if state.source is None:
            raise TableNotSetError(operation)
        return state.source

    @classmethod
    def _require_table(cls, state: StatementState, operation: str) -> SourceRef:
        source = cls._require_source(state, operation)
        if source.derived:
            raise StatementError(f"Cannot {operation} a derived table.", clause=operation.upper())
        return source

    @staticmethod
    def _require_data(data: Mapping[str, Any], operation: str) -> None:
        if not data:
            raise StatementError(f"Cannot {operation} an empty data mapping.", clause=operation.upper())
