"""Condition resolution and rendering.

``ConditionResolver`` turns the loosely-typed arguments of one ``where()`` /
``having()`` call into a typed :mod:`~chainsql.schema.conditions` model.
``ConditionCompiler`` renders a list of those models back into a clause body
and its ordered bindings.  The two never disagree on placeholder order
because both walk the same immutable models.

Resolution precedence
---------------------
1. column is callable                    → ``GroupCondition``
2. operator mentions ``null``            → ``NullCondition`` (no binding);
   with the value omitted only a bare ``IS [NOT] NULL`` counts
3. value omitted                         → operator slot is the value
4. value is callable                     → ``SubqueryCondition`` (``IN``)
5. value is a non-string collection      → ``MembershipCondition`` (``IN``)
6. anything else                         → ``SimpleCondition``
"""
from __future__ import annotations

import re
from collections.abc import Callable, Sequence, Set
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

from chainsql.compile.base import placeholders
from chainsql.errors import StatementError
from chainsql.schema.conditions import (
    Condition,
    Connector,
    GroupCondition,
    MembershipCondition,
    NullCondition,
    SimpleCondition,
    SubqueryCondition,
)

if TYPE_CHECKING:
    from chainsql.statement import Statement

#: Which clause of the nested statement a group condition reads from.
ClauseName = Literal["where", "having"]


class _Missing(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


#: Sentinel for "argument not supplied"; ``None`` is a legitimate value.
MISSING = _Missing.MISSING

#: Scalar types that are sequences but bind as one value.
_SCALAR_SEQUENCES = (str, bytes, bytearray, memoryview)

_NULL_TEST = re.compile(r"^\s*IS\s+(NOT\s+)?NULL\s*$", re.IGNORECASE)


def is_null_operator(operator: Any) -> bool:
    """Return ``True`` when ``operator`` is itself a NULL test."""
    return isinstance(operator, str) and "null" in operator.lower()


def is_null_test(argument: Any) -> bool:
    """Return ``True`` only for a bare ``IS NULL`` / ``IS NOT NULL``."""
    return isinstance(argument, str) and _NULL_TEST.match(argument) is not None


def is_collection(value: Any) -> bool:
    return isinstance(value, (Sequence, Set)) and not isinstance(value, _SCALAR_SEQUENCES)


def normalize_connector(boolean: str, clause: ClauseName = "where") -> Connector:
    connector = boolean.strip().upper()
    if connector not in ("AND", "OR"):
        raise StatementError(f"Unknown boolean connector: '{boolean}'.", clause=clause)
    return connector  # type: ignore[return-value]


class ConditionResolver:
    """Resolves call arguments into condition models.

    Args:
        subquery_factory: Callable returning a fresh nested statement that
            shares the caller's driver and config.
        empty_group_predicate: Text used when a group callback adds nothing.
    """

    def __init__(
        self,
        subquery_factory: Callable[[], Statement],
        empty_group_predicate: str = "1=1",
    ) -> None:
        self._subquery_factory = subquery_factory
        self._empty_group_predicate = empty_group_predicate

    def resolve(
        self,
        column: str | Callable[[Statement], Any],
        operator: Any = MISSING,
        value: Any = MISSING,
        connector: Connector = "AND",
        clause: ClauseName = "where",
    ) -> Condition:
        """Resolve one ``where()`` / ``having()`` invocation.

        Args:
            column: Column expression, or a callback configuring a group.
            operator: Comparison operator, or the value in the two-argument form.
            value: Bound value, a collection, or a subquery callback.
            connector: ``AND`` / ``OR`` relative to the previous condition.
            clause: ``where`` or ``having``; selects which clause of a nested
                group statement is read.

        Returns:
            An immutable condition model.

        Raises:
            StatementError: If a membership test is given an empty collection.
        """
        if callable(column):
            return self._group(column, connector, clause)

        if value is MISSING:
            if operator is MISSING or operator is None:
                return NullCondition(connector=connector, column=column)
            if is_null_test(operator):
                return NullCondition(connector=connector, column=column, operator=operator)
            operator, value = None, operator
        elif is_null_operator(operator):
            return NullCondition(connector=connector, column=column, operator=operator)
        elif operator is MISSING:
            operator = None

        if callable(value):
            compiled = self._run(value).compile()
            return SubqueryCondition(
                connector=connector,
                column=column,
                operator=operator or "IN",
                sql=compiled.sql,
                bindings=tuple(compiled.params),
            )

        if is_collection(value):
            values = tuple(value)
            if not values:
                raise StatementError(
                    f"Empty value list for '{column} {operator or 'IN'}'.", clause=clause
                )
            return MembershipCondition(
                connector=connector,
                column=column,
                operator=operator or "IN",
                values=values,
            )

        return SimpleCondition(
            connector=connector, column=column, operator=operator or "=", value=value
        )

    # ------------------------------------------------------------------

    def _group(
        self,
        callback: Callable[[Statement], Any],
        connector: Connector,
        clause: ClauseName,
    ) -> GroupCondition:
        nested = self._run(callback)
        if clause == "having":
            body, bindings = nested.compile_having(), nested.having_bindings()
        else:
            body, bindings = nested.compile_where(), nested.where_bindings()
        return GroupCondition(
            connector=connector,
            sql=f"({body or self._empty_group_predicate})",
            bindings=tuple(bindings),
        )

    def _run(self, callback: Callable[[Statement], Any]) -> Statement:
        nested = self._subquery_factory()
        callback(nested)
        return nested


class ConditionCompiler:
    """Renders condition lists to SQL clause bodies and binding lists."""

    def render(self, condition: Condition) -> str:
        if isinstance(condition, SimpleCondition):
            return f"{condition.column} {condition.operator} ?"
        if isinstance(condition, NullCondition):
            return f"{condition.column} {condition.operator}"
        if isinstance(condition, MembershipCondition):
            return f"{condition.column} {condition.operator} ({placeholders(len(condition.values))})"
        if isinstance(condition, SubqueryCondition):
            return f"{condition.column} {condition.operator} ({condition.sql})"
        return condition.sql

    def render_clause(self, conditions: list[Condition]) -> str:
        """Join conditions with their connectors, dropping the leading one."""
        sql = ""
        for index, condition in enumerate(conditions):
            fragment = self.render(condition)
            sql += fragment if index == 0 else f" {condition.connector} {fragment}"
        return sql

    def params(self, conditions: list[Condition]) -> list[Any]:
        """Return the bound values of ``conditions`` in placeholder order."""
        values: list[Any] = []
        for condition in conditions:
            if isinstance(condition, SimpleCondition):
                values.append(condition.value)
            elif isinstance(condition, MembershipCondition):
                values.extend(condition.values)
            elif isinstance(condition, (SubqueryCondition, GroupCondition)):
                values.extend(condition.bindings)
        return values
