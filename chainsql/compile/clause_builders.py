"""Clause-level SQL builders.

Each class renders exactly one clause fragment at the moment the fluent call
is made; the result is stored as text and never re-parsed.

Classes
-------
FromClauseBuilder  ``FROM <table | (subquery) AS alias>``
JoinClauseBuilder  ``[kind] JOIN … ON … | USING(…)``
UnionBuilder       `` UNION [ALL] <select>``
"""
from __future__ import annotations

from collections.abc import Iterable

from chainsql.compile.base import CompiledSQL
from chainsql.errors import StatementError, TableNotSetError
from chainsql.schema.state import SourceRef, UnionBranch

#: Join kinds rendered without an ON / USING predicate.
_UNCONDITIONAL_JOINS = ("CROSS", "NATURAL")


def parse_table_reference(reference: str) -> tuple[str, str]:
    """Split ``"name"``, ``"name alias"`` or ``"name AS alias"``.

    Returns:
        ``(table, alias)``; the alias is the table name when none is given.
    """
    parts = reference.split()
    if len(parts) == 2:
        return parts[0], parts[1]
    if len(parts) == 3 and parts[1].upper() == "AS":
        return parts[0], parts[2]
    return reference.strip(), reference.strip()


class FromClauseBuilder:
    """Builds the :class:`~chainsql.schema.state.SourceRef` for ``from_()``."""

    def table(self, reference: str) -> SourceRef:
        if not reference or not reference.strip():
            raise StatementError("Table name must not be empty.", clause="FROM")
        table, alias = parse_table_reference(reference)
        return SourceRef(sql=reference.strip(), table=table, alias=alias)

    def subquery(self, compiled: CompiledSQL, alias: str) -> SourceRef:
        return SourceRef(
            sql=f"({compiled.sql}) AS {alias}",
            table=alias,
            alias=alias,
            bindings=tuple(compiled.params),
            derived=True,
        )


class JoinClauseBuilder:
    """Builds a single join fragment, inferring a conventional foreign key.

    With ``first`` / ``second`` omitted the predicate is
    ``<source alias>.id = <join alias>.<source table>_id``.
    """

    def build(
        self,
        table: str,
        first: str | None = None,
        operator: str | None = None,
        second: str | None = None,
        kind: str = "",
        using: str | Iterable[str] | None = None,
        source: SourceRef | None = None,
    ) -> str:
        kind = " ".join(kind.split()).upper()
        prefix = f"{kind} JOIN" if kind else "JOIN"

        if kind.split(" ")[0] in _UNCONDITIONAL_JOINS:
            return f"{prefix} {table}"

        if using is not None:
            columns = using if isinstance(using, str) else ", ".join(using)
            if not columns:
                raise StatementError("USING requires at least one column.", clause="JOIN")
            return f"{prefix} {table} USING({columns})"

        if first is None or second is None:
            if source is None:
                raise TableNotSetError("join")
            _, join_alias = parse_table_reference(table)
            source_table = source.table.rsplit(".", 1)[-1]
            first = first or f"{source.alias}.id"
            second = second or f"{join_alias}.{source_table}_id"

        return f"{prefix} {table} ON {first} {operator or '='} {second}"


class UnionBuilder:
    """Builds one union branch from a compiled nested SELECT."""

    def build(self, compiled: CompiledSQL, kind: str = "") -> UnionBranch:
        kind = kind.strip().upper()
        if kind not in ("", "ALL", "DISTINCT"):
            raise StatementError(f"Unknown UNION kind: '{kind}'.", clause="UNION")
        return UnionBranch(kind=kind, sql=compiled.sql, bindings=tuple(compiled.params))

    @staticmethod
    def render(branch: UnionBranch) -> str:
        keyword = f"UNION {branch.kind}" if branch.kind else "UNION"
        return f" {keyword} {branch.sql}"
