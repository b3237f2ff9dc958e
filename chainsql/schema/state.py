"""Mutable state of one statement under construction.

``StatementState`` is owned by exactly one :class:`~chainsql.Statement`.
Nested statements get their own state; the only thing ever copied from a
nested state into a parent is compiled SQL text and binding values.

Binding partitions
------------------
The final binding sequence is ``source + where + having + union``, which is
the left-to-right order of the clauses that can carry placeholders.  The
where and having partitions are derived from the condition lists, so they
grow monotonically as conditions are appended and are never reset.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chainsql.schema.conditions import Condition


@dataclass(frozen=True)
class SourceRef:
    """The rendered FROM target.

    Attributes:
        sql: Text emitted after ``FROM`` (``users u`` or ``(SELECT …) AS t``).
        table: Bare table name used for join inference (the alias for a
            derived table).
        alias: Qualifier used for join inference.
        bindings: Values bound inside a derived-table subquery.
        derived: ``True`` when the source is a subquery.
    """

    sql: str
    table: str
    alias: str
    bindings: tuple[Any, ...] = ()
    derived: bool = False


@dataclass(frozen=True)
class UnionBranch:
    """One ``UNION [ALL] <select>`` suffix."""

    kind: str
    sql: str
    bindings: tuple[Any, ...] = ()


@dataclass
class StatementState:
    """Everything a statement accumulates before compilation."""

    columns: list[str] = field(default_factory=list)
    source: SourceRef | None = None
    joins: list[str] = field(default_factory=list)
    where: list[Condition] = field(default_factory=list)
    having: list[Condition] = field(default_factory=list)
    group_by: list[str] = field(default_factory=list)
    order_by: list[str] = field(default_factory=list)
    limit: int | None = None
    offset: int | None = None
    unions: list[UnionBranch] = field(default_factory=list)

    @property
    def source_bindings(self) -> list[Any]:
        return list(self.source.bindings) if self.source else []

    @property
    def union_bindings(self) -> list[Any]:
        values: list[Any] = []
        for branch in self.unions:
            values.extend(branch.bindings)
        return values
