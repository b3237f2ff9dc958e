"""Typed condition models for WHERE / HAVING clauses.

Each ``where()`` / ``having()`` call is resolved once, at call time, into one
of the frozen models below.  Nested statements (subqueries and condition
groups) are compiled before the model is created, so a condition only ever
holds SQL text and plain values, never a reference to another builder.

Usage::

    from chainsql.schema.conditions import Condition, SimpleCondition

    cond = SimpleCondition(connector="AND", column="status", operator="=", value="active")
    assert cond.kind == "simple"
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

#: Boolean keyword linking a condition to the one before it.
Connector = Literal["AND", "OR"]

_FROZEN = ConfigDict(extra="forbid", frozen=True)


class SimpleCondition(BaseModel):
    """``column operator ?`` with a single bound value."""

    model_config = _FROZEN

    kind: Literal["simple"] = "simple"
    connector: Connector = "AND"
    column: str
    operator: str = "="
    value: Any = None


class NullCondition(BaseModel):
    """``column IS [NOT] NULL`` – the operator carries the whole predicate."""

    model_config = _FROZEN

    kind: Literal["null"] = "null"
    connector: Connector = "AND"
    column: str
    operator: str = "IS NULL"


class MembershipCondition(BaseModel):
    """``column IN (?, ?, …)`` with one bound value per element."""

    model_config = _FROZEN

    kind: Literal["membership"] = "membership"
    connector: Connector = "AND"
    column: str
    operator: str = "IN"
    values: tuple[Any, ...] = Field(min_length=1)


class SubqueryCondition(BaseModel):
    """``column operator (SELECT …)`` with the subquery's own bindings."""

    model_config = _FROZEN

    kind: Literal["subquery"] = "subquery"
    connector: Connector = "AND"
    column: str
    operator: str = "IN"
    sql: str
    bindings: tuple[Any, ...] = ()


class GroupCondition(BaseModel):
    """``(nested clause)`` built from a nested statement's conditions."""

    model_config = _FROZEN

    kind: Literal["group"] = "group"
    connector: Connector = "AND"
    sql: str
    bindings: tuple[Any, ...] = ()


Condition = Annotated[
    Union[
        SimpleCondition,
        NullCondition,
        MembershipCondition,
        SubqueryCondition,
        GroupCondition,
    ],
    Field(discriminator="kind"),
]
