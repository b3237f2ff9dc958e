"""Unit tests for ConditionResolver and ConditionCompiler."""
from __future__ import annotations

from collections import deque

import pydantic
import pytest

from chainsql import Statement
from chainsql.compile.conditions import (
    ConditionCompiler,
    ConditionResolver,
    is_collection,
    is_null_operator,
    is_null_test,
)
from chainsql.errors import StatementError
from chainsql.schema.conditions import (
    GroupCondition,
    MembershipCondition,
    NullCondition,
    SimpleCondition,
    SubqueryCondition,
)


@pytest.fixture()
def resolver() -> ConditionResolver:
    return ConditionResolver(Statement)


def test_two_argument_form_defaults_to_equals(resolver):
    cond = resolver.resolve("id", 5)
    assert cond == SimpleCondition(column="id", operator="=", value=5)


def test_three_argument_form(resolver):
    cond = resolver.resolve("name", "LIKE", "gr%", connector="OR")
    assert isinstance(cond, SimpleCondition)
    assert (cond.operator, cond.value, cond.connector) == ("LIKE", "gr%", "OR")


def test_explicit_none_value_is_bound(resolver):
    cond = resolver.resolve("deleted_at", "=", None)
    assert isinstance(cond, SimpleCondition)
    assert cond.value is None


def test_string_value_null_is_not_a_null_test(resolver):
    cond = resolver.resolve("name", "=", "null")
    assert isinstance(cond, SimpleCondition)


@pytest.mark.parametrize("operator", ["IS NULL", "is not null", "IS  NOT NULL"])
def test_null_operators_bind_nothing(resolver, operator):
    cond = resolver.resolve("deleted_at", operator)
    assert isinstance(cond, NullCondition)
    assert cond.operator == operator
    assert ConditionCompiler().params([cond]) == []


def test_null_operator_wins_over_value(resolver):
    cond = resolver.resolve("deleted_at", "IS NULL", 42)
    assert isinstance(cond, NullCondition)


def test_column_only_is_null_test(resolver):
    assert resolver.resolve("deleted_at") == NullCondition(column="deleted_at", operator="IS NULL")
    assert isinstance(resolver.resolve("deleted_at", None), NullCondition)


def test_list_value_becomes_membership(resolver):
    cond = resolver.resolve("id", [3, 1, 2])
    assert cond == MembershipCondition(column="id", operator="IN", values=(3, 1, 2))


def test_membership_keeps_explicit_operator(resolver):
    cond = resolver.resolve("status", "NOT IN", ("a", "b"))
    assert isinstance(cond, MembershipCondition)
    assert cond.operator == "NOT IN"


def test_string_is_not_treated_as_sequence(resolver):
    assert isinstance(resolver.resolve("code", "=", "abc"), SimpleCondition)


def test_empty_membership_raises(resolver):
    with pytest.raises(StatementError):
        resolver.resolve("id", "IN", [])


def test_callable_value_becomes_subquery(resolver):
    cond = resolver.resolve("id", "NOT IN", lambda q: q.select("user_id").from_("posts").where("id", 7))
    assert isinstance(cond, SubqueryCondition)
    assert cond.sql == "SELECT user_id FROM posts WHERE id = ?"
    assert cond.bindings == (7,)
    assert ConditionCompiler().render(cond) == "id NOT IN (SELECT user_id FROM posts WHERE id = ?)"


def test_callable_column_becomes_group(resolver):
    cond = resolver.resolve(lambda q: q.where("a", 1).or_where("b", 2), connector="OR")
    assert isinstance(cond, GroupCondition)
    assert cond.sql == "(a = ? OR b = ?)"
    assert cond.bindings == (1, 2)
    assert cond.connector == "OR"


def test_group_reads_having_clause(resolver):
    cond = resolver.resolve(lambda q: q.where("ignored", 0).having("SUM(x)", ">", 3), clause="having")
    assert cond.sql == "(SUM(x) > ?)"
    assert cond.bindings == (3,)


def test_conditions_are_immutable():
    cond = SimpleCondition(column="id", value=1)
    with pytest.raises(pydantic.ValidationError):
        cond.value = 2


def test_render_clause_strips_leading_connector():
    conds = [
        SimpleCondition(connector="OR", column="a", value=1),
        NullCondition(connector="AND", column="b"),
        MembershipCondition(connector="OR", column="c", values=(1, 2)),
    ]
    compiler = ConditionCompiler()
    assert compiler.render_clause(conds) == "a = ? AND b IS NULL OR c IN (?, ?)"
    assert compiler.params(conds) == [1, 1, 2]


def test_is_null_operator():
    assert is_null_operator("IS NULL")
    assert is_null_operator("is not null")
    assert not is_null_operator("=")
    assert not is_null_operator(None)
    assert not is_null_operator(["null"])


def test_statement_connector_is_normalized():
    sql = Statement().from_("t").where("a", 1).where("b", 2, boolean="or").compile_select()
    assert sql == "SELECT * FROM t WHERE a = ? OR b = ?"


def test_statement_rejects_unknown_connector():
    with pytest.raises(StatementError):
        Statement().from_("t").where("a", "=", 1, boolean="XOR")


def test_where_helpers():
    r = (
        Statement()
        .from_("t")
        .where_in("a", (x for x in [1, 2]))
        .where_not_in("b", ["x"])
        .where_null("c")
        .or_where_not_null("d")
        .or_where_null("e")
        .where_not_null("f")
        .compile()
    )
    assert r.sql == (
        "SELECT * FROM t WHERE a IN (?, ?) AND b NOT IN (?) AND c IS NULL"
        " OR d IS NOT NULL OR e IS NULL AND f IS NOT NULL"
    )
    assert r.params == [1, 2, "x"]


def test_where_in_accepts_subquery():
    sql = Statement().from_("users").where_in("id", lambda q: q.select("user_id").from_("posts")).compile_select()
    assert sql == "SELECT * FROM users WHERE id IN (SELECT user_id FROM posts)"


@pytest.mark.parametrize("value", ["Annulled", "null", "x' OR 1=1 OR 'null", "IS NULL OR 1=1"])
def test_two_argument_value_mentioning_null_is_bound(resolver, value):
    cond = resolver.resolve("name", value)
    assert cond == SimpleCondition(column="name", operator="=", value=value)


def test_two_argument_value_mentioning_null_compiles_to_placeholder():
    r = Statement().from_("users").where("name", "Annulled").compile()
    assert r.sql == "SELECT * FROM users WHERE name = ?"
    assert r.params == ["Annulled"]


def test_is_null_test():
    assert is_null_test("IS NULL")
    assert is_null_test("  is  not\tnull ")
    assert not is_null_test("Annulled")
    assert not is_null_test("IS NULL OR 1=1")
    assert not is_null_test(None)


@pytest.mark.parametrize(
    "values, expected",
    [
        (range(1, 4), (1, 2, 3)),
        ({1: "a", 2: "b"}.keys(), (1, 2)),
        (deque(["x", "y"]), ("x", "y")),
    ],
    ids=["range", "dict_keys", "deque"],
)
def test_any_sequence_or_set_becomes_membership(resolver, values, expected):
    cond = resolver.resolve("id", "IN", values)
    assert cond == MembershipCondition(column="id", operator="IN", values=expected)


def test_range_compiles_one_placeholder_per_element():
    r = Statement().from_("users").where("id", range(1, 4)).compile()
    assert r.sql == "SELECT * FROM users WHERE id IN (?, ?, ?)"
    assert r.params == [1, 2, 3]


def test_is_collection():
    assert is_collection([1]) and is_collection(frozenset()) and is_collection(range(2))
    for scalar in ("ab", b"ab", bytearray(b"ab"), memoryview(b"ab"), 5, None):
        assert not is_collection(scalar)


def test_bytes_value_is_bound_whole(resolver):
    assert resolver.resolve("blob", b"\x00\x01") == SimpleCondition(column="blob", value=b"\x00\x01")


@pytest.mark.parametrize("clause", ["where", "having"])
def test_unknown_connector_reports_its_clause(clause):
    q = Statement().from_("t").group("a")
    with pytest.raises(StatementError) as exc_info:
        getattr(q, clause)("a", "=", 1, boolean="XOR")
    assert exc_info.value.clause == clause
