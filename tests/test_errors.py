"""Unit tests for error handling: missing table, misuse, config, driver failures."""
from __future__ import annotations

import pytest

from chainsql import Statement, StatementConfig
from chainsql.errors import (
    ChainSQLError,
    ConfigError,
    DriverError,
    StatementError,
    TableNotSetError,
)
from tests.fixtures import RecordingDriver


@pytest.mark.parametrize(
    "call",
    [
        lambda q: q.insert({"x": 1}),
        lambda q: q.update({"x": 1}),
        lambda q: q.delete(),
        lambda q: q.get(),
        lambda q: q.first(),
        lambda q: q.morph(dict),
    ],
    ids=["insert", "update", "delete", "get", "first", "morph"],
)
def test_missing_table_raises_before_driver_call(recorder, call):
    with pytest.raises(TableNotSetError, match="Table not set"):
        call(Statement(recorder))
    assert recorder.prepared == []


def test_table_not_set_records_operation(recorder):
    with pytest.raises(TableNotSetError) as exc_info:
        Statement(recorder).update({"x": 1})
    assert exc_info.value.operation == "update"


@pytest.mark.parametrize("method", ["insert", "update"])
def test_empty_data_mapping_raises(recorder, method):
    with pytest.raises(StatementError):
        getattr(Statement(recorder).from_("users"), method)({})
    assert recorder.prepared == []


@pytest.mark.parametrize(
    "call",
    [lambda q: q.insert({"x": 1}), lambda q: q.update({"x": 1}), lambda q: q.delete()],
    ids=["insert", "update", "delete"],
)
def test_mutating_derived_table_raises(recorder, call):
    q = Statement(recorder).from_(lambda sub: sub.from_("users"), "u")
    with pytest.raises(StatementError) as exc_info:
        call(q)
    assert "derived table" in str(exc_info.value)
    assert recorder.prepared == []


def test_from_twice_raises():
    q = Statement().from_("users")
    with pytest.raises(StatementError) as exc_info:
        q.from_("posts")
    assert exc_info.value.clause == "FROM"


def test_empty_table_name_raises():
    with pytest.raises(StatementError):
        Statement().from_("  ")


@pytest.mark.parametrize("args", [(-1,), (1, -5)])
def test_negative_limit_raises(args):
    with pytest.raises(StatementError):
        Statement().from_("users").limit(*args)


def test_unknown_union_kind_raises():
    with pytest.raises(StatementError):
        Statement().from_("a").union(lambda q: q.from_("b"), "SOME")


def test_terminal_call_without_driver_raises():
    with pytest.raises(StatementError):
        Statement().from_("users").get()


def test_all_errors_share_base_class():
    for exc_type in (TableNotSetError, StatementError, DriverError, ConfigError):
        assert issubclass(exc_type, ChainSQLError)


def test_driver_error_propagates_unchanged_and_closes_cursor():
    driver = RecordingDriver(fail_with="no such table: ghosts")
    with pytest.raises(DriverError, match="no such table") as exc_info:
        Statement(driver).from_("ghosts").where("id", 1).get()
    assert exc_info.value.sql == "SELECT * FROM ghosts WHERE id = ?"
    assert driver.prepared[0].closed


def test_config_load_rejects_unknown_options():
    with pytest.raises(ConfigError) as exc_info:
        StatementConfig.load({"subquery_alias": "t", "bogus": 1})
    assert exc_info.value.errors


def test_config_load_rejects_bad_alias():
    with pytest.raises(ConfigError):
        StatementConfig.load({"subquery_alias": "bad alias"})


def test_config_load_accepts_valid_options():
    config = StatementConfig.load({"subquery_alias": "sub", "log_statements": False})
    assert config.subquery_alias == "sub"
    assert config.log_statements is False
