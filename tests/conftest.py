"""Shared pytest fixtures for chainsql unit and integration tests."""
from __future__ import annotations

import sqlite3
from collections.abc import Iterator

import pytest

from chainsql.execute.sqlite import SQLiteDriver
from tests.fixtures import RecordingDriver, load_ddl


@pytest.fixture()
def recorder() -> RecordingDriver:
    """Driver that records every prepared statement without a database."""
    return RecordingDriver()


@pytest.fixture()
def conn() -> Iterator[sqlite3.Connection]:
    """In-memory SQLite database with the sample ``users`` / ``posts`` schema."""
    connection = sqlite3.connect(":memory:")
    connection.executescript(load_ddl())
    yield connection
    connection.close()


@pytest.fixture()
def driver(conn: sqlite3.Connection) -> SQLiteDriver:
    return SQLiteDriver(conn)
