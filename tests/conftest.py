"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from rowdb.adapters.sqlite import SqliteSyncAdapter
from rowdb.core.connection import ConnectionConfig
from rowdb.core.session import Session

SCHEMA = [
    "CREATE TABLE artist (id INTEGER PRIMARY KEY AUTOINCREMENT, name VARCHAR(60))",
    "CREATE TABLE publication ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, title VARCHAR(80), author_id INTEGER)",
    "CREATE TABLE review ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, publication_id INTEGER, name VARCHAR(80), "
    "comments TEXT, created DATETIME NOT NULL)",
    "CREATE TABLE data_types ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "_uint INTEGER, _uint8 INTEGER, _uint16 INTEGER, _uint32 INTEGER, _uint64 INTEGER, "
    "_int INTEGER, _int8 INTEGER, _int16 INTEGER, _int32 INTEGER, _int64 INTEGER, "
    "_float32 REAL, _float64 REAL, _bool INTEGER, _string TEXT, "
    "_date DATETIME, _nildate DATETIME NULL, _ptrdate DATETIME, "
    "_defaultdate DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP, _time INTEGER)",
    'CREATE TABLE stats_test (id INTEGER PRIMARY KEY AUTOINCREMENT, "numeric" INTEGER, '
    '"value" INTEGER)',
    "CREATE TABLE composite_keys ("
    "code VARCHAR(255) NOT NULL, user_id VARCHAR(255) NOT NULL, "
    "some_val VARCHAR(255) DEFAULT '', PRIMARY KEY (code, user_id))",
]


@pytest.fixture
def adapter() -> SqliteSyncAdapter:
    return SqliteSyncAdapter()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Path of a fresh SQLite database file."""
    return str(tmp_path / "rowdb_test.sqlite3")


@pytest.fixture
def sqlite_config(db_path: str) -> ConnectionConfig:
    """File-backed SQLite connection config."""
    return ConnectionConfig(driver="sqlite", database=db_path, pool_size=2)


@pytest.fixture
def session(sqlite_config: ConnectionConfig) -> Iterator[Session]:
    """Session over a database holding the test schema."""
    sess = Session(sqlite_config)
    for statement in SCHEMA:
        sess.execute(statement)
    yield sess
    sess.close()


@pytest.fixture
def artists(session: Session) -> Session:
    """Session whose artist table holds four rows."""
    for name in ("Ozzie", "Flea", "Slash", "Janus"):
        session.collection("artist").append({"name": name})
    return session
