"""Contract tests for adapter protocol compliance."""

from __future__ import annotations

import sqlite3

import pytest

from rowdb.adapters.protocol import SyncAdapter
from rowdb.adapters.sqlite import SqliteSyncAdapter
from rowdb.core.connection import ConnectionConfig
from rowdb.core.enums import ErrorKind
from rowdb.core.exceptions import (
    CollectionDoesNotExist,
    ConnectionError,  # noqa: A004
    ConstraintViolation,
    ExecutionError,
    PoolError,
    RecordNotFound,
)


@pytest.fixture
def memory_config() -> ConnectionConfig:
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=4)


class TestSqliteSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        adapter = SqliteSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.paramstyle == "named"

    def test_lifecycle(self, memory_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(memory_config)
        assert len(pool) == 1

        conn = adapter.acquire_connection(pool)
        assert conn is not None

        cursor = adapter.execute(conn, "SELECT 1 AS val")
        row = cursor.fetchone()
        assert row["val"] == 1

        adapter.release_connection(conn, pool)
        assert len(pool) == 1

        adapter.close_pool(pool)
        assert len(pool) == 0

    def test_file_pool_size(self, db_path: str) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(ConnectionConfig(database=db_path, pool_size=3))
        assert len(pool) == 3
        adapter.close_pool(pool)

    def test_empty_pool(self) -> None:
        with pytest.raises(PoolError):
            SqliteSyncAdapter().acquire_connection([])

    def test_connect_without_database(self) -> None:
        with pytest.raises(ConnectionError):
            SqliteSyncAdapter().connect(ConnectionConfig(database=""))

    def test_quote_identifier(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.quote_identifier("name") == '"name"'
        assert adapter.quote_identifier('a"b') == '"a""b"'


class TestSqliteIntrospection:
    @pytest.fixture
    def conn(self, memory_config: ConnectionConfig) -> sqlite3.Connection:
        adapter = SqliteSyncAdapter()
        conn = adapter.connect(memory_config)
        conn.execute("CREATE TABLE artist (id INTEGER PRIMARY KEY, name TEXT)")
        conn.execute("CREATE TABLE pair (b TEXT, a TEXT, PRIMARY KEY (a, b))")
        conn.execute("CREATE TABLE loose (value TEXT)")
        conn.execute("CREATE VIEW artist_names AS SELECT name FROM artist")
        return conn

    def test_table_names(self, conn: sqlite3.Connection) -> None:
        assert SqliteSyncAdapter().table_names(conn) == ["artist", "loose", "pair"]

    def test_table_exists(self, conn: sqlite3.Connection) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.table_exists(conn, "artist")
        assert adapter.table_exists(conn, "artist_names")
        assert not adapter.table_exists(conn, "nothing")

    def test_primary_keys_in_key_order(self, conn: sqlite3.Connection) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.primary_keys(conn, "artist") == ["id"]
        assert adapter.primary_keys(conn, "pair") == ["a", "b"]
        assert adapter.primary_keys(conn, "loose") == []

    def test_keys_for_rowid(self, conn: sqlite3.Connection) -> None:
        cursor = conn.execute("INSERT INTO pair (a, b) VALUES ('x', 'y')")
        keys = SqliteSyncAdapter().keys_for_rowid(conn, "pair", ["a", "b"], cursor.lastrowid)
        assert keys == {"a": "x", "b": "y"}


class TestErrorTranslation:
    def test_integrity_error(self) -> None:
        error = sqlite3.IntegrityError("UNIQUE constraint failed: artist.id")
        translated = SqliteSyncAdapter().translate_error(error)
        assert isinstance(translated, ConstraintViolation)
        assert translated.kind is ErrorKind.CONSTRAINT_VIOLATION
        assert str(translated) == "UNIQUE constraint failed: artist.id"

    @pytest.mark.parametrize("message", ["no such table: ghost", "no such table: main.ghost"])
    def test_missing_table(self, message: str) -> None:
        translated = SqliteSyncAdapter().translate_error(sqlite3.OperationalError(message))
        assert isinstance(translated, CollectionDoesNotExist)
        assert translated.collection == "ghost"

    def test_other_errors_keep_the_message(self) -> None:
        error = sqlite3.OperationalError('near "SELEC": syntax error')
        translated = SqliteSyncAdapter().translate_error(error)
        assert type(translated) is ExecutionError
        assert str(translated) == 'near "SELEC": syntax error'

    def test_rowdb_errors_pass_through(self) -> None:
        error = RecordNotFound("artist")
        assert SqliteSyncAdapter().translate_error(error) is error
