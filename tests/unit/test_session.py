"""Unit tests for Session: opening, switching databases and raw statements."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import pytest

import rowdb
from rowdb.core.connection import ConnectionConfig
from rowdb.core.enums import ErrorKind
from rowdb.core.exceptions import (
    AdapterError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    PoolError,
)
from rowdb.core.executor import Executor
from rowdb.core.session import Session
from rowdb.mapping.binding import Column


@dataclass
class ArtistName:
    name: Annotated[str, Column("name")] = ""
    missing: Annotated[str, Column("not_selected")] = "unset"


@pytest.fixture
def single(db_path: str) -> Iterator[Session]:
    """Session whose pool holds exactly one connection."""
    sess = Session(ConnectionConfig(database=db_path, pool_size=1))
    sess.execute("CREATE TABLE artist (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")
    for name in ("Ozzie", "Flea"):
        sess.collection("artist").append({"name": name})
    yield sess
    sess.close()


class TestOpen:
    def test_open_with_settings(self, db_path: str) -> None:
        with Session.open(database=db_path) as sess:
            assert sess.config.database == db_path
            assert sess.collections() == []

    def test_module_level_open(self, sqlite_config: ConnectionConfig) -> None:
        with rowdb.open(sqlite_config) as sess:
            assert isinstance(sess, Session)

    def test_empty_database_fails(self) -> None:
        with pytest.raises(ConnectionError) as exc_info:
            Session.open(database="")
        assert exc_info.value.kind is ErrorKind.CONNECTION

    def test_unreachable_database_fails(self, tmp_path: Path) -> None:
        with pytest.raises(ConnectionError):
            Session.open(database=str(tmp_path / "missing" / "db.sqlite3"))

    def test_unsupported_driver(self) -> None:
        with pytest.raises(AdapterError):
            Session.open(driver="oracle", database="x")

    def test_memory_database_shares_one_connection(self) -> None:
        with Session.open(database=":memory:", pool_size=5) as sess:
            sess.execute("CREATE TABLE note (body TEXT)")
            sess.collection("note").append({"body": "hello"})
            assert sess.collections() == ["note"]
            assert sess.collection("note").find().count() == 1


class TestUse:
    def test_switch_database(self, session: Session, tmp_path: Path) -> None:
        other = str(tmp_path / "other.sqlite3")
        session.use(other)
        assert session.config.database == other
        assert session.collections() == []

    def test_failed_switch_keeps_current_database(
        self, session: Session, tmp_path: Path
    ) -> None:
        before = session.config.database
        with pytest.raises(ConnectionError):
            session.use(str(tmp_path / "missing" / "db.sqlite3"))
        assert session.config.database == before
        assert "artist" in session.collections()


class TestStatements:
    def test_collections(self, session: Session) -> None:
        assert session.collections() == [
            "artist",
            "composite_keys",
            "data_types",
            "publication",
            "review",
            "stats_test",
        ]

    def test_execute_returns_affected_rows(self, artists: Session) -> None:
        affected = artists.execute("UPDATE artist SET name = :name", {"name": "x"})
        assert affected == 4

    def test_execute_translates_errors(self, session: Session) -> None:
        with pytest.raises(ExecutionError) as exc_info:
            session.execute("SELEC 1")
        assert exc_info.value.__cause__ is not None

    def test_query_dicts(self, artists: Session) -> None:
        rows = artists.query("SELECT id, name FROM artist WHERE id <= :id ORDER BY id", {"id": 2})
        assert rows == [{"id": 1, "name": "Ozzie"}, {"id": 2, "name": "Flea"}]

    def test_query_onto_model(self, artists: Session) -> None:
        rows = artists.query("SELECT name FROM artist ORDER BY id", target=ArtistName)
        assert [r.name for r in rows] == ["Ozzie", "Flea", "Slash", "Janus"]
        assert all(r.missing == "unset" for r in rows)

    def test_driver_access(self, session: Session) -> None:
        with session.driver.get_connection() as conn:
            assert conn.execute("SELECT 1").fetchone()[0] == 1

    def test_session_and_transaction_are_executors(self, session: Session) -> None:
        assert isinstance(session, Executor)
        tx = session.transaction()
        try:
            assert isinstance(tx, Executor)
        finally:
            tx.rollback()


class TestCursorConnections:
    def test_open_next_cursor_holds_the_connection(self, single: Session) -> None:
        result = single.collection("artist").find().order_by("id")
        assert result.next()["name"] == "Ozzie"
        with pytest.raises(PoolError):
            single.collection("artist").find().count()
        result.close()
        assert single.collection("artist").find().count() == 2

    def test_close_is_idempotent(self, single: Session) -> None:
        result = single.collection("artist").find()
        result.next()
        result.close()
        result.close()
        assert single.collection("artist").find().count() == 2

    def test_closed_generator_releases_the_connection(self, single: Session) -> None:
        rows = single.collection("artist").find().order_by("id").iter()
        assert next(rows)["name"] == "Ozzie"
        rows.close()
        assert single.collection("artist").find().count() == 2

    def test_exhausted_iteration_releases_the_connection(self, single: Session) -> None:
        names = [row["name"] for row in single.collection("artist").find().order_by("id")]
        assert names == ["Ozzie", "Flea"]
        assert single.collection("artist").find().count() == 2
