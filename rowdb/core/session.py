"""Database session.

A Session owns the connection pool for one database and hands out
collections and transactions. Statements issued directly on the session
run on a pooled connection and are committed immediately.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from rowdb.core.connection import ConnectionConfig, ConnectionManager
from rowdb.core.cursor import RowCursor, rows_to_dicts
from rowdb.core.executor import first_value, run
from rowdb.core.transaction import Transaction
from rowdb.mapping.model import RowMapper
from rowdb.query.collection import Collection

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Session:
    """Synchronous session over one database.

    The pool is opened eagerly, so a misconfigured or unreachable database
    fails here with :class:`~rowdb.core.exceptions.ConnectionError`.
    """

    def __init__(self, config: ConnectionConfig) -> None:
        self._config = config
        self._connection_manager = ConnectionManager(config)
        self._connection_manager.initialize_pool()

    @classmethod
    def open(cls, config: ConnectionConfig | None = None, **settings: Any) -> Session:
        """Open a session from a ConnectionConfig or keyword settings.

        Args:
            config: ConnectionConfig instance
            **settings: ConnectionConfig fields, used when *config* is None

        Returns:
            Session instance
        """
        return cls(config if config is not None else ConnectionConfig(**settings))

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def adapter(self) -> Any:
        return self._connection_manager.adapter

    @property
    def driver(self) -> ConnectionManager:
        """The underlying connection manager, for direct driver access."""
        return self._connection_manager

    def use(self, database: str) -> None:
        """Switch this session to another database.

        The current pool is kept if the new database cannot be opened.
        """
        config = self._config.model_copy(update={"database": database})
        manager = ConnectionManager(config)
        manager.initialize_pool()
        self._connection_manager.close_pool()
        self._connection_manager = manager
        self._config = config

    def close(self) -> None:
        self._connection_manager.close_pool()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    # --- collections and transactions ---

    def collections(self) -> list[str]:
        """Names of all tables in the database."""
        return self.introspect(self.adapter.table_names)

    def collection(self, *names: str) -> Collection:
        """Handle on one table, or on several for a raw join.

        Names may carry an alias: ``session.collection("artist AS a",
        "publication AS p")``.
        """
        return Collection(self, names)

    def transaction(self) -> Transaction:
        """Begin a transaction on its own pooled connection."""
        return Transaction(self._connection_manager)

    # --- statement execution ---

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Execute a write statement and commit. Returns affected row count."""
        with self._connection_manager.get_connection() as conn:
            try:
                cursor = run(self.adapter, conn, sql, params)
            except Exception:
                conn.rollback()
                raise
            conn.commit()
            return int(cursor.rowcount)

    def insert(self, sql: str, params: dict[str, Any] | None = None) -> int | None:
        with self._connection_manager.get_connection() as conn:
            try:
                cursor = run(self.adapter, conn, sql, params)
            except Exception:
                conn.rollback()
                raise
            conn.commit()
            return cursor.lastrowid

    def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        with self._connection_manager.get_connection() as conn:
            cursor = run(self.adapter, conn, sql, params)
            try:
                return rows_to_dicts(cursor)
            finally:
                cursor.close()

    def fetch_scalar(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        """Fetch a single scalar value (first column of first row)."""
        with self._connection_manager.get_connection() as conn:
            cursor = run(self.adapter, conn, sql, params)
            try:
                return first_value(cursor.fetchone())
            finally:
                cursor.close()

    def open_cursor(self, sql: str, params: dict[str, Any] | None = None) -> RowCursor:
        manager = self._connection_manager
        conn = manager.acquire()
        try:
            cursor = run(self.adapter, conn, sql, params)
        except Exception:
            manager.release(conn)
            raise
        return RowCursor(cursor, release=lambda: manager.release(conn))

    def introspect(self, fn: Callable[[Any], T]) -> T:
        with self._connection_manager.get_connection() as conn:
            try:
                return fn(conn)
            except Exception as e:
                raise self.adapter.translate_error(e) from e

    def query(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        target: Any = dict,
    ) -> list[Any]:
        """Run a raw query and map every row onto *target*."""
        return RowMapper(target).map_many(self.fetch_all(sql, params))
