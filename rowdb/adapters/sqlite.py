"""SQLite adapter using the stdlib sqlite3 module."""

from __future__ import annotations

import logging
import re
import sqlite3
from typing import Any

from rowdb.core.connection import ConnectionConfig
from rowdb.core.exceptions import (
    CollectionDoesNotExist,
    ConnectionError,  # noqa: A004
    ConstraintViolation,
    ExecutionError,
    PoolError,
    RowDBError,
)

logger = logging.getLogger(__name__)

_NO_SUCH_TABLE = re.compile(r"no such table: (?:\w+\.)?(\S+)")


def _is_memory(database: str) -> bool:
    return database == ":memory:" or "mode=memory" in database


class SqliteSyncAdapter:
    """Synchronous SQLite adapter using stdlib sqlite3."""

    @property
    def paramstyle(self) -> str:
        return "named"

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        """Open and verify a single connection."""
        if not config.database:
            raise ConnectionError("No database configured")
        try:
            conn = sqlite3.connect(config.database, **config.extra)
            # Touch the schema so a path that is not a database fails here.
            conn.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()
        except sqlite3.Error as e:
            raise ConnectionError(f"Cannot open '{config.database}': {e}") from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def create_pool(self, config: ConnectionConfig) -> list[sqlite3.Connection]:
        """Create a 'pool' (list of connections) for SQLite.

        An in-memory database lives inside its connection, so it always
        gets a pool of one.
        """
        size = 1 if _is_memory(config.database) else max(config.pool_size, 1)
        pool: list[sqlite3.Connection] = []
        try:
            for _ in range(size):
                pool.append(self.connect(config))
        except ConnectionError:
            self.close_pool(pool)
            raise
        return pool

    def acquire_connection(self, pool: list[sqlite3.Connection]) -> sqlite3.Connection:
        """Acquire a connection from the pool."""
        if not pool:
            raise PoolError("No connections available in pool")
        return pool.pop()

    def release_connection(
        self, connection: sqlite3.Connection, pool: list[sqlite3.Connection]
    ) -> None:
        """Release a connection back to the pool."""
        pool.append(connection)

    def close_pool(self, pool: list[sqlite3.Connection]) -> None:
        """Close all connections in the pool."""
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        """Execute SQL and return a cursor."""
        return connection.execute(sql, params or {})

    def begin(self, connection: sqlite3.Connection) -> None:
        if connection.in_transaction:
            connection.commit()
        connection.execute("BEGIN")

    def quote_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def table_names(self, connection: sqlite3.Connection) -> list[str]:
        cursor = connection.execute(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [row[0] for row in cursor.fetchall()]

    def table_exists(self, connection: sqlite3.Connection, name: str) -> bool:
        cursor = connection.execute(
            "SELECT 1 FROM sqlite_master WHERE type IN ('table', 'view') AND name = :name",
            {"name": name},
        )
        return cursor.fetchone() is not None

    def primary_keys(self, connection: sqlite3.Connection, table: str) -> list[str]:
        cursor = connection.execute(f"PRAGMA table_info({self.quote_identifier(table)})")
        keyed = [(row[5], row[1]) for row in cursor.fetchall() if row[5] > 0]
        return [name for _, name in sorted(keyed)]

    def keys_for_rowid(
        self, connection: sqlite3.Connection, table: str, keys: list[str], rowid: int
    ) -> dict[str, Any]:
        """Read back the key columns of the row the last INSERT created."""
        columns = ", ".join(self.quote_identifier(k) for k in keys)
        cursor = connection.execute(
            f"SELECT {columns} FROM {self.quote_identifier(table)} WHERE rowid = :rowid",
            {"rowid": rowid},
        )
        row = cursor.fetchone()
        return dict(zip(keys, row, strict=True)) if row is not None else {}

    def translate_error(self, error: Exception) -> RowDBError:
        """Map a sqlite3 exception onto the rowdb hierarchy."""
        if isinstance(error, RowDBError):
            return error
        message = str(error)
        if isinstance(error, sqlite3.IntegrityError):
            return ConstraintViolation(message)
        if isinstance(error, sqlite3.OperationalError):
            match = _NO_SUCH_TABLE.search(message)
            if match is not None:
                return CollectionDoesNotExist(match.group(1))
        return ExecutionError(message)
