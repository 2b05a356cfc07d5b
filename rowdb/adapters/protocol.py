"""Database adapter protocol.

Every adapter module MUST implement this protocol so that sessions,
collections and results stay backend agnostic.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from rowdb.core.connection import ConnectionConfig
from rowdb.core.exceptions import RowDBError


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """Parameter binding style: 'named' (:name) or 'pyformat' (%(name)s)."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any:
        """Create a connection pool."""
        ...

    def acquire_connection(self, pool: Any) -> Any:
        """Acquire a connection from the pool."""
        ...

    def release_connection(self, connection: Any, pool: Any) -> None:
        """Release a connection back to the pool."""
        ...

    def close_pool(self, pool: Any) -> None:
        """Close the pool and release all connections."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute SQL and return a cursor-like object."""
        ...

    def begin(self, connection: Any) -> None:
        """Start an explicit transaction on *connection*."""
        ...

    def quote_identifier(self, name: str) -> str:
        """Quote a single identifier (no dots, no aliases)."""
        ...

    def table_names(self, connection: Any) -> list[str]:
        """List user tables, sorted by name."""
        ...

    def table_exists(self, connection: Any, name: str) -> bool:
        """Report whether a table or view called *name* exists."""
        ...

    def primary_keys(self, connection: Any, table: str) -> list[str]:
        """Primary key columns of *table*, in key order."""
        ...

    def keys_for_rowid(
        self, connection: Any, table: str, keys: list[str], rowid: int
    ) -> dict[str, Any]:
        """Key columns of the row identified by the driver row id."""
        ...

    def translate_error(self, error: Exception) -> RowDBError:
        """Map a driver exception onto the rowdb hierarchy."""
        ...
