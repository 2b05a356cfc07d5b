"""Statement execution shared by sessions and transactions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

from rowdb.core.cursor import RowCursor

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class Executor(Protocol):
    """What collections and results need from a session or a transaction."""

    @property
    def adapter(self) -> Any: ...

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Run a write statement; return the affected row count."""
        ...

    def insert(self, sql: str, params: dict[str, Any] | None = None) -> int | None:
        """Run an INSERT; return the driver's last row id."""
        ...

    def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        ...

    def fetch_scalar(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        ...

    def open_cursor(self, sql: str, params: dict[str, Any] | None = None) -> RowCursor:
        """Run a query and keep its cursor open until the caller closes it."""
        ...

    def introspect(self, fn: Callable[[Any], T]) -> T:
        """Call ``fn(connection)`` for schema lookups."""
        ...


def run(adapter: Any, connection: Any, sql: str, params: dict[str, Any] | None = None) -> Any:
    """Execute through the adapter, translating driver errors."""
    logger.debug(f"Executing: {sql}")
    try:
        return adapter.execute(connection, sql, params)
    except Exception as e:
        raise adapter.translate_error(e) from e


def first_value(row: Any) -> Any:
    """First column of a driver row, whatever its shape."""
    if row is None:
        return None
    if isinstance(row, dict):
        return next(iter(row.values()))
    return row[0]
