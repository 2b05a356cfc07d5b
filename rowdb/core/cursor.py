"""Streaming cursor over a driver result set.

A RowCursor owns the driver cursor and, for session-level queries, the
pooled connection it runs on. Both are released exactly once by
:meth:`RowCursor.close`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


def row_to_dict(columns: list[str], row: Any) -> dict[str, Any]:
    """Convert a single driver row to a dict keyed by column name.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if isinstance(row, dict):
        return dict(row)
    return dict(zip(columns, row, strict=True))


def rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert all remaining cursor results to a list of dicts."""
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    return [row_to_dict(columns, row) for row in cursor.fetchall()]


class RowCursor:
    """Row-by-row view of an executed statement."""

    def __init__(
        self,
        cursor: Any,
        release: Callable[[], None] | None = None,
    ) -> None:
        self._cursor = cursor
        self._release = release
        self._columns = (
            [desc[0] for desc in cursor.description] if cursor.description is not None else []
        )
        self._closed = False

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def closed(self) -> bool:
        return self._closed

    def fetchone(self) -> dict[str, Any] | None:
        """Next row as a dict, or None when the result set is exhausted."""
        if self._closed or not self._columns:
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        return row_to_dict(self._columns, row)

    def close(self) -> None:
        """Release the driver cursor and connection. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        try:
            self._cursor.close()
        finally:
            if self._release is not None:
                self._release()
                self._release = None
        logger.debug("Cursor closed")

    def __enter__(self) -> RowCursor:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
