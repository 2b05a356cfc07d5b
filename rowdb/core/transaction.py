"""Transaction management.

A Transaction holds one pooled connection from BEGIN until it is
committed or rolled back. Both are valid exactly once; afterwards every
call on the transaction, or on a collection obtained from it, raises
TransactionStateError. Used as a context manager it commits on success and
rolls back on exception.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from rowdb.core.cursor import RowCursor, rows_to_dicts
from rowdb.core.exceptions import TransactionStateError
from rowdb.core.executor import first_value, run
from rowdb.query.collection import Collection

if TYPE_CHECKING:
    from rowdb.core.connection import ConnectionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _TxState(Enum):
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """Synchronous transaction bound to a single connection."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._connection_manager = connection_manager
        self._adapter = connection_manager.adapter
        self._connection = connection_manager.acquire()
        try:
            self._adapter.begin(self._connection)
        except Exception as e:
            connection_manager.release(self._connection)
            raise self._adapter.translate_error(e) from e
        self._state = _TxState.ACTIVE
        logger.debug(f"Started transaction for connection {id(self._connection)}")

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def state(self) -> str:
        return self._state.value

    @property
    def active(self) -> bool:
        return self._state is _TxState.ACTIVE

    def __enter__(self) -> Transaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state is not _TxState.ACTIVE:
            return
        if exc_type is not None:
            logger.warning("Rolling back the current transaction")
            self.rollback()
        else:
            self.commit()

    def collection(self, *names: str) -> Collection:
        """Collection whose statements run inside this transaction."""
        self._check_active("use")
        return Collection(self, names)

    def commit(self) -> None:
        """Commit; the transaction is finalized whatever the outcome."""
        self._check_active("commit")
        try:
            self._connection.commit()
        except Exception as e:
            try:
                self._connection.rollback()
            finally:
                self._finish(_TxState.ROLLED_BACK)
            raise self._adapter.translate_error(e) from e
        self._finish(_TxState.COMMITTED)

    def rollback(self) -> None:
        """Undo every statement issued since the transaction began."""
        self._check_active("rollback")
        try:
            self._connection.rollback()
        finally:
            self._finish(_TxState.ROLLED_BACK)

    def _finish(self, state: _TxState) -> None:
        self._state = state
        self._connection_manager.release(self._connection)
        logger.debug(f"Transaction {state.value} for connection {id(self._connection)}")

    def _check_active(self, action: str) -> None:
        if self._state is not _TxState.ACTIVE:
            raise TransactionStateError(self._state.value, action)

    # --- statement execution ---

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Execute a write statement within this transaction."""
        self._check_active("execute")
        cursor = run(self._adapter, self._connection, sql, params)
        return int(cursor.rowcount)

    def insert(self, sql: str, params: dict[str, Any] | None = None) -> int | None:
        self._check_active("execute")
        cursor = run(self._adapter, self._connection, sql, params)
        return cursor.lastrowid

    def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        self._check_active("execute")
        cursor = run(self._adapter, self._connection, sql, params)
        try:
            return rows_to_dicts(cursor)
        finally:
            cursor.close()

    def fetch_scalar(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        self._check_active("execute")
        cursor = run(self._adapter, self._connection, sql, params)
        try:
            return first_value(cursor.fetchone())
        finally:
            cursor.close()

    def open_cursor(self, sql: str, params: dict[str, Any] | None = None) -> RowCursor:
        self._check_active("execute")
        return RowCursor(run(self._adapter, self._connection, sql, params))

    def introspect(self, fn: Callable[[Any], T]) -> T:
        self._check_active("execute")
        try:
            return fn(self._connection)
        except Exception as e:
            raise self._adapter.translate_error(e) from e
