"""rowdb exception hierarchy.

Raw driver exceptions are translated by the adapter before they reach the
caller. The backend message is kept verbatim and the driver exception is
chained as ``__cause__``.
"""

from __future__ import annotations

from rowdb.core.enums import ErrorKind


class RowDBError(Exception):
    """Base exception for all rowdb errors."""

    kind: ErrorKind = ErrorKind.EXECUTION


# --- Execution ---


class ExecutionError(RowDBError):
    """Raised when the backend rejects a statement."""

    kind = ErrorKind.EXECUTION


class CollectionDoesNotExist(ExecutionError):
    """Raised when a statement targets a relation the backend does not have."""

    kind = ErrorKind.COLLECTION_DOES_NOT_EXIST

    def __init__(self, collection: str) -> None:
        self.collection = collection
        super().__init__(f"Collection does not exist: '{collection}'")


class ConstraintViolation(ExecutionError):
    """Raised on a duplicate key or any other integrity failure."""

    kind = ErrorKind.CONSTRAINT_VIOLATION


# --- Result ---


class NoMoreRows(RowDBError):
    """Raised by ``Result.next`` once the cursor is exhausted."""

    kind = ErrorKind.NO_MORE_ROWS

    def __init__(self) -> None:
        super().__init__("No more rows in this result set")


class RecordNotFound(RowDBError):
    """Raised by ``Result.one`` when nothing matches the query."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, collection: str) -> None:
        self.collection = collection
        super().__init__(f"No record matches the query on '{collection}'")


# --- Mapping ---


class BindingError(RowDBError):
    """Raised when a destination cannot be bound to a row."""

    kind = ErrorKind.BINDING


class ConversionError(BindingError):
    """Raised when a column value cannot be converted losslessly."""

    def __init__(self, column: str, value: object, detail: str) -> None:
        self.column = column
        self.value = value
        super().__init__(f"Cannot convert column '{column}' value {value!r}: {detail}")


# --- Transaction ---


class TransactionStateError(RowDBError):
    """Raised on any use of a transaction that is no longer active."""

    kind = ErrorKind.TRANSACTION_FINALIZED

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")


# --- Adapter ---


class AdapterError(RowDBError):
    """Base for adapter errors."""

    kind = ErrorKind.CONNECTION


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""

    kind = ErrorKind.POOL
