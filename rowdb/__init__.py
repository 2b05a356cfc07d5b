"""rowdb - collections, conditions and row mapping over SQL drivers."""

from __future__ import annotations

from rowdb.core.connection import ConnectionConfig, ConnectionManager
from rowdb.core.enums import ErrorKind
from rowdb.core.exceptions import (
    AdapterError,
    BindingError,
    CollectionDoesNotExist,
    ConnectionError,  # noqa: A004
    ConstraintViolation,
    ConversionError,
    ExecutionError,
    NoMoreRows,
    PoolError,
    RecordNotFound,
    RowDBError,
    TransactionStateError,
)
from rowdb.core.session import Session
from rowdb.core.transaction import Transaction
from rowdb.mapping import (
    Column,
    Constrainer,
    Int8,
    Int16,
    Int32,
    Int64,
    IntWidth,
    Nullable,
    ReceivesID,
    ReceivesKeys,
    RowMapper,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    register_binding,
)
from rowdb.query import And, Collection, Cond, Func, Or, Raw, Result


def open(config: ConnectionConfig | None = None, **settings: object) -> Session:  # noqa: A001
    """Open a session. Shorthand for :meth:`Session.open`."""
    return Session.open(config, **settings)


__all__ = [
    "open",
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Session
    "Session",
    "Transaction",
    "Collection",
    "Result",
    # Conditions
    "Cond",
    "Raw",
    "Func",
    "And",
    "Or",
    # Mapping
    "RowMapper",
    "Column",
    "Nullable",
    "IntWidth",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "register_binding",
    "Constrainer",
    "ReceivesID",
    "ReceivesKeys",
    # Enums
    "ErrorKind",
    # Exceptions
    "RowDBError",
    "ExecutionError",
    "CollectionDoesNotExist",
    "ConstraintViolation",
    "NoMoreRows",
    "RecordNotFound",
    "BindingError",
    "ConversionError",
    "TransactionStateError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
