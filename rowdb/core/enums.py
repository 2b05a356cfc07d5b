"""Error-kind enumeration."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure categories raised by rowdb.

    Every exception in :mod:`rowdb.core.exceptions` carries one of these as
    its ``kind`` attribute so callers can branch exhaustively without string
    matching.
    """

    CONNECTION = "connection"
    POOL = "pool"
    COLLECTION_DOES_NOT_EXIST = "collection_does_not_exist"
    NO_MORE_ROWS = "no_more_rows"
    NOT_FOUND = "not_found"
    BINDING = "binding"
    CONSTRAINT_VIOLATION = "constraint_violation"
    TRANSACTION_FINALIZED = "transaction_finalized"
    EXECUTION = "execution"
