"""Mapping layer - bind rows to dicts, dataclasses and Pydantic models."""

from __future__ import annotations

from rowdb.mapping.binding import (
    Binding,
    Column,
    FieldBinding,
    Int8,
    Int16,
    Int32,
    Int64,
    IntWidth,
    Nullable,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    binding_for,
    register_binding,
)
from rowdb.mapping.model import RowMapper, to_row
from rowdb.mapping.protocol import Constrainer, ReceivesID, ReceivesKeys

__all__ = [
    "RowMapper",
    "to_row",
    "Binding",
    "FieldBinding",
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
    "binding_for",
    "register_binding",
    "Constrainer",
    "ReceivesID",
    "ReceivesKeys",
]
