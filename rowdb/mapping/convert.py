"""Value conversion between driver values and bound attribute types."""

from __future__ import annotations

import datetime as dt
import enum
from decimal import Decimal, InvalidOperation
from typing import Any

from rowdb.core.exceptions import ConversionError
from rowdb.mapping.binding import FieldBinding, IntWidth, Nullable

# Widest integer the driver stores.
_STORED_INT = IntWidth(64)


def _to_int(column: str, value: Any, width: IntWidth | None) -> int:
    if isinstance(value, bool):
        result = int(value)
    elif isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ConversionError(column, value, "fractional value for an integer field")
        result = int(value)
    elif isinstance(value, (str, bytes)):
        try:
            result = int(value)
        except ValueError as e:
            raise ConversionError(column, value, "not an integer") from e
    else:
        raise ConversionError(column, value, "not an integer")
    if width is not None and not width.fits(result):
        sign = "int" if width.signed else "uint"
        raise ConversionError(column, value, f"out of range for {sign}{width.bits}")
    return result


def _to_bool(column: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.lower() in ("0", "1", "true", "false"):
        return value.lower() in ("1", "true")
    raise ConversionError(column, value, "not a boolean")


def _to_datetime(column: str, value: Any) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return dt.datetime.fromisoformat(text)
        except ValueError as e:
            raise ConversionError(column, value, "not an ISO-8601 timestamp") from e
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
    raise ConversionError(column, value, "not a timestamp")


def _to_date(column: str, value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value[:10])
        except ValueError as e:
            raise ConversionError(column, value, "not an ISO-8601 date") from e
    raise ConversionError(column, value, "not a date")


def coerce(column: str, value: Any, py_type: Any, width: IntWidth | None = None) -> Any:
    """Convert a non-NULL driver value to *py_type*."""
    if py_type is Any or py_type is object or not isinstance(py_type, type):
        return value
    if py_type is bool:
        return _to_bool(column, value)
    if issubclass(py_type, enum.Enum):
        try:
            return py_type(value)
        except ValueError as e:
            raise ConversionError(column, value, f"not a valid {py_type.__name__}") from e
    if py_type is int:
        return _to_int(column, value, width)
    if py_type is float:
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ConversionError(column, value, "not a number") from e
    if py_type is str:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value).decode("utf-8")
        return value if isinstance(value, str) else str(value)
    if py_type is bytes:
        if isinstance(value, str):
            return value.encode("utf-8")
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        raise ConversionError(column, value, "not binary data")
    if py_type is dt.datetime:
        return _to_datetime(column, value)
    if py_type is dt.date:
        return _to_date(column, value)
    if py_type is Decimal:
        try:
            return Decimal(str(value))
        except InvalidOperation as e:
            raise ConversionError(column, value, "not a decimal") from e
    if isinstance(value, py_type):
        return value
    raise ConversionError(column, value, f"expected {py_type.__name__}")


def from_db(value: Any, field: FieldBinding) -> Any:
    """Convert a column value for assignment to *field*."""
    if field.nullable:
        if value is None:
            return Nullable()
        return Nullable(coerce(field.column, value, field.py_type, field.width), True)
    if value is None:
        return None
    return coerce(field.column, value, field.py_type, field.width)


def to_db(value: Any, column: str = "?") -> Any:
    """Convert an attribute or condition value to something the driver binds.

    Raises:
        ConversionError: If an integer does not fit a 64-bit signed column.
    """
    if isinstance(value, Nullable):
        return to_db(value.value, column) if value.valid else None
    if isinstance(value, int) and not isinstance(value, bool) and not _STORED_INT.fits(value):
        raise ConversionError(column, value, "out of range for a 64-bit integer column")
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value


def is_zero(value: Any) -> bool:
    """True when *value* is the zero value of its type."""
    if value is None:
        return True
    if isinstance(value, Nullable):
        return not value.valid and not value.value
    if isinstance(value, (bool, int, float, Decimal, str, bytes, list, tuple, dict, set)):
        return not value
    return False
