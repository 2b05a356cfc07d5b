"""Row-to-destination mapper.

Supports plain dicts, dataclasses, Pydantic models and registered classes,
either as a class (a new instance per row) or as an existing instance
(populated in place).
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from pydantic import ValidationError

from rowdb.core.exceptions import BindingError
from rowdb.mapping.binding import Binding, binding_for
from rowdb.mapping.convert import from_db, is_zero, to_db

T = TypeVar("T")


class RowMapper(Generic[T]):
    """Map row dicts onto a destination.

    Detection order:
    1. ``dict`` (the class or an instance) -> driver-native values, no translation
    2. bound class -> a new instance per row
    3. instance of a bound class -> populated in place

    Args:
        target: The destination class or instance.

    Raises:
        BindingError: If *target* is neither a dict nor bindable.
    """

    def __init__(self, target: Any) -> None:
        self._target = target
        self._binding: Binding | None = None
        if target is dict or isinstance(target, dict):
            self._mode = "mapping"
        elif isinstance(target, type):
            self._binding = binding_for(target)
            self._mode = "class"
        else:
            self._binding = binding_for(type(target))
            self._mode = "instance"

    @property
    def binding(self) -> Binding | None:
        return self._binding

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row onto the destination."""
        if self._mode == "mapping":
            if isinstance(self._target, dict):
                self._target.update(row)
                return self._target  # type: ignore[return-value]
            return dict(row)  # type: ignore[return-value]
        if self._mode == "class":
            return self._construct(row)
        return self._populate(self._target, row)

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map every row to a fresh destination."""
        if self._mode == "mapping":
            return [dict(row) for row in rows]  # type: ignore[misc]
        return [self._construct(row) for row in rows]

    def _construct(self, row: dict[str, Any]) -> T:
        binding = cast(Binding, self._binding)
        values: dict[str, Any] = {}
        for field in binding.fields:
            if field.column in row:
                values[field.attribute] = from_db(row[field.column], field)

        missing = [f.attribute for f in binding.fields if f.required and f.attribute not in values]
        if missing:
            raise BindingError(
                f"Cannot map to {binding.target_class.__name__}: missing fields {missing}"
            )
        return binding.construct(values)  # type: ignore[no-any-return]

    def _populate(self, obj: Any, row: dict[str, Any]) -> T:
        binding = cast(Binding, self._binding)
        for field in binding.fields:
            if field.column not in row:
                continue
            value = from_db(row[field.column], field)
            try:
                setattr(obj, field.attribute, value)
            except (dataclasses.FrozenInstanceError, AttributeError, ValidationError) as e:
                raise BindingError(
                    f"Cannot assign '{field.attribute}' on {type(obj).__name__}: {e}"
                ) from e
        return obj  # type: ignore[no-any-return]


def to_row(value: Any) -> dict[str, Any]:
    """Column/value pairs for an INSERT or UPDATE.

    Mappings are taken as they are. Bound objects go through their binding:
    ``omitempty`` columns holding a zero value and ``server_default``
    columns holding ``None`` are left out.
    """
    if isinstance(value, Mapping):
        return {str(key): to_db(item, str(key)) for key, item in value.items()}

    binding = binding_for(type(value))
    row: dict[str, Any] = {}
    for field in binding.fields:
        item = getattr(value, field.attribute)
        if field.omitempty and is_zero(item):
            continue
        if field.server_default and item is None:
            continue
        row[field.column] = to_db(item, field.column)
    return row
