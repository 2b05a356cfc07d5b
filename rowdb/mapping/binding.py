"""Field-to-column binding descriptors.

A :class:`Binding` is built once per destination class and cached. It lists,
for every bound attribute, the column it maps to and the type information
needed to convert values in both directions.

Columns are declared with ``typing.Annotated``::

    @dataclass
    class Artist:
        id: Annotated[int | None, Column("id", omitempty=True)] = None
        name: Annotated[str, Column("name")] = ""

An attribute without a :class:`Column` binds by its own (case-sensitive)
name. Attributes whose names start with an underscore are never bound.
Dataclasses and Pydantic models are discovered automatically; any other
class must be declared through :func:`register_binding`.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Generic, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from rowdb.core.exceptions import BindingError

T = TypeVar("T")


@dataclass(frozen=True)
class Column:
    """Column declaration for a bound attribute.

    Args:
        name: Column name. Defaults to the attribute name.
        omitempty: Leave the column out of INSERT/UPDATE statements while the
            attribute holds its zero value. Reads are never affected.
        server_default: The backend fills the column when it is omitted, so
            a ``None`` attribute is left out of INSERT/UPDATE statements.
    """

    name: str | None = None
    omitempty: bool = False
    server_default: bool = False


@dataclass(frozen=True)
class IntWidth:
    """Fixed integer width used to check narrowing conversions."""

    bits: int
    signed: bool = True

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def fits(self, value: int) -> bool:
        return self.min <= value <= self.max


Int8 = Annotated[int, IntWidth(8)]
Int16 = Annotated[int, IntWidth(16)]
Int32 = Annotated[int, IntWidth(32)]
Int64 = Annotated[int, IntWidth(64)]
UInt8 = Annotated[int, IntWidth(8, signed=False)]
UInt16 = Annotated[int, IntWidth(16, signed=False)]
UInt32 = Annotated[int, IntWidth(32, signed=False)]
UInt64 = Annotated[int, IntWidth(64, signed=False)]


@dataclass(frozen=True)
class Nullable(Generic[T]):
    """A value paired with a flag telling whether it is SQL NULL.

    ``Nullable()`` is NULL; ``Nullable(0, True)`` is a present zero.
    """

    value: T | None = None
    valid: bool = False


@dataclass(frozen=True)
class FieldBinding:
    """How one attribute maps onto one column."""

    attribute: str
    column: str
    py_type: Any = Any
    optional: bool = False
    nullable: bool = False
    width: IntWidth | None = None
    omitempty: bool = False
    server_default: bool = False
    required: bool = False


@dataclass(frozen=True)
class Binding:
    """Compiled binding for a destination class."""

    target_class: type
    fields: tuple[FieldBinding, ...]

    def construct(self, values: dict[str, Any]) -> Any:
        """Build a new instance from attribute values."""
        cls = self.target_class
        try:
            if issubclass(cls, BaseModel):
                return cls.model_validate(values)
            return cls(**values)
        except (TypeError, ValidationError) as e:
            raise BindingError(f"Cannot construct {cls.__name__}: {e}") from e


_BINDINGS: dict[type, Binding] = {}


def _unwrap_annotated(hint: Any, metadata: list[Any]) -> Any:
    while get_origin(hint) is Annotated:
        metadata.extend(hint.__metadata__)
        hint = get_args(hint)[0]
    return hint


def _field_binding(
    attribute: str,
    hint: Any,
    metadata: list[Any],
    required: bool,
) -> FieldBinding:
    metadata = list(metadata)
    hint = _unwrap_annotated(hint, metadata)

    optional = False
    while get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        optional = optional or len(args) < len(get_args(hint))
        hint = args[0] if len(args) == 1 else Any
        hint = _unwrap_annotated(hint, metadata)

    nullable = False
    if hint is Nullable or get_origin(hint) is Nullable:
        nullable = True
        args = get_args(hint)
        hint = _unwrap_annotated(args[0], metadata) if args else Any

    column = next((m for m in metadata if isinstance(m, Column)), Column())
    width = next((m for m in metadata if isinstance(m, IntWidth)), None)
    return FieldBinding(
        attribute=attribute,
        column=column.name or attribute,
        py_type=hint,
        optional=optional,
        nullable=nullable,
        width=width,
        omitempty=column.omitempty,
        server_default=column.server_default,
        required=required,
    )


def _dataclass_fields(cls: type) -> list[FieldBinding]:
    hints = typing.get_type_hints(cls, include_extras=True)
    bound = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        hint = hints.get(f.name, Any)
        metadata: list[Any] = []
        if f.name.startswith("_") and not _has_column(hint):
            continue
        required = f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        bound.append(_field_binding(f.name, hint, metadata, required))
    return bound


def _pydantic_fields(cls: type[BaseModel]) -> list[FieldBinding]:
    bound = []
    for name, info in cls.model_fields.items():
        if name.startswith("_"):
            continue
        bound.append(_field_binding(name, info.annotation, list(info.metadata), info.is_required()))
    return bound


def _plain_fields(cls: type, columns: dict[str, str | Column] | None) -> list[FieldBinding]:
    hints = typing.get_type_hints(cls, include_extras=True)
    try:
        params = {
            name: param
            for name, param in inspect.signature(cls.__init__).parameters.items()  # type: ignore[misc]
            if name != "self" and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
        }
    except (ValueError, TypeError):
        params = {}
    names = list(params) or [n for n in hints if not n.startswith("_")]
    bound = []
    for name in names:
        metadata: list[Any] = []
        declared = (columns or {}).get(name)
        if isinstance(declared, str):
            metadata.append(Column(declared))
        elif isinstance(declared, Column):
            metadata.append(declared)
        param = params.get(name)
        required = param is not None and param.default is inspect.Parameter.empty
        bound.append(_field_binding(name, hints.get(name, Any), metadata, required))
    return bound


def _has_column(hint: Any) -> bool:
    metadata: list[Any] = []
    _unwrap_annotated(hint, metadata)
    return any(isinstance(m, Column) for m in metadata)


def register_binding(
    cls: type,
    columns: dict[str, str | Column] | None = None,
) -> Binding:
    """Explicitly declare a binding for *cls*.

    Needed for plain classes; optional for dataclasses and Pydantic models.
    *columns* maps attribute names to column names (or :class:`Column`
    declarations) for plain classes whose constructor parameters do not
    carry ``Annotated`` metadata.
    """
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        fields = _pydantic_fields(cls)
    elif dataclasses.is_dataclass(cls):
        fields = _dataclass_fields(cls)
    else:
        fields = _plain_fields(cls, columns)
    binding = Binding(target_class=cls, fields=tuple(fields))
    _BINDINGS[cls] = binding
    return binding


def binding_for(cls: Any) -> Binding:
    """Return the cached binding for *cls*, discovering it on first use.

    Raises:
        BindingError: If *cls* is not a class that rowdb can bind to.
    """
    binding = _BINDINGS.get(cls)
    if binding is not None:
        return binding
    if not isinstance(cls, type):
        raise BindingError(f"Destination {cls!r} is not a bindable class")
    if issubclass(cls, BaseModel) or dataclasses.is_dataclass(cls):
        return register_binding(cls)
    raise BindingError(
        f"{cls.__name__} is not a dataclass or Pydantic model; declare it with register_binding()"
    )
