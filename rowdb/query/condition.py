"""Query DSL values: conditions, raw fragments and function calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Raw:
    """A literal SQL fragment inserted unmodified and never parameter bound.

    The caller is trusted: nothing in a Raw fragment is escaped.
    """

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Func:
    """A function or operator call.

    As a selected column, ``Func("DISTINCT", "name")`` renders
    ``DISTINCT("name")``. As a condition value,
    ``{"id": Func("NOT IN", [0, -1])}`` renders ``"id" NOT IN (?, ?)``,
    the same as the key ``"id NOT IN"``.
    """

    name: str
    args: Any = ()


class Cond(dict[str, Any]):
    """An ordered set of ``"column [operator]" -> value`` predicates.

    Predicates are joined with AND in insertion order. A key without an
    operator compares for equality (``IN`` for a list, ``IS NULL`` for
    ``None``).
    """

    def __repr__(self) -> str:
        return f"Cond({dict.__repr__(self)})"


class _Compound:
    joiner = "AND"

    def __init__(self, *conditions: Any) -> None:
        self.conditions = conditions

    def __repr__(self) -> str:
        return f"{type(self).__name__}{self.conditions!r}"

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.conditions == self.conditions  # type: ignore[attr-defined]


class And(_Compound):
    """All of the given conditions must hold."""

    joiner = "AND"


class Or(_Compound):
    """At least one of the given conditions must hold."""

    joiner = "OR"
