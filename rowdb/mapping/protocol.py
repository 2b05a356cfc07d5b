"""Capability protocols.

These let an entity take part in lookups and inserts without rowdb knowing
its type. They are detected with ``isinstance`` checks, never by attribute probing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rowdb.query.condition import Cond


@runtime_checkable
class Constrainer(Protocol):
    """An entity that can describe its own identity as a condition."""

    def constraint(self) -> Cond:
        ...


@runtime_checkable
class ReceivesID(Protocol):
    """An entity that wants the generated single-column key written back."""

    def set_id(self, value: Any) -> None:
        ...


@runtime_checkable
class ReceivesKeys(Protocol):
    """An entity that wants a generated composite key written back."""

    def set_keys(self, keys: dict[str, Any]) -> None:
        ...
