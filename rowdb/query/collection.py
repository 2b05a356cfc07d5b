"""Collection - a handle on a table, or on several tables for a raw join."""

from __future__ import annotations

import logging
from typing import Any

from rowdb.core.exceptions import ExecutionError
from rowdb.core.executor import Executor
from rowdb.mapping.model import to_row
from rowdb.mapping.protocol import ReceivesID, ReceivesKeys
from rowdb.query.compiler import SQLCompiler
from rowdb.query.result import Result

logger = logging.getLogger(__name__)


def _base_name(name: str) -> str:
    """Table name without its alias: ``"artist AS a"`` -> ``"artist"``."""
    return name.split()[0]


class Collection:
    """CRUD entry point for a named relation.

    Statements run through *executor*: a Session (autocommit) or a
    Transaction.
    """

    def __init__(self, executor: Executor, names: tuple[str, ...]) -> None:
        if not names:
            raise ValueError("A collection needs at least one name")
        self._executor = executor
        self._names = tuple(names)
        self._compiler = SQLCompiler(executor.adapter)

    def __repr__(self) -> str:
        return f"Collection({', '.join(self._names)})"

    @property
    def name(self) -> str:
        return ", ".join(self._names)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def exists(self) -> bool:
        """True if every backing relation exists, whatever its row count."""
        adapter = self._executor.adapter
        tables = [_base_name(n) for n in self._names]
        return self._executor.introspect(
            lambda conn: all(adapter.table_exists(conn, t) for t in tables)
        )

    def find(self, *conditions: Any) -> Result:
        """Start a query. Conditions are ANDed together.

        Accepts ``Cond``/dict values, ``Raw`` fragments, ``And``/``Or``
        groups and objects implementing ``Constrainer``.
        """
        return Result(self._executor, self._names, conditions)

    def truncate(self) -> None:
        """Remove every row."""
        for name in self._names:
            self._executor.execute(f"DELETE FROM {self._compiler.identifier(_base_name(name))}")

    def append(self, value: Any) -> Any:
        """Insert a dict or bound model and return its key.

        The key is the primary-key value for a single-column key, a dict of
        key columns for a composite key, or the driver row id when the table
        declares no key. Values implementing ``ReceivesID`` or
        ``ReceivesKeys`` get the key written back.
        """
        table = self._table("append")
        row = to_row(value)
        sql, params = self._compiler.insert(table, row)
        rowid = self._executor.insert(sql, params)
        key = self._generated_key(table, row, rowid)

        if isinstance(key, dict):
            if isinstance(value, ReceivesKeys):
                value.set_keys(key)
        elif key is not None and isinstance(value, ReceivesID):
            value.set_id(key)
        return key

    def _generated_key(self, table: str, row: dict[str, Any], rowid: int | None) -> Any:
        adapter = self._executor.adapter
        keys = self._executor.introspect(lambda conn: adapter.primary_keys(conn, table))
        if not keys:
            return rowid

        values = {k: row.get(k) for k in keys}
        if any(v is None for v in values.values()) and rowid is not None:
            values.update(
                self._executor.introspect(
                    lambda conn: adapter.keys_for_rowid(conn, table, keys, rowid)
                )
            )
        if len(keys) == 1:
            return values[keys[0]]
        return values

    def _table(self, action: str) -> str:
        if len(self._names) != 1:
            raise ExecutionError(f"Cannot {action} to several collections: {self.name}")
        return _base_name(self._names[0])
