"""Lazy, chainable query over one or more collections.

Every chain call returns a new Result bound to the same collections and
executor; nothing runs until a terminal call (``count``, ``one``, ``all``,
``next``, ``update`` or ``remove``).
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator
from typing import Any

from rowdb.core.cursor import RowCursor
from rowdb.core.exceptions import ExecutionError, NoMoreRows, RecordNotFound
from rowdb.core.executor import Executor
from rowdb.mapping.model import RowMapper, to_row
from rowdb.query.compiler import SQLCompiler

logger = logging.getLogger(__name__)


class Result:
    """Query builder and row source.

    ``next`` keeps a driver cursor open between calls. Release it with
    :meth:`close`, or use the Result as a context manager::

        with artists.find().order_by("id") as res:
            first = res.next(Artist)
    """

    def __init__(
        self,
        executor: Executor,
        tables: tuple[str, ...],
        conditions: tuple[Any, ...] = (),
    ) -> None:
        self._executor = executor
        self._compiler = SQLCompiler(executor.adapter)
        self._tables = tables
        self._conditions = conditions
        self._columns: tuple[Any, ...] = ()
        self._group: tuple[Any, ...] = ()
        self._order: tuple[Any, ...] = ()
        self._limit: int | None = None
        self._offset: int | None = None
        self._cursor: RowCursor | None = None

    def __repr__(self) -> str:
        return f"Result(tables={self._tables!r}, conditions={self._conditions!r})"

    @property
    def name(self) -> str:
        return ", ".join(self._tables)

    def _copy(self, **changes: Any) -> Result:
        clone = copy.copy(self)
        clone._cursor = None
        for key, value in changes.items():
            setattr(clone, f"_{key}", value)
        return clone

    # --- chaining ---

    def where(self, *conditions: Any) -> Result:
        """Replace the condition set."""
        return self._copy(conditions=conditions)

    def select(self, *columns: Any) -> Result:
        """Columns to fetch: names, ``Raw`` fragments or ``Func`` calls."""
        return self._copy(columns=columns)

    def group(self, *columns: Any) -> Result:
        return self._copy(group=columns)

    def order_by(self, *columns: Any) -> Result:
        """Sort order; prefix a name with ``-`` for descending."""
        return self._copy(order=columns)

    def limit(self, n: int) -> Result:
        return self._copy(limit=n)

    def offset(self, n: int) -> Result:
        return self._copy(offset=n)

    # --- terminal calls ---

    def _select_sql(self, limit: int | None = None) -> tuple[str, dict[str, Any]]:
        return self._compiler.select(
            self._tables,
            columns=self._columns,
            conditions=self._conditions,
            group=self._group,
            order=self._order,
            limit=self._limit if limit is None else limit,
            offset=self._offset,
        )

    def count(self) -> int:
        """Number of matching rows (groups, when grouped).

        Selection, order, limit and offset are ignored.

        Raises:
            CollectionDoesNotExist: If a target collection is missing.
        """
        sql, params = self._compiler.count(
            self._tables, conditions=self._conditions, group=self._group
        )
        return int(self._executor.fetch_scalar(sql, params) or 0)

    def one(self, target: Any = dict) -> Any:
        """First matching row mapped onto *target*.

        Raises:
            RecordNotFound: If nothing matches.
        """
        mapper: RowMapper[Any] = RowMapper(target)
        self.close()
        sql, params = self._select_sql(limit=1)
        with self._executor.open_cursor(sql, params) as cursor:
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFound(self.name)
        return mapper.map_one(row)

    def all(self, target: Any = dict, into: list[Any] | None = None) -> list[Any]:
        """Every matching row mapped onto *target*.

        With *into*, rows are appended to the caller's list, which is
        returned.
        """
        mapper: RowMapper[Any] = RowMapper(target)
        self.close()
        sql, params = self._select_sql()
        rows = mapper.map_many(self._executor.fetch_all(sql, params))
        if into is None:
            return rows
        into.extend(rows)
        return into

    def next(self, target: Any = dict) -> Any:
        """Advance the cursor by one row.

        Raises:
            NoMoreRows: Once every row has been returned.
        """
        mapper: RowMapper[Any] = RowMapper(target)
        if self._cursor is None or self._cursor.closed:
            sql, params = self._select_sql()
            self._cursor = self._executor.open_cursor(sql, params)
        row = self._cursor.fetchone()
        if row is None:
            raise NoMoreRows()
        return mapper.map_one(row)

    def iter(self, target: Any = dict) -> Iterator[Any]:
        """Stream rows onto *target*; the cursor is released when the loop ends."""
        mapper: RowMapper[Any] = RowMapper(target)
        sql, params = self._select_sql()
        with self._executor.open_cursor(sql, params) as cursor:
            while (row := cursor.fetchone()) is not None:
                yield mapper.map_one(row)

    def __iter__(self) -> Iterator[Any]:
        return self.iter()

    def close(self) -> None:
        """Release the cursor opened by :meth:`next`, if any."""
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None

    def __enter__(self) -> Result:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def update(self, values: Any) -> int:
        """Apply *values* (a dict or bound model) to every matching row.

        Limit and offset do not narrow the update. Returns affected rows.
        """
        row = to_row(values)
        if not row:
            return 0
        sql, params = self._compiler.update(self._single_table("update"), row, self._conditions)
        return self._executor.execute(sql, params)

    def remove(self) -> int:
        """Delete every matching row. Returns affected rows."""
        sql, params = self._compiler.delete(self._single_table("remove"), self._conditions)
        return self._executor.execute(sql, params)

    def _single_table(self, action: str) -> str:
        if len(self._tables) != 1:
            raise ExecutionError(f"Cannot {action} across several collections: {self.name}")
        return self._tables[0]
