"""SQL text generation for the query DSL.

Values are always bound as parameters; identifiers are quoted by the
adapter; Raw fragments are copied verbatim.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from rowdb.mapping.convert import to_db
from rowdb.mapping.protocol import Constrainer
from rowdb.query.condition import Func, Raw, _Compound

# "column [operator]": the column runs up to the first space or comparison char.
_KEY_PATTERN = re.compile(r"^\s*([^\s<>=!]+)\s*(.*?)\s*$")
_ALIAS_PATTERN = re.compile(r"\s+as\s+", re.IGNORECASE)

_EQUAL_OPS = (None, "=", "IN", "IS")
_NOT_EQUAL_OPS = ("!=", "<>", "NOT IN", "IS NOT")
_RANGE_OPS = ("BETWEEN", "NOT BETWEEN")


def split_key(key: str) -> tuple[str, str | None]:
    """Split a condition key into ``(column, operator)``.

    >>> split_key("id !=")
    ('id', '!=')
    >>> split_key("name")
    ('name', None)
    """
    match = _KEY_PATTERN.match(key)
    if match is None:
        return key.strip(), None
    column, operator = match.groups()
    return column, (" ".join(operator.split()) or None)


class Params:
    """Collects bound values and hands out placeholders."""

    def __init__(self, paramstyle: str = "named") -> None:
        self._paramstyle = paramstyle
        self.values: dict[str, Any] = {}

    def add(self, value: Any, column: str = "?") -> str:
        name = f"v{len(self.values) + 1}"
        self.values[name] = to_db(value, column)
        if self._paramstyle == "pyformat":
            return f"%({name})s"
        return f":{name}"


class SQLCompiler:
    """Builds SELECT/COUNT/INSERT/UPDATE/DELETE statements for one adapter."""

    def __init__(self, adapter: Any) -> None:
        self._adapter = adapter

    def params(self) -> Params:
        return Params(self._adapter.paramstyle)

    # --- identifiers and expressions ---

    def identifier(self, expr: str) -> str:
        """Quote ``name``, ``table.name`` and ``expr AS alias`` forms.

        Anything that already looks like an expression (contains a
        parenthesis) is left untouched.
        """
        if "(" in expr:
            return expr
        parts = _ALIAS_PATTERN.split(expr.strip(), maxsplit=1)
        quoted = ".".join(
            p if p == "*" else self._adapter.quote_identifier(p) for p in parts[0].split(".")
        )
        if len(parts) == 2:
            quoted += " AS " + self._adapter.quote_identifier(parts[1].strip())
        return quoted

    def expression(self, item: Any) -> str:
        """Render a selected column, group-by or function argument."""
        if isinstance(item, Raw):
            return item.value
        if isinstance(item, Func):
            args = item.args
            if isinstance(args, (list, tuple)):
                rendered = ", ".join(self.expression(a) for a in args)
            else:
                rendered = self.expression(args)
            return f"{item.name}({rendered})"
        if isinstance(item, str):
            return self.identifier(item)
        return str(item)

    def order_term(self, item: Any) -> str:
        if isinstance(item, str) and item.startswith("-"):
            return f"{self.identifier(item[1:])} DESC"
        return self.expression(item)

    def tables(self, names: Sequence[str]) -> str:
        return ", ".join(self.identifier(n) for n in names)

    # --- conditions ---

    def conditions(self, conditions: Iterable[Any], params: Params) -> str:
        """Render a WHERE body (without the keyword); empty when unconstrained."""
        terms = [t for t in (self._term(c, params) for c in conditions) if t]
        if len(terms) == 1:
            return terms[0]
        return " AND ".join(f"({t})" for t in terms)

    def _term(self, condition: Any, params: Params) -> str:
        if isinstance(condition, Raw):
            return condition.value
        if isinstance(condition, _Compound):
            terms = [t for t in (self._term(c, params) for c in condition.conditions) if t]
            if len(terms) == 1:
                return terms[0]
            return f" {condition.joiner} ".join(f"({t})" for t in terms)
        if isinstance(condition, Mapping):
            return " AND ".join(
                self._predicate(key, value, params) for key, value in condition.items()
            )
        if isinstance(condition, Constrainer):
            return self._term(condition.constraint(), params)
        raise TypeError(f"Cannot use {type(condition).__name__} as a query condition")

    def _predicate(self, key: str, value: Any, params: Params) -> str:
        column, operator = split_key(key)
        col = self.identifier(column)
        upper = operator.upper() if operator else None

        if isinstance(value, Raw):
            return f"{col} {operator or '='} {value.value}"
        if isinstance(value, Func):
            if operator is not None:
                raise TypeError(
                    f"Condition {key!r} has an operator and a Func value; use one or the other"
                )
            operand = self._operand(value.name.upper(), value.args, params, column)
            return f"{col} {value.name} {operand}"
        if value is None:
            if upper in _EQUAL_OPS:
                return f"{col} IS NULL"
            if upper in _NOT_EQUAL_OPS:
                return f"{col} IS NOT NULL"
            return f"{col} {operator} NULL"
        if isinstance(value, (list, tuple, set, frozenset)):
            if upper in _RANGE_OPS:
                return f"{col} {upper} {self._operand(upper, value, params, column)}"
            if upper in _EQUAL_OPS:
                sql_op = "IN"
            elif upper in _NOT_EQUAL_OPS:
                sql_op = "NOT IN"
            else:
                sql_op = operator
            return f"{col} {sql_op} {self._operand(sql_op, value, params, column)}"
        return f"{col} {operator or '='} {params.add(value, column)}"

    def _operand(
        self, operator: str | None, args: Any, params: Params, column: str = "?"
    ) -> str:
        if isinstance(args, Raw):
            return args.value
        if isinstance(args, (list, tuple, set, frozenset)):
            values = list(args)
            if operator in _RANGE_OPS and len(values) == 2:
                return f"{params.add(values[0], column)} AND {params.add(values[1], column)}"
            return "(" + ", ".join(params.add(v, column) for v in values) + ")"
        return params.add(args, column)

    # --- statements ---

    def select(
        self,
        tables: Sequence[str],
        *,
        columns: Sequence[Any] = (),
        conditions: Sequence[Any] = (),
        group: Sequence[Any] = (),
        order: Sequence[Any] = (),
        limit: int | None = None,
        offset: int | None = None,
    ) -> tuple[str, dict[str, Any]]:
        params = self.params()
        selected = ", ".join(self.expression(c) for c in columns) if columns else "*"
        sql = f"SELECT {selected} FROM {self.tables(tables)}"
        where = self.conditions(conditions, params)
        if where:
            sql += f" WHERE {where}"
        if group:
            sql += " GROUP BY " + ", ".join(self.expression(g) for g in group)
        if order:
            sql += " ORDER BY " + ", ".join(self.order_term(o) for o in order)
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        if offset is not None:
            if limit is None:
                sql += " LIMIT -1"
            sql += f" OFFSET {int(offset)}"
        return sql, params.values

    def count(
        self,
        tables: Sequence[str],
        *,
        conditions: Sequence[Any] = (),
        group: Sequence[Any] = (),
    ) -> tuple[str, dict[str, Any]]:
        params = self.params()
        inner = f"FROM {self.tables(tables)}"
        where = self.conditions(conditions, params)
        if where:
            inner += f" WHERE {where}"
        if group:
            inner += " GROUP BY " + ", ".join(self.expression(g) for g in group)
            return f"SELECT COUNT(1) AS _total FROM (SELECT 1 {inner}) AS _groups", params.values
        return f"SELECT COUNT(1) AS _total {inner}", params.values

    def insert(self, table: str, row: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
        if not row:
            return f"INSERT INTO {self.identifier(table)} DEFAULT VALUES", {}
        params = self.params()
        columns = ", ".join(self.identifier(c) for c in row)
        values = ", ".join(params.add(v, c) for c, v in row.items())
        return f"INSERT INTO {self.identifier(table)} ({columns}) VALUES ({values})", params.values

    def update(
        self,
        table: str,
        row: Mapping[str, Any],
        conditions: Sequence[Any] = (),
    ) -> tuple[str, dict[str, Any]]:
        params = self.params()
        assignments = ", ".join(
            f"{self.identifier(c)} = {params.add(v, c)}" for c, v in row.items()
        )
        sql = f"UPDATE {self.identifier(table)} SET {assignments}"
        where = self.conditions(conditions, params)
        if where:
            sql += f" WHERE {where}"
        return sql, params.values

    def delete(self, table: str, conditions: Sequence[Any] = ()) -> tuple[str, dict[str, Any]]:
        params = self.params()
        sql = f"DELETE FROM {self.identifier(table)}"
        where = self.conditions(conditions, params)
        if where:
            sql += f" WHERE {where}"
        return sql, params.values
