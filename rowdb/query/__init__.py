"""Query layer - conditions, SQL compilation, results and collections."""

from __future__ import annotations

from rowdb.query.collection import Collection
from rowdb.query.compiler import SQLCompiler
from rowdb.query.condition import And, Cond, Func, Or, Raw
from rowdb.query.result import Result

__all__ = [
    "Collection",
    "Result",
    "SQLCompiler",
    "Cond",
    "Raw",
    "Func",
    "And",
    "Or",
]
