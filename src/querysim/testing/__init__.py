# src/querysim/testing/__init__.py
"""Test infrastructure for querysim.

Factories for constructing production types with sensible defaults.
When a contract type's constructor changes, update the factory here.

This package also contains:
- memory_engine: an in-memory Engine used by tests, the CLI and replay

Usage:
    from querysim.testing import make_table, make_env, make_insert_select
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from querysim.config import SimulatorOptions
from querysim.contracts.enums import ColumnType
from querysim.contracts.query import Create, Insert, Predicate, Query, Select
from querysim.contracts.schema import Column, Row, Table
from querysim.generation.properties import DoubleCreateFailure, InsertSelect
from querysim.runner.env import SimulatorEnv
from querysim.testing.memory_engine import MemoryEngine

__all__ = [
    "MemoryEngine",
    "make_double_create",
    "make_env",
    "make_insert_select",
    "make_options",
    "make_table",
]


def make_table(
    name: str = "t",
    columns: Sequence[tuple[str, ColumnType]] | None = None,
) -> Table:
    """Build a Table; defaults to (id INTEGER, name TEXT).

    Usage:
        table = make_table()
        table = make_table("users", [("id", ColumnType.INTEGER), ("score", ColumnType.FLOAT)])
    """
    if columns is None:
        columns = [("id", ColumnType.INTEGER), ("name", ColumnType.TEXT)]
    return Table(name=name, columns=tuple(Column(name=n, column_type=t) for n, t in columns))


def make_options(**overrides: Any) -> SimulatorOptions:
    """Build SimulatorOptions: 10 interactions split 50/50 read/write by default."""
    values: dict[str, Any] = {
        "max_interactions": 10,
        "read_percent": 50.0,
        "write_percent": 50.0,
        "create_percent": 0.0,
    }
    values.update(overrides)
    return SimulatorOptions(**values)


def make_env(
    tables: Sequence[Table] | None = None,
    opts: SimulatorOptions | None = None,
) -> SimulatorEnv:
    """Build a SimulatorEnv holding one default table unless told otherwise."""
    return SimulatorEnv(
        opts=opts if opts is not None else make_options(),
        tables=list(tables) if tables is not None else [make_table()],
    )


def make_insert_select(
    rows: Sequence[Row] = ((1, "a"), (2, "b"), (3, "c")),
    *,
    table: str = "t",
    row_index: int = 1,
    fillers: Sequence[Query] = (),
    predicate: Predicate | None = None,
) -> InsertSelect:
    """Build an InsertSelect; the select matches the chosen row on column id."""
    rows = tuple(rows)
    if predicate is None:
        predicate = Predicate.eq("id", rows[row_index][0])
    return InsertSelect(
        insert=Insert(table=table, values=rows),
        row_index=row_index,
        queries_between=tuple(fillers),
        select=Select(table=table, predicate=predicate),
    )


def make_double_create(
    table: Table | None = None,
    *,
    fillers: Sequence[Query] = (),
) -> DoubleCreateFailure:
    """Build a DoubleCreateFailure over the default table."""
    return DoubleCreateFailure(
        create=Create(table=table if table is not None else make_table()),
        queries_between=tuple(fillers),
    )
