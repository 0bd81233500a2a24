# src/querysim/generation/providers.py
"""Randomized constructors for values, predicates and filler queries.

The property generators consume these through three narrow protocols:

- ValueProvider.row(rng, table): one row valid for the table's columns
- PredicateProvider.matching(rng, table, row): a predicate that is TRUE for
  that exact row (a contract, not a likelihood)
- QueryProvider.query(rng, table, remaining): one query of any kind,
  weighted by the remaining budgets

The Random* classes are the reference implementations. Any object that
satisfies the protocols can be swapped in through Providers.
"""

from __future__ import annotations

import random
import string
from dataclasses import dataclass, field
from typing import Protocol

from querysim.contracts.enums import ColumnType
from querysim.contracts.query import Create, Delete, Insert, Predicate, Query, Select
from querysim.contracts.schema import Column, Row, Table, Value
from querysim.generation.budget import Remaining
from querysim.generation.dispatch import frequency, pick, pick_index

_IDENT_CHARS = string.ascii_lowercase
_TEXT_CHARS = string.ascii_letters + string.digits

# Bounds for generated values
INTEGER_RANGE = (-1_000_000, 1_000_000)
FLOAT_RANGE = (-1_000_000.0, 1_000_000.0)
TEXT_LENGTH = (1, 10)
BLOB_LENGTH = (1, 8)

# Predicate trees nest AND/OR at most this deep
MAX_PREDICATE_DEPTH = 2


class ValueProvider(Protocol):
    def row(self, rng: random.Random, table: Table) -> Row: ...

    def value(self, rng: random.Random, column: Column) -> Value: ...


class PredicateProvider(Protocol):
    def matching(self, rng: random.Random, table: Table, row: Row) -> Predicate: ...

    def arbitrary(self, rng: random.Random, table: Table) -> Predicate: ...


class QueryProvider(Protocol):
    def query(self, rng: random.Random, table: Table, remaining: Remaining) -> Query: ...


class RandomValueProvider:
    """Uniform values per column type. Never produces NULL."""

    def value(self, rng: random.Random, column: Column) -> Value:
        match column.column_type:
            case ColumnType.INTEGER:
                return rng.randint(*INTEGER_RANGE)
            case ColumnType.FLOAT:
                return rng.uniform(*FLOAT_RANGE)
            case ColumnType.TEXT:
                length = rng.randint(*TEXT_LENGTH)
                return "".join(rng.choice(_TEXT_CHARS) for _ in range(length))
            case ColumnType.BLOB:
                length = rng.randint(*BLOB_LENGTH)
                return bytes(rng.randrange(256) for _ in range(length))
        raise AssertionError(f"Unhandled column type: {column.column_type}")

    def row(self, rng: random.Random, table: Table) -> Row:
        return tuple(self.value(rng, column) for column in table.columns)


def _lower_bound(rng: random.Random, value: Value) -> Value:
    """A value strictly less than the given one, of the same storage class."""
    if isinstance(value, int):
        return value - rng.randint(1, 100)
    if isinstance(value, float):
        return value - rng.uniform(1.0, 100.0)
    # A proper prefix sorts before the full string/blob
    assert isinstance(value, str | bytes)
    return value[: rng.randrange(len(value))]


def _upper_bound(rng: random.Random, value: Value) -> Value:
    """A value strictly greater than the given one, of the same storage class."""
    if isinstance(value, int):
        return value + rng.randint(1, 100)
    if isinstance(value, float):
        return value + rng.uniform(1.0, 100.0)
    if isinstance(value, str):
        return value + rng.choice(_TEXT_CHARS)
    assert isinstance(value, bytes)
    return value + bytes([rng.randrange(256)])


@dataclass
class RandomPredicateProvider:
    """Builds matching and arbitrary predicates over a table's columns."""

    values: ValueProvider = field(default_factory=RandomValueProvider)

    def matching(self, rng: random.Random, table: Table, row: Row) -> Predicate:
        """A predicate guaranteed to be TRUE for row."""
        return self._matching(rng, table, row, depth=0)

    def _matching(self, rng: random.Random, table: Table, row: Row, depth: int) -> Predicate:
        shapes = ["eq", "gt", "lt"]
        if depth < MAX_PREDICATE_DEPTH:
            shapes += ["and", "or"]
        shape = pick(shapes, rng)

        if shape == "and":
            return Predicate.and_(
                [self._matching(rng, table, row, depth + 1), self._matching(rng, table, row, depth + 1)]
            )
        if shape == "or":
            branches = [self._matching(rng, table, row, depth + 1), self.arbitrary(rng, table)]
            if rng.random() < 0.5:
                branches.reverse()
            return Predicate.or_(branches)

        index = pick_index(len(table.columns), rng)
        column = table.columns[index].name
        value = row[index]
        if value is None:
            return Predicate.true_()
        # Nothing sorts below an empty string/blob
        if shape == "eq" or (shape == "gt" and value in ("", b"")):
            return Predicate.eq(column, value)
        if shape == "gt":
            return Predicate.gt(column, _lower_bound(rng, value))
        return Predicate.lt(column, _upper_bound(rng, value))

    def arbitrary(self, rng: random.Random, table: Table) -> Predicate:
        """A random single-column comparison; may or may not match any row."""
        column = pick(table.columns, rng)
        value = self.values.value(rng, column)
        factory = pick([Predicate.eq, Predicate.neq, Predicate.gt, Predicate.lt], rng)
        return factory(column.name, value)


def random_table(rng: random.Random, *, name: str | None = None) -> Table:
    """A fresh table schema with 1-5 typed columns and a random name."""
    if name is None:
        name = "t_" + "".join(rng.choice(_IDENT_CHARS) for _ in range(6))
    column_count = rng.randint(1, 5)
    columns = tuple(Column(name=f"c{i}", column_type=pick(list(ColumnType), rng)) for i in range(column_count))
    return Table(name=name, columns=columns)


@dataclass
class RandomQueryProvider:
    """Filler queries weighted by the remaining budgets.

    CREATE <- remaining.create, SELECT <- remaining.read,
    INSERT and DELETE <- remaining.write.
    """

    values: ValueProvider = field(default_factory=RandomValueProvider)
    predicates: PredicateProvider = field(default_factory=RandomPredicateProvider)

    def query(self, rng: random.Random, table: Table, remaining: Remaining) -> Query:
        builder = frequency(
            [
                (remaining.create, self._create),
                (remaining.read, self._select),
                (remaining.write, self._insert),
                (remaining.write, self._delete),
            ],
            rng,
        )
        return builder(rng, table)

    def _create(self, rng: random.Random, table: Table) -> Query:
        return Create(table=random_table(rng))

    def _select(self, rng: random.Random, table: Table) -> Query:
        return Select(table=table.name, predicate=self.predicates.arbitrary(rng, table))

    def _insert(self, rng: random.Random, table: Table) -> Query:
        rows = tuple(self.values.row(rng, table) for _ in range(rng.randint(1, 5)))
        return Insert(table=table.name, values=rows)

    def _delete(self, rng: random.Random, table: Table) -> Query:
        return Delete(table=table.name, predicate=self.predicates.arbitrary(rng, table))


@dataclass
class Providers:
    """The provider set handed to the property generators."""

    values: ValueProvider = field(default_factory=RandomValueProvider)
    predicates: PredicateProvider = field(default_factory=RandomPredicateProvider)
    queries: QueryProvider = field(default_factory=RandomQueryProvider)
