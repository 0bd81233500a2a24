# tests/unit/generation/test_providers.py
"""Tests for the random value, predicate and query providers."""

from __future__ import annotations

import random

import pytest

from querysim.contracts.enums import ColumnType
from querysim.contracts.query import Create, Delete, Insert, Select
from querysim.contracts.schema import Column, value_type_name
from querysim.generation.budget import Remaining
from querysim.generation.providers import (
    BLOB_LENGTH,
    INTEGER_RANGE,
    TEXT_LENGTH,
    RandomPredicateProvider,
    RandomQueryProvider,
    RandomValueProvider,
    random_table,
)
from querysim.testing import make_table

ALL_TYPES = make_table(
    "all_types",
    [("i", ColumnType.INTEGER), ("f", ColumnType.FLOAT), ("s", ColumnType.TEXT), ("b", ColumnType.BLOB)],
)


class TestRandomValueProvider:
    def test_row_conforms_to_columns(self, rng: random.Random) -> None:
        provider = RandomValueProvider()
        for _ in range(50):
            row = provider.row(rng, ALL_TYPES)
            assert [value_type_name(v) for v in row] == ["integer", "float", "text", "blob"]

    @pytest.mark.parametrize("column_type", list(ColumnType))
    def test_values_never_null(self, column_type: ColumnType, rng: random.Random) -> None:
        column = Column(name="c", column_type=column_type)
        assert all(RandomValueProvider().value(rng, column) is not None for _ in range(50))

    def test_bounds(self, rng: random.Random) -> None:
        provider = RandomValueProvider()
        for _ in range(100):
            i, _f, s, b = provider.row(rng, ALL_TYPES)
            assert INTEGER_RANGE[0] <= i <= INTEGER_RANGE[1]
            assert TEXT_LENGTH[0] <= len(s) <= TEXT_LENGTH[1]
            assert BLOB_LENGTH[0] <= len(b) <= BLOB_LENGTH[1]


class TestRandomPredicateProvider:
    def test_matching_is_true_for_row(self, rng: random.Random) -> None:
        values = RandomValueProvider()
        predicates = RandomPredicateProvider()
        for _ in range(300):
            row = values.row(rng, ALL_TYPES)
            assert predicates.matching(rng, ALL_TYPES, row).test(row, ALL_TYPES)

    def test_matching_handles_null(self, rng: random.Random) -> None:
        table = make_table()
        row = (None, None)
        for _ in range(50):
            assert RandomPredicateProvider().matching(rng, table, row).test(row, table)

    def test_matching_handles_empty_text(self, rng: random.Random) -> None:
        table = make_table("e", [("s", ColumnType.TEXT), ("b", ColumnType.BLOB)])
        row = ("", b"")
        for _ in range(50):
            assert RandomPredicateProvider().matching(rng, table, row).test(row, table)

    def test_arbitrary_references_table_columns(self, rng: random.Random) -> None:
        names = {c.name for c in ALL_TYPES.columns}
        for _ in range(50):
            pred = RandomPredicateProvider().arbitrary(rng, ALL_TYPES)
            assert pred.column in names


class TestRandomTable:
    def test_shape(self, rng: random.Random) -> None:
        for _ in range(50):
            table = random_table(rng)
            assert table.name.startswith("t_")
            assert 1 <= len(table.columns) <= 5
            assert [c.name for c in table.columns] == [f"c{i}" for i in range(len(table.columns))]

    def test_explicit_name(self, rng: random.Random) -> None:
        assert random_table(rng, name="t0").name == "t0"


class TestRandomQueryProvider:
    def test_only_reads_when_only_read_budget(self, rng: random.Random) -> None:
        budget = Remaining(read=3.0, write=0.0, create=0.0)
        queries = [RandomQueryProvider().query(rng, ALL_TYPES, budget) for _ in range(50)]
        assert all(isinstance(q, Select) for q in queries)

    def test_only_writes_when_only_write_budget(self, rng: random.Random) -> None:
        budget = Remaining(read=0.0, write=3.0, create=0.0)
        queries = [RandomQueryProvider().query(rng, ALL_TYPES, budget) for _ in range(100)]
        assert {type(q) for q in queries} == {Insert, Delete}

    def test_only_creates_when_only_create_budget(self, rng: random.Random) -> None:
        budget = Remaining(read=0.0, write=0.0, create=1.0)
        queries = [RandomQueryProvider().query(rng, ALL_TYPES, budget) for _ in range(20)]
        assert all(isinstance(q, Create) for q in queries)

    def test_writes_target_given_table(self, rng: random.Random) -> None:
        budget = Remaining(read=1.0, write=1.0, create=0.0)
        for _ in range(50):
            assert RandomQueryProvider().query(rng, ALL_TYPES, budget).table_name == "all_types"

    def test_inserted_rows_fit_table(self, rng: random.Random) -> None:
        budget = Remaining(read=0.0, write=1.0, create=0.0)
        for _ in range(50):
            query = RandomQueryProvider().query(rng, ALL_TYPES, budget)
            if isinstance(query, Insert):
                assert all(len(row) == len(ALL_TYPES.columns) for row in query.values)
