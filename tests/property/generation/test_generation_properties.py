# tests/property/generation/test_generation_properties.py
"""Property-based tests for budgets, dispatch and property generation.

Every generator is driven from a Hypothesis-chosen seed, so a shrunk
failure reproduces with random.Random(seed).
"""

from __future__ import annotations

import random

from hypothesis import given
from hypothesis import strategies as st

from querysim.contracts.enums import ColumnType, InteractionKind
from querysim.contracts.plan import InteractionStats
from querysim.contracts.query import Create, Delete
from querysim.contracts.schema import Column, Table
from querysim.generation.budget import remaining
from querysim.generation.dispatch import frequency
from querysim.generation.generators import (
    MAX_FILLER_QUERIES,
    generate_property,
    property_double_create_failure,
    property_insert_select,
)
from querysim.generation.properties import InsertSelect, Property
from querysim.generation.providers import Providers, RandomPredicateProvider, RandomValueProvider
from querysim.testing import make_env, make_options
from tests.property.settings import DETERMINISM_SETTINGS, STANDARD_SETTINGS

seeds = st.integers(min_value=0, max_value=2**32 - 1)
counts = st.integers(min_value=0, max_value=10_000)
percents = st.integers(min_value=0, max_value=100)

column_types = st.sampled_from(list(ColumnType))


@st.composite
def tables(draw: st.DrawFn) -> Table:
    types = draw(st.lists(column_types, min_size=1, max_size=5))
    name = draw(st.sampled_from(["t", "users", "orders"]))
    return Table(name=name, columns=tuple(Column(name=f"c{i}", column_type=t) for i, t in enumerate(types)))


@st.composite
def option_sets(draw: st.DrawFn) -> dict[str, int]:
    read = draw(percents)
    write = draw(st.integers(min_value=0, max_value=100 - read))
    create = draw(st.integers(min_value=0, max_value=100 - read - write))
    return {
        "max_interactions": draw(st.integers(min_value=0, max_value=5000)),
        "read_percent": read,
        "write_percent": write,
        "create_percent": create,
    }


# =============================================================================
# Budget
# =============================================================================


class TestRemainingProperties:
    @given(options=option_sets(), reads=counts, writes=counts, creates=counts)
    @STANDARD_SETTINGS
    def test_remaining_never_negative(
        self, options: dict[str, int], reads: int, writes: int, creates: int
    ) -> None:
        stats = InteractionStats(read_count=reads, write_count=writes, create_count=creates)
        budget = remaining(make_options(**options), stats)
        assert min(budget.read, budget.write, budget.create) >= 0

    @given(options=option_sets())
    @STANDARD_SETTINGS
    def test_fresh_remaining_equals_targets(self, options: dict[str, int]) -> None:
        opts = make_options(**options)
        budget = remaining(opts, InteractionStats())
        assert budget.read == max(0.0, opts.max_interactions * opts.read_percent / 100.0)


# =============================================================================
# Dispatch
# =============================================================================


class TestFrequencyProperties:
    @given(
        weights=st.lists(st.floats(min_value=0.0, max_value=1e6, allow_nan=False), min_size=1, max_size=8),
        seed=seeds,
    )
    @STANDARD_SETTINGS
    def test_picks_positive_weight_when_any(self, weights: list[float], seed: int) -> None:
        choices = list(zip(weights, range(len(weights)), strict=True))
        index = frequency(choices, random.Random(seed))
        assert 0 <= index < len(weights)
        if sum(weights) > 0:
            assert weights[index] > 0


# =============================================================================
# Generators
# =============================================================================


class TestGeneratorProperties:
    @given(table=tables(), seed=seeds)
    @STANDARD_SETTINGS
    def test_insert_select_invariants(self, table: Table, seed: int) -> None:
        env = make_env([table])
        budget = remaining(env.opts, InteractionStats())
        prop = property_insert_select(random.Random(seed), env, budget, Providers())

        assert 0 <= prop.row_index < len(prop.insert.values)
        assert len(prop.queries_between) <= MAX_FILLER_QUERIES
        assert prop.select.predicate.test(prop.row, table)
        for filler in prop.queries_between:
            if isinstance(filler, Delete) and filler.table == table.name:
                assert not filler.predicate.test(prop.row, table)
            if isinstance(filler, Create):
                assert filler.table_name != table.name

    @given(table=tables(), seed=seeds)
    @STANDARD_SETTINGS
    def test_double_create_fillers_never_recreate(self, table: Table, seed: int) -> None:
        env = make_env([table], opts=make_options(create_percent=50.0, read_percent=25.0, write_percent=25.0))
        budget = remaining(env.opts, InteractionStats())
        prop = property_double_create_failure(random.Random(seed), env, budget, Providers())
        assert all(
            not (isinstance(q, Create) and q.table_name == table.name) for q in prop.queries_between
        )

    @given(table=tables(), seed=seeds)
    @STANDARD_SETTINGS
    def test_compiled_script_shape(self, table: Table, seed: int) -> None:
        env = make_env([table], opts=make_options(max_interactions=100, create_percent=20.0, read_percent=40.0, write_percent=40.0))
        prop = generate_property(random.Random(seed), env, InteractionStats())
        kinds = [i.kind for i in prop.interactions()]

        assert kinds[0] == InteractionKind.ASSUMPTION
        assert kinds[-1] == InteractionKind.ASSERTION
        assert all(k == InteractionKind.QUERY for k in kinds[1:-1])
        assert len(kinds) == 2 + len(prop.queries())

    @given(table=tables(), seed=seeds)
    @DETERMINISM_SETTINGS
    def test_generation_is_deterministic(self, table: Table, seed: int) -> None:
        env = make_env([table], opts=make_options(max_interactions=100, create_percent=20.0, read_percent=40.0, write_percent=40.0))
        first = generate_property(random.Random(seed), env, InteractionStats())
        second = generate_property(random.Random(seed), env, InteractionStats())
        assert first == second
        assert first.interactions() == second.interactions()

    @given(table=tables(), seed=seeds)
    @STANDARD_SETTINGS
    def test_serialization_preserves_script(self, table: Table, seed: int) -> None:
        env = make_env([table], opts=make_options(max_interactions=100, create_percent=20.0, read_percent=40.0, write_percent=40.0))
        prop = generate_property(random.Random(seed), env, InteractionStats())
        restored = Property.from_json(prop.to_json())
        assert restored.interactions() == prop.interactions()
        assert restored.fingerprint() == prop.fingerprint()

    @given(table=tables(), seed=seeds)
    @STANDARD_SETTINGS
    def test_matching_predicate_holds(self, table: Table, seed: int) -> None:
        rng = random.Random(seed)
        row = RandomValueProvider().row(rng, table)
        assert RandomPredicateProvider().matching(rng, table, row).test(row, table)

    @given(seed=seeds)
    @STANDARD_SETTINGS
    def test_zero_create_budget_selects_insert_select(self, seed: int) -> None:
        prop = generate_property(random.Random(seed), make_env(), InteractionStats())
        assert isinstance(prop, InsertSelect)
