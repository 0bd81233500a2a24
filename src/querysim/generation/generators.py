# src/querysim/generation/generators.py
"""Randomized construction of properties.

Every generator follows the same shape:
1. pick a table uniformly from the environment
2. build the queries central to the property
3. attempt 0-2 filler queries from the query provider, dropping any that
   would falsify the property under test

Dropped fillers are not replaced, so a property can carry fewer fillers
than were attempted. Dropping is silent filtering, never an error.
"""

from __future__ import annotations

import random

from querysim.contracts.errors import GenerationDefectError
from querysim.contracts.plan import InteractionStats
from querysim.contracts.query import Create, Delete, Insert, Query, Select
from querysim.contracts.schema import Row, Table
from querysim.core.logging import get_logger
from querysim.generation.budget import Remaining, remaining
from querysim.generation.dispatch import WeightedDispatcher, WeightedEntry, pick, pick_index
from querysim.generation.properties import DoubleCreateFailure, InsertSelect, Property
from querysim.generation.providers import Providers
from querysim.runner.env import SimulatorEnv

logger = get_logger(__name__)

# Inclusive bounds
MIN_INSERT_ROWS = 1
MAX_INSERT_ROWS = 5
MAX_FILLER_QUERIES = 2


# =============================================================================
# Soundness filters
# =============================================================================


def _insert_select_drop_reason(query: Query, table: Table, row: Row) -> str | None:
    match query:
        case Delete(table=target, predicate=predicate) if target == table.name and predicate.test(row, table):
            return "delete_removes_selected_row"
        case Create() if query.table_name == table.name:
            return "create_of_property_table"
    return None


def _double_create_drop_reason(query: Query, table: Table) -> str | None:
    match query:
        case Create() if query.table_name == table.name:
            return "create_of_property_table"
    return None


def insert_select_filler_allowed(query: Query, table: Table, row: Row) -> bool:
    """Whether a filler query keeps an Insert-Select property sound.

    Rejects a DELETE on the property's table whose predicate matches the
    selected row, and a CREATE of the property's table.
    """
    return _insert_select_drop_reason(query, table, row) is None


def double_create_filler_allowed(query: Query, table: Table) -> bool:
    """Whether a filler query keeps a Double-Create-Failure property sound.

    Rejects a CREATE of the property's table, which would fail before the
    intended second create.
    """
    return _double_create_drop_reason(query, table) is None


# =============================================================================
# Property generators
# =============================================================================


def _pick_table(env: SimulatorEnv, rng: random.Random) -> Table:
    if not env.tables:
        raise GenerationDefectError("Cannot generate a property: the environment has no tables")
    return pick(env.tables, rng)


def property_insert_select(
    rng: random.Random,
    env: SimulatorEnv,
    budget: Remaining,
    providers: Providers,
) -> InsertSelect:
    """Generate an Insert-Select property over a random table."""
    table = _pick_table(env, rng)

    row_count = rng.randint(MIN_INSERT_ROWS, MAX_INSERT_ROWS)
    rows = tuple(providers.values.row(rng, table) for _ in range(row_count))

    row_index = pick_index(len(rows), rng)
    row = rows[row_index]

    insert = Insert(table=table.name, values=rows)

    # Constraints on the fillers:
    # - the inserted row is not deleted
    # - the table is not re-created (that query would fail)
    fillers: list[Query] = []
    for _ in range(rng.randint(0, MAX_FILLER_QUERIES)):
        query = providers.queries.query(rng, table, budget)
        reason = _insert_select_drop_reason(query, table, row)
        if reason is not None:
            logger.debug("filler_query_dropped", property="Insert-Select", reason=reason, query=str(query))
            continue
        fillers.append(query)

    select = Select(table=table.name, predicate=providers.predicates.matching(rng, table, row))

    return InsertSelect(
        insert=insert,
        row_index=row_index,
        queries_between=tuple(fillers),
        select=select,
    )


def property_double_create_failure(
    rng: random.Random,
    env: SimulatorEnv,
    budget: Remaining,
    providers: Providers,
) -> DoubleCreateFailure:
    """Generate a Double-Create-Failure property over a random table."""
    table = _pick_table(env, rng)
    create = Create(table=table)

    fillers: list[Query] = []
    for _ in range(rng.randint(0, MAX_FILLER_QUERIES)):
        query = providers.queries.query(rng, table, budget)
        reason = _double_create_drop_reason(query, table)
        if reason is not None:
            logger.debug("filler_query_dropped", property="Double-Create-Failure", reason=reason, query=str(query))
            continue
        fillers.append(query)

    return DoubleCreateFailure(create=create, queries_between=tuple(fillers))


def property_weights(budget: Remaining) -> dict[str, float]:
    """Selection weight per property, by display name.

    Insert-Select spends a read and a write, so the scarcer of the two
    bounds it. Double-Create-Failure spends two creates.
    """
    return {
        InsertSelect.display_name: min(budget.read, budget.write),
        DoubleCreateFailure.display_name: budget.create / 2.0,
    }


def build_dispatcher(
    env: SimulatorEnv,
    budget: Remaining,
    providers: Providers,
) -> WeightedDispatcher[Property]:
    """The weighted dispatcher over every property generator."""
    weights = property_weights(budget)
    return WeightedDispatcher[Property](
        [
            WeightedEntry(
                InsertSelect.display_name,
                weights[InsertSelect.display_name],
                lambda rng: property_insert_select(rng, env, budget, providers),
            ),
            WeightedEntry(
                DoubleCreateFailure.display_name,
                weights[DoubleCreateFailure.display_name],
                lambda rng: property_double_create_failure(rng, env, budget, providers),
            ),
        ]
    )


def generate_property(
    rng: random.Random,
    env: SimulatorEnv,
    stats: InteractionStats,
    providers: Providers | None = None,
) -> Property:
    """Generate one property steered by the remaining workload budget.

    Deterministic: identical rng state, env and stats give an identical
    property.

    Raises:
        GenerationDefectError: If the environment has no tables.
    """
    if not env.tables:
        raise GenerationDefectError("Cannot generate a property: the environment has no tables")
    providers = providers if providers is not None else Providers()
    budget = remaining(env.opts, stats)
    return build_dispatcher(env, budget, providers).dispatch(rng)
