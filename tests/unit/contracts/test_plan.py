# tests/unit/contracts/test_plan.py
"""Tests for result sets, stats, checks and interactions."""

from __future__ import annotations

import pytest

from querysim.contracts.enums import InteractionKind
from querysim.contracts.errors import SimulationOracleError
from querysim.contracts.plan import (
    Interaction,
    InteractionStats,
    LastResultErrorContains,
    ResultSet,
    RowInLastResult,
    TableAbsent,
    TableExists,
)
from querysim.contracts.query import Create, Delete, Insert, Predicate, Select
from querysim.generation.properties import already_exists_message
from querysim.runner.env import SimulatorEnv
from querysim.testing import make_table


class TestResultSet:
    def test_success(self) -> None:
        result = ResultSet.success([(1, "a")])
        assert result.rows == ((1, "a"),)
        assert not result.is_error

    def test_failure(self) -> None:
        result = ResultSet.failure("boom")
        assert result.is_error
        assert result.rows is None

    def test_requires_exactly_one(self) -> None:
        with pytest.raises(ValueError):
            ResultSet()
        with pytest.raises(ValueError):
            ResultSet(rows=(), error="both")


class TestInteractionStats:
    def test_record_by_category(self) -> None:
        stats = InteractionStats()
        stats.record(Select(table="t", predicate=Predicate.true_()))
        stats.record(Insert(table="t", values=((1, "a"),)))
        stats.record(Delete(table="t", predicate=Predicate.true_()))
        stats.record(Create(table=make_table()))
        assert (stats.read_count, stats.write_count, stats.create_count) == (1, 2, 1)
        assert stats.total == 4


# =============================================================================
# Checks
# =============================================================================


class TestTableChecks:
    def test_table_exists(self, env: SimulatorEnv) -> None:
        assert TableExists(table="t").evaluate((), env)
        assert not TableExists(table="u").evaluate((), env)

    def test_table_absent(self, env: SimulatorEnv) -> None:
        assert not TableAbsent(table="t").evaluate((), env)
        assert TableAbsent(table="u").evaluate((), env)

    def test_messages(self) -> None:
        assert TableExists(table="t").message == "table t exists"
        assert "(t)" in TableAbsent(table="t").message


class TestRowInLastResult:
    def test_row_present(self, env: SimulatorEnv) -> None:
        check = RowInLastResult(table="t", row=(2, "b"))
        stack = [ResultSet.success([(1, "a"), (2, "b")])]
        assert check.evaluate(stack, env)

    def test_row_missing(self, env: SimulatorEnv) -> None:
        check = RowInLastResult(table="t", row=(2, "b"))
        assert not check.evaluate([ResultSet.success([(1, "a")])], env)

    def test_only_last_result_counts(self, env: SimulatorEnv) -> None:
        check = RowInLastResult(table="t", row=(2, "b"))
        stack = [ResultSet.success([(2, "b")]), ResultSet.success([])]
        assert not check.evaluate(stack, env)

    def test_error_result_raises_oracle_error(self, env: SimulatorEnv) -> None:
        check = RowInLastResult(table="t", row=(2, "b"))
        with pytest.raises(SimulationOracleError) as exc_info:
            check.evaluate([ResultSet.failure("no such table: t")], env)
        assert exc_info.value.engine_error == "no such table: t"

    def test_empty_stack_raises_oracle_error(self, env: SimulatorEnv) -> None:
        with pytest.raises(SimulationOracleError, match="empty"):
            RowInLastResult(table="t", row=(1,)).evaluate([], env)

    def test_message_renders_row(self) -> None:
        assert RowInLastResult(table="t", row=(1, "a")).message == "row [1, 'a'] not found in table t"


class TestLastResultErrorContains:
    """The Double-Create-Failure assertion on table t, created twice with no filler."""

    def _check(self) -> LastResultErrorContains:
        return LastResultErrorContains(table="t", substring=already_exists_message("t"))

    def test_expected_error_passes(self, env: SimulatorEnv) -> None:
        stack = [ResultSet.success(), ResultSet.failure("Parse error: Table t already exists")]
        assert self._check().evaluate(stack, env)

    def test_other_error_fails(self, env: SimulatorEnv) -> None:
        stack = [ResultSet.success(), ResultSet.failure("disk I/O error")]
        assert not self._check().evaluate(stack, env)

    def test_success_fails(self, env: SimulatorEnv) -> None:
        stack = [ResultSet.success(), ResultSet.success()]
        assert not self._check().evaluate(stack, env)

    def test_other_table_name_fails(self, env: SimulatorEnv) -> None:
        stack = [ResultSet.success(), ResultSet.failure("Table t2 exists")]
        assert not self._check().evaluate(stack, env)

    def test_substring_is_exact_text(self) -> None:
        assert already_exists_message("t") == "Table t already exists"


# =============================================================================
# Interactions
# =============================================================================


class TestInteraction:
    def test_factories(self) -> None:
        query = Select(table="t", predicate=Predicate.true_())
        assert Interaction.of_query(query).kind == InteractionKind.QUERY
        assert Interaction.assumption(TableExists(table="t")).kind == InteractionKind.ASSUMPTION
        assert Interaction.assertion(TableExists(table="t")).kind == InteractionKind.ASSERTION

    def test_query_interaction_rejects_check(self) -> None:
        with pytest.raises(ValueError):
            Interaction(kind=InteractionKind.QUERY, check=TableExists(table="t"))

    def test_check_interaction_rejects_query(self) -> None:
        query = Select(table="t", predicate=Predicate.true_())
        with pytest.raises(ValueError):
            Interaction(kind=InteractionKind.ASSERTION, query=query)

    def test_str(self) -> None:
        query = Select(table="t", predicate=Predicate.true_())
        assert str(Interaction.of_query(query)) == "SELECT * FROM t WHERE TRUE;"
        assert str(Interaction.assumption(TableExists(table="t"))) == "-- ASSUMPTION: table t exists"
