# src/querysim/contracts/plan.py
"""Interaction scripts and the checks embedded in them.

The pattern:
- Property: plain data, serializable, lives in the corpus
- Interaction: derived from a Property, transient, holds executable checks
- ResultSet: what the driver pushes onto its stack after each query

A Check captures copies of the data it needs (table name, target row,
expected error text) when the script is compiled. It never holds
references into driver state, so the same Check can be evaluated against
any (stack, env) pair.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from querysim.contracts.enums import InteractionKind, QueryCategory
from querysim.contracts.errors import SimulationOracleError
from querysim.contracts.query import Query
from querysim.contracts.schema import Row, value_to_sql

if TYPE_CHECKING:
    from querysim.runner.env import SimulatorEnv


@dataclass(frozen=True, slots=True)
class ResultSet:
    """Outcome of executing one query: returned rows, or an error message.

    Use the factory methods to create instances.
    """

    rows: tuple[Row, ...] | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.rows is None) == (self.error is None):
            raise ValueError("ResultSet must have exactly one of rows or error")

    @classmethod
    def success(cls, rows: Sequence[Row] = ()) -> ResultSet:
        return cls(rows=tuple(rows))

    @classmethod
    def failure(cls, error: str) -> ResultSet:
        return cls(error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass
class InteractionStats:
    """Running per-category query counters for a simulation session.

    Owned and updated by the driver. Generation only reads a snapshot.
    """

    read_count: int = 0
    write_count: int = 0
    create_count: int = 0

    def record(self, query: Query) -> None:
        """Count one executed query against its category."""
        match query.category:
            case QueryCategory.READ:
                self.read_count += 1
            case QueryCategory.WRITE:
                self.write_count += 1
            case QueryCategory.CREATE:
                self.create_count += 1

    @property
    def total(self) -> int:
        return self.read_count + self.write_count + self.create_count


# =============================================================================
# Checks (assumptions and assertions)
# =============================================================================


def _last_result(stack: Sequence[ResultSet]) -> ResultSet:
    if not stack:
        raise SimulationOracleError("Result stack is empty; no query result to inspect")
    return stack[-1]


class Check(ABC):
    """A precondition or postcondition over (result stack, environment)."""

    @property
    @abstractmethod
    def message(self) -> str:
        """Human-readable description used when the check is reported."""

    @abstractmethod
    def evaluate(self, stack: Sequence[ResultSet], env: SimulatorEnv) -> bool:
        """Evaluate the check.

        Raises:
            SimulationOracleError: If the inputs cannot be judged.
        """


@dataclass(frozen=True, slots=True)
class TableExists(Check):
    """True iff the environment knows a table with this name."""

    table: str

    @property
    def message(self) -> str:
        return f"table {self.table} exists"

    def evaluate(self, stack: Sequence[ResultSet], env: SimulatorEnv) -> bool:
        return env.has_table(self.table)


@dataclass(frozen=True, slots=True)
class TableAbsent(Check):
    """True iff the environment has no table with this name."""

    table: str

    @property
    def message(self) -> str:
        return f"Double-Create-Failure should not be called on an existing table ({self.table})"

    def evaluate(self, stack: Sequence[ResultSet], env: SimulatorEnv) -> bool:
        return not env.has_table(self.table)


@dataclass(frozen=True, slots=True)
class RowInLastResult(Check):
    """True iff the most recent result is a success containing the row.

    An error result is not a mismatch: it raises SimulationOracleError so
    reporting can separate a broken oracle from a falsified invariant.
    """

    table: str
    row: Row

    @property
    def message(self) -> str:
        rendered = ", ".join(value_to_sql(v) for v in self.row)
        return f"row [{rendered}] not found in table {self.table}"

    def evaluate(self, stack: Sequence[ResultSet], env: SimulatorEnv) -> bool:
        last = _last_result(stack)
        if last.rows is None:
            raise SimulationOracleError(
                f"Expected rows from table {self.table}, got error: {last.error}",
                engine_error=last.error,
            )
        return any(r == self.row for r in last.rows)


@dataclass(frozen=True, slots=True)
class LastResultErrorContains(Check):
    """True iff the most recent result is an error mentioning the substring."""

    table: str
    substring: str

    @property
    def message(self) -> str:
        return "creating two tables with the name should result in a failure for the second query"

    def evaluate(self, stack: Sequence[ResultSet], env: SimulatorEnv) -> bool:
        last = _last_result(stack)
        if last.error is None:
            return False
        return self.substring in last.error


# =============================================================================
# Interactions
# =============================================================================


@dataclass(frozen=True, slots=True)
class Interaction:
    """One step of an executable script.

    Use the factory methods to create instances.

    Invariants (enforced by __post_init__):
    - QUERY carries a query and no check
    - ASSUMPTION/ASSERTION carry a check and no query
    """

    kind: InteractionKind
    query: Query | None = None
    check: Check | None = None

    def __post_init__(self) -> None:
        if self.kind == InteractionKind.QUERY:
            if self.query is None or self.check is not None:
                raise ValueError("QUERY interaction requires a query and no check")
        elif self.check is None or self.query is not None:
            raise ValueError(f"{self.kind.value.upper()} interaction requires a check and no query")

    @classmethod
    def of_query(cls, query: Query) -> Interaction:
        return cls(kind=InteractionKind.QUERY, query=query)

    @classmethod
    def assumption(cls, check: Check) -> Interaction:
        return cls(kind=InteractionKind.ASSUMPTION, check=check)

    @classmethod
    def assertion(cls, check: Check) -> Interaction:
        return cls(kind=InteractionKind.ASSERTION, check=check)

    def __str__(self) -> str:
        if self.query is not None:
            return str(self.query)
        assert self.check is not None
        return f"-- {self.kind.value.upper()}: {self.check.message}"
