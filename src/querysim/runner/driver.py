# src/querysim/runner/driver.py
"""Reference driver: executes a compiled interaction script.

Contract:
1. Every ASSUMPTION is evaluated before any query runs, against the
   environment and an empty result stack. A false assumption means the
   generated instance does not apply here: the run is DISCARDED, not
   failed.
2. QUERY interactions run strictly in order. Each result is pushed onto
   the stack and counted in InteractionStats by category. Successful
   CREATE TABLE queries are mirrored into the environment.
3. ASSERTION interactions are evaluated against the stack. False is a
   reportable FAILED outcome. SimulationOracleError is ERRORED, so a
   broken oracle is never mistaken for a falsified invariant.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from querysim.contracts.enums import ExecutionStatus, InteractionKind
from querysim.contracts.errors import SimulationOracleError
from querysim.contracts.plan import Interaction, InteractionStats, ResultSet
from querysim.contracts.query import Create, Query
from querysim.core.logging import get_logger
from querysim.runner.env import SimulatorEnv

logger = get_logger(__name__)


class Engine(Protocol):
    """The database under test."""

    def execute(self, query: Query) -> ResultSet: ...


@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Result of running one interaction script.

    Attributes:
        status: PASSED, FAILED, ERRORED or DISCARDED
        message: Message of the check that decided a non-PASSED status
        results: Result stack at the end of the run
    """

    status: ExecutionStatus
    message: str | None = None
    results: tuple[ResultSet, ...] = ()

    @property
    def is_failure(self) -> bool:
        """True for outcomes that must be reported."""
        return self.status in (ExecutionStatus.FAILED, ExecutionStatus.ERRORED)


def execute_interactions(
    interactions: Sequence[Interaction],
    env: SimulatorEnv,
    engine: Engine,
    stats: InteractionStats,
) -> ExecutionOutcome:
    """Run a script against an engine, updating env and stats."""
    for interaction in interactions:
        if interaction.kind != InteractionKind.ASSUMPTION:
            continue
        assert interaction.check is not None
        if not interaction.check.evaluate((), env):
            logger.debug("assumption_failed", message=interaction.check.message)
            return ExecutionOutcome(status=ExecutionStatus.DISCARDED, message=interaction.check.message)

    stack: list[ResultSet] = []
    for interaction in interactions:
        match interaction.kind:
            case InteractionKind.QUERY:
                assert interaction.query is not None
                result = engine.execute(interaction.query)
                stack.append(result)
                stats.record(interaction.query)
                if isinstance(interaction.query, Create) and not result.is_error:
                    if not env.has_table(interaction.query.table_name):
                        env.tables.append(interaction.query.table)
            case InteractionKind.ASSERTION:
                assert interaction.check is not None
                try:
                    held = interaction.check.evaluate(stack, env)
                except SimulationOracleError as e:
                    return ExecutionOutcome(
                        status=ExecutionStatus.ERRORED,
                        message=f"{interaction.check.message}: {e}",
                        results=tuple(stack),
                    )
                if not held:
                    return ExecutionOutcome(
                        status=ExecutionStatus.FAILED,
                        message=interaction.check.message,
                        results=tuple(stack),
                    )

    return ExecutionOutcome(status=ExecutionStatus.PASSED, results=tuple(stack))
