# src/querysim/runner/simulation.py
"""Simulation sessions: bootstrap, generate, execute, report.

A session threads ONE random.Random (seeded from the options) through
table bootstrapping and every property generation, so a seed fully
determines the generated corpus for a given engine behavior.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass, field

from querysim.config import SimulatorOptions
from querysim.contracts.enums import ExecutionStatus, QueryCategory
from querysim.contracts.plan import Interaction, InteractionStats
from querysim.contracts.query import Create
from querysim.contracts.schema import Table
from querysim.core.logging import get_logger, session_context
from querysim.generation.generators import generate_property
from querysim.generation.properties import Property
from querysim.generation.providers import Providers, random_table
from querysim.runner.driver import Engine, ExecutionOutcome, execute_interactions
from querysim.runner.env import SimulatorEnv

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FailureRecord:
    """A reportable outcome together with the property that produced it."""

    property: Property
    outcome: ExecutionOutcome


@dataclass
class SimulationReport:
    """Counters and captured properties for one session."""

    seed: int
    stats: InteractionStats = field(default_factory=InteractionStats)
    counts: dict[ExecutionStatus, int] = field(default_factory=lambda: dict.fromkeys(ExecutionStatus, 0))
    failures: list[FailureRecord] = field(default_factory=list)
    corpus: list[Property] = field(default_factory=list)

    @property
    def properties_run(self) -> int:
        return sum(self.counts.values())

    @property
    def ok(self) -> bool:
        return not self.failures

    def record(self, prop: Property, outcome: ExecutionOutcome) -> None:
        self.counts[outcome.status] += 1
        self.corpus.append(prop)
        if outcome.is_failure:
            self.failures.append(FailureRecord(property=prop, outcome=outcome))


def bootstrap_tables(rng: random.Random, count: int) -> list[Table]:
    """Deterministic starting schemas named t0..t{count-1}."""
    return [random_table(rng, name=f"t{i}") for i in range(count)]


class SimulationRunner:
    """Drives generation and execution for one session.

    Usage:
        runner = SimulationRunner(opts, MemoryEngine())
        report = runner.run()
    """

    def __init__(
        self,
        opts: SimulatorOptions,
        engine: Engine,
        *,
        providers: Providers | None = None,
    ) -> None:
        self._opts = opts
        self._engine = engine
        self._providers = providers if providers is not None else Providers()
        self._rng = random.Random(opts.seed)
        self._env = SimulatorEnv(opts=opts)
        self._report = SimulationReport(seed=opts.seed)
        self._bootstrapped = False

    @property
    def env(self) -> SimulatorEnv:
        return self._env

    @property
    def report(self) -> SimulationReport:
        return self._report

    def bootstrap(self) -> None:
        """Create the starting tables in the engine and the environment."""
        if self._bootstrapped:
            return
        tables = bootstrap_tables(self._rng, self._opts.max_tables)
        script = [Interaction.of_query(Create(table=t)) for t in tables]
        outcome = execute_interactions(script, self._env, self._engine, self._report.stats)
        failed = [r.error for r in outcome.results if r.is_error]
        if failed:
            raise RuntimeError(f"Engine rejected bootstrap tables: {failed}")
        self._bootstrapped = True
        logger.info("tables_bootstrapped", tables=self._env.table_names())

    def _execute(self, prop: Property) -> ExecutionOutcome:
        outcome = execute_interactions(prop.interactions(), self._env, self._engine, self._report.stats)
        self._report.record(prop, outcome)
        if outcome.is_failure:
            logger.warning(
                "property_failed",
                property=prop.name,
                status=outcome.status.value,
                message=outcome.message,
                fingerprint=prop.fingerprint(),
            )
        else:
            logger.info("property_executed", property=prop.name, status=outcome.status.value)
        return outcome

    def run(self) -> SimulationReport:
        """Generate and execute properties until a budget is exhausted.

        Stops after max_properties attempts (discarded ones included) or
        once max_interactions queries have executed, whichever comes first.
        """
        stats = self._report.stats
        with session_context(self._opts.seed):
            self.bootstrap()
            while (
                self._report.properties_run < self._opts.max_properties
                and stats.total < self._opts.max_interactions
            ):
                prop = generate_property(self._rng, self._env, stats, self._providers)
                self._execute(prop)
            logger.info(
                "simulation_finished",
                properties=self._report.properties_run,
                failures=len(self._report.failures),
                reads=stats.read_count,
                writes=stats.write_count,
                creates=stats.create_count,
            )
        return self._report

    def replay(self, properties: Iterable[Property]) -> SimulationReport:
        """Execute recorded properties in order, without generating new ones.

        Bootstraps with the same seed first, so a corpus recorded by run()
        sees the same starting tables.
        """
        with session_context(self._opts.seed):
            self.bootstrap()
            for prop in properties:
                self._execute(prop)
        return self._report


def plan_corpus(
    opts: SimulatorOptions,
    count: int,
    *,
    providers: Providers | None = None,
) -> list[Property]:
    """Generate properties without an engine.

    Stats advance by each property's planned query counts instead of
    executed ones, so the workload budget still steers selection.
    """
    rng = random.Random(opts.seed)
    env = SimulatorEnv(opts=opts, tables=bootstrap_tables(rng, opts.max_tables))
    stats = InteractionStats(create_count=len(env.tables))
    providers = providers if providers is not None else Providers()

    corpus: list[Property] = []
    for _ in range(count):
        prop = generate_property(rng, env, stats, providers)
        planned = prop.query_counts()
        stats.read_count += planned[QueryCategory.READ]
        stats.write_count += planned[QueryCategory.WRITE]
        stats.create_count += planned[QueryCategory.CREATE]
        corpus.append(prop)
    return corpus
