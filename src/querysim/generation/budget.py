# src/querysim/generation/budget.py
"""Remaining per-category workload quotas.

    target_category    = max_interactions * percent_category / 100
    remaining_category = max(0, target_category - observed_category)

Remaining values only weight generator selection. Nothing stops
generating once a category is spent; it just becomes unlikely.
"""

from __future__ import annotations

from dataclasses import dataclass

from querysim.config import SimulatorOptions
from querysim.contracts.plan import InteractionStats


@dataclass(frozen=True, slots=True)
class Remaining:
    """Non-negative read/write/create quotas left in the session."""

    read: float
    write: float
    create: float

    def __post_init__(self) -> None:
        for name in ("read", "write", "create"):
            if getattr(self, name) < 0:
                raise ValueError(f"Remaining.{name} must be non-negative, got {getattr(self, name)}")


def _remaining_for(max_interactions: int, percent: float, observed: int) -> float:
    return max(0.0, (max_interactions * percent / 100.0) - observed)


def remaining(opts: SimulatorOptions, stats: InteractionStats) -> Remaining:
    """Compute the remaining budgets from options and a stats snapshot."""
    return Remaining(
        read=_remaining_for(opts.max_interactions, opts.read_percent, stats.read_count),
        write=_remaining_for(opts.max_interactions, opts.write_percent, stats.write_count),
        create=_remaining_for(opts.max_interactions, opts.create_percent, stats.create_count),
    )
