# src/querysim/generation/dispatch.py
"""Uniform and weighted choice over a single random stream.

All choices draw from the caller's random.Random, sequentially, so an
identical seed and identical prior consumption reproduce identical picks.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from querysim.contracts.errors import GenerationDefectError
from querysim.core.logging import get_logger

logger = get_logger(__name__)


def pick_index(n: int, rng: random.Random) -> int:
    """Uniform index in [0, n).

    Raises:
        GenerationDefectError: If n is not positive.
    """
    if n <= 0:
        raise GenerationDefectError(f"Cannot pick an index from an empty range (n={n})")
    return rng.randrange(n)


def pick[T](items: Sequence[T], rng: random.Random) -> T:
    """Uniform choice from a non-empty sequence.

    Raises:
        GenerationDefectError: If items is empty.
    """
    return items[pick_index(len(items), rng)]


def _validate_weight(weight: float) -> None:
    if not math.isfinite(weight) or weight < 0:
        raise ValueError(f"Weights must be finite and non-negative, got {weight}")


def frequency[T](choices: Sequence[tuple[float, T]], rng: random.Random) -> T:
    """Weighted choice: each value is picked with probability weight / total.

    Draws a single value uniformly from [0, total) and walks the cumulative
    weights. Zero-weight entries are never picked while any weight is
    positive. When every weight is zero the choice falls back to uniform
    over all entries, so generation keeps moving once every budget is spent.

    Raises:
        GenerationDefectError: If choices is empty.
        ValueError: If any weight is negative or non-finite.
    """
    if not choices:
        raise GenerationDefectError("frequency() requires at least one choice")
    for weight, _ in choices:
        _validate_weight(weight)

    total = sum(weight for weight, _ in choices)
    if total <= 0:
        logger.debug("zero_total_weight_fallback", choices=len(choices))
        return pick(choices, rng)[1]

    roll = rng.random() * total
    threshold = 0.0
    last_positive: T | None = None
    for weight, value in choices:
        if weight <= 0:
            continue
        threshold += weight
        last_positive = value
        if roll < threshold:
            return value

    # Rounding can leave roll == threshold after the final entry
    assert last_positive is not None
    return last_positive


@dataclass(frozen=True, slots=True)
class WeightedEntry[T]:
    """A named generator and its current weight."""

    name: str
    weight: float
    generator: Callable[[random.Random], T]


class WeightedDispatcher[T]:
    """Pick one generator proportionally to its weight and invoke it.

    Usage:
        dispatcher = WeightedDispatcher([
            WeightedEntry("a", 5.0, make_a),
            WeightedEntry("b", 0.0, make_b),
        ])
        value = dispatcher.dispatch(rng)   # always make_a(rng)
    """

    def __init__(self, entries: Sequence[WeightedEntry[T]]) -> None:
        if not entries:
            raise GenerationDefectError("WeightedDispatcher requires at least one entry")
        for entry in entries:
            _validate_weight(entry.weight)
        self._entries = tuple(entries)

    @property
    def entries(self) -> tuple[WeightedEntry[T], ...]:
        return self._entries

    @property
    def total_weight(self) -> float:
        return sum(e.weight for e in self._entries)

    def choose(self, rng: random.Random) -> WeightedEntry[T]:
        """Select an entry without invoking it."""
        return frequency([(e.weight, e) for e in self._entries], rng)

    def dispatch(self, rng: random.Random) -> T:
        """Select an entry and invoke its generator with the same stream."""
        entry = self.choose(rng)
        logger.debug("generator_selected", generator=entry.name, weight=entry.weight, total=self.total_weight)
        return entry.generator(rng)
