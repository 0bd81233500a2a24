# tests/conftest.py
"""Shared test fixtures and Hypothesis configuration.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
import random

import pytest
from hypothesis import Phase, Verbosity, settings

from querysim.contracts.schema import Table
from querysim.core.logging import configure_logging
from querysim.runner.env import SimulatorEnv
from querysim.testing import make_env, make_table

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))

configure_logging(level="WARNING")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def rng() -> random.Random:
    """A seeded random stream; tests stay reproducible."""
    return random.Random(1234)


@pytest.fixture
def table() -> Table:
    """The default (id INTEGER, name TEXT) table named t."""
    return make_table()


@pytest.fixture
def env(table: Table) -> SimulatorEnv:
    """Environment with table t and a 50/50 read/write budget of 10."""
    return make_env([table])
