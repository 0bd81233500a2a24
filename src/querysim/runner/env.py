# src/querysim/runner/env.py
"""Simulator environment: the tables known to exist plus session options.

Generation only reads the environment. The driver mirrors successful
CREATE TABLE queries into it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from querysim.config import SimulatorOptions
from querysim.contracts.schema import Table


@dataclass
class SimulatorEnv:
    """Tables plus options for one simulation session."""

    opts: SimulatorOptions
    tables: list[Table] = field(default_factory=list)

    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def has_table(self, name: str) -> bool:
        return any(t.name == name for t in self.tables)

    def get_table(self, name: str) -> Table:
        """Look up a table by name.

        Raises:
            KeyError: If no such table exists.
        """
        for table in self.tables:
            if table.name == name:
                return table
        raise KeyError(f"No table named {name!r}")
