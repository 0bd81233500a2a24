# src/querysim/config.py
"""Simulator options and their loading.

Uses Pydantic for validation with frozen (immutable) models.
Configuration precedence: CLI > YAML file > preset > defaults.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class SimulatorOptions(BaseModel):
    """Workload targets and limits for one simulation session.

    The read/write/create percentages describe the target mix of executed
    queries. They steer property selection; they never hard-cap it.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    seed: int = Field(
        default=0,
        ge=0,
        description="Seed for the random stream threaded through generation",
    )
    max_interactions: int = Field(
        default=1000,
        ge=0,
        description="Total query budget for the session",
    )
    read_percent: float = Field(
        default=60.0,
        ge=0.0,
        le=100.0,
        description="Target share of SELECT queries (0-100)",
    )
    write_percent: float = Field(
        default=35.0,
        ge=0.0,
        le=100.0,
        description="Target share of INSERT/DELETE queries (0-100)",
    )
    create_percent: float = Field(
        default=5.0,
        ge=0.0,
        le=100.0,
        description="Target share of CREATE TABLE queries (0-100)",
    )
    max_tables: int = Field(
        default=3,
        ge=1,
        description="Number of tables created before property generation starts",
    )
    max_properties: int = Field(
        default=200,
        ge=1,
        description="Upper bound on properties executed by the runner",
    )
    preset_name: str | None = Field(
        default=None,
        description="Preset this configuration was built from (informational)",
    )

    @model_validator(mode="after")
    def validate_percent_total(self) -> "SimulatorOptions":
        """Ensure the category targets do not exceed 100% combined."""
        total = self.read_percent + self.write_percent + self.create_percent
        if total > 100.0:
            raise ValueError(f"read_percent + write_percent + create_percent must be <= 100, got {total}")
        return self


# === Preset Loading ===

_PRESETS_DIR = Path(__file__).parent / "presets"


def _read_mapping(path: Path, what: str) -> dict[str, Any]:
    """Read a YAML file that must hold a flat options mapping (empty file -> {})."""
    with path.open() as f:
        loaded = yaml.safe_load(f)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{what} must be a YAML mapping, got {type(loaded).__name__}")
    return loaded


def list_presets() -> list[str]:
    """Bundled preset names, sorted."""
    if not _PRESETS_DIR.exists():
        return []
    return sorted(p.stem for p in _PRESETS_DIR.glob("*.yaml"))


def load_preset(preset_name: str) -> dict[str, Any]:
    """Raw option values of a bundled preset.

    Raises:
        FileNotFoundError: If no preset has that name.
        ValueError: If the preset is not a YAML mapping.
    """
    preset_path = _PRESETS_DIR / f"{preset_name}.yaml"
    if not preset_path.exists():
        raise FileNotFoundError(f"Preset '{preset_name}' not found. Available presets: {list_presets()}")
    return _read_mapping(preset_path, f"Preset '{preset_name}'")


def load_config(
    *,
    preset: str | None = None,
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> SimulatorOptions:
    """Build SimulatorOptions from layered sources.

    Precedence (highest to lowest):
    1. cli_overrides - flags given on the command line (None means "not given")
    2. config_file - user's YAML file
    3. preset - bundled preset
    4. defaults - SimulatorOptions field defaults

    Options are flat, so each layer simply replaces the keys it sets.

    Raises:
        FileNotFoundError: If preset or config_file not found.
        ValueError: If a YAML source is not a mapping.
        pydantic.ValidationError: If the merged options are invalid.
    """
    values: dict[str, Any] = {}
    if preset is not None:
        values.update(load_preset(preset))
    if config_file is not None:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        values.update(_read_mapping(config_file, f"Config file {config_file}"))
    if cli_overrides is not None:
        values.update({k: v for k, v in cli_overrides.items() if v is not None})
    values["preset_name"] = preset
    return SimulatorOptions(**values)
