# src/querysim/cli.py
"""CLI for querysim.

Usage:
    # Simulate against the in-memory engine and keep the corpus
    querysim run --preset=balanced --seed=7 --corpus=run7.jsonl

    # Plan properties without executing them
    querysim generate --seed=7 --count=50 --output=planned.jsonl

    # Re-execute a recorded corpus with the seed it was recorded under
    querysim replay run7.jsonl --preset=balanced --seed=7

    # List bundled presets
    querysim presets
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from pydantic import ValidationError

from querysim.config import SimulatorOptions, list_presets, load_config
from querysim.contracts.errors import CorpusFormatError
from querysim.core.corpus import read_corpus, write_corpus
from querysim.core.logging import configure_logging
from querysim.runner.simulation import SimulationReport, SimulationRunner, plan_corpus
from querysim.testing.memory_engine import MemoryEngine

app = typer.Typer(
    name="querysim",
    help="querysim: Randomized property generation for database simulation.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from querysim import __version__

        typer.echo(f"querysim {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
    ] = "WARNING",
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit logs as JSON."),
    ] = False,
) -> None:
    """querysim: Randomized property generation for database simulation."""
    try:
        configure_logging(json_output=json_logs, level=log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e


PresetOption = Annotated[
    str | None,
    typer.Option(
        "--preset",
        "-p",
        help="Preset configuration to use. Use 'querysim presets' to list available presets.",
    ),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to YAML configuration file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
SeedOption = Annotated[
    int | None,
    typer.Option("--seed", "-s", help="Seed for the random stream.", min=0),
]


def _load_options(
    preset: str | None,
    config_file: Path | None,
    overrides: dict[str, Any],
) -> SimulatorOptions:
    try:
        return load_config(preset=preset, config_file=config_file, cli_overrides=overrides)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    except ValidationError as e:
        typer.secho(f"Invalid configuration:\n{e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    except (ValueError, yaml.YAMLError) as e:
        typer.secho(f"Invalid configuration file: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e


def _print_report(report: SimulationReport) -> None:
    typer.echo(f"seed: {report.seed}")
    typer.echo(f"properties: {report.properties_run}")
    for status, count in report.counts.items():
        typer.echo(f"  {status.value}: {count}")
    stats = report.stats
    typer.echo(f"queries: read={stats.read_count} write={stats.write_count} create={stats.create_count}")
    for failure in report.failures:
        typer.secho(
            f"{failure.outcome.status.value.upper()} {failure.property.name}: {failure.outcome.message}",
            fg=typer.colors.RED,
            err=True,
        )
        for interaction in failure.property.interactions():
            typer.echo(f"    {interaction}", err=True)


@app.command()
def run(
    preset: PresetOption = None,
    config_file: ConfigOption = None,
    seed: SeedOption = None,
    max_interactions: Annotated[
        int | None,
        typer.Option("--max-interactions", help="Total query budget.", min=0),
    ] = None,
    max_properties: Annotated[
        int | None,
        typer.Option("--max-properties", help="Upper bound on properties executed.", min=1),
    ] = None,
    corpus: Annotated[
        Path | None,
        typer.Option("--corpus", help="Write every executed property to this JSONL file."),
    ] = None,
) -> None:
    """Generate and execute properties against the in-memory engine."""
    opts = _load_options(
        preset,
        config_file,
        {"seed": seed, "max_interactions": max_interactions, "max_properties": max_properties},
    )
    report = SimulationRunner(opts, MemoryEngine()).run()
    if corpus is not None:
        write_corpus(corpus, report.corpus)
    _print_report(report)
    if not report.ok:
        raise typer.Exit(1)


@app.command()
def generate(
    preset: PresetOption = None,
    config_file: ConfigOption = None,
    seed: SeedOption = None,
    count: Annotated[
        int,
        typer.Option("--count", "-n", help="Number of properties to generate.", min=1),
    ] = 10,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write JSONL here instead of stdout."),
    ] = None,
) -> None:
    """Generate properties without executing them and emit them as JSONL."""
    opts = _load_options(preset, config_file, {"seed": seed})
    properties = plan_corpus(opts, count)
    if output is not None:
        written = write_corpus(output, properties)
        typer.echo(f"Wrote {written} properties to {output}")
        return
    for prop in properties:
        typer.echo(prop.to_json())


@app.command()
def replay(
    corpus: Annotated[
        Path,
        typer.Argument(help="JSONL corpus to replay.", exists=True, dir_okay=False, resolve_path=True),
    ],
    preset: PresetOption = None,
    config_file: ConfigOption = None,
    seed: SeedOption = None,
) -> None:
    """Recompile and execute a recorded corpus against a fresh in-memory engine."""
    opts = _load_options(preset, config_file, {"seed": seed})
    try:
        properties = read_corpus(corpus)
    except CorpusFormatError as e:
        typer.secho(f"Error: {corpus}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    report = SimulationRunner(opts, MemoryEngine()).replay(properties)
    _print_report(report)
    if not report.ok:
        raise typer.Exit(1)


@app.command()
def presets() -> None:
    """List available presets."""
    for name in list_presets():
        typer.echo(name)


def main() -> None:
    """Entry point for querysim CLI."""
    app()


if __name__ == "__main__":
    main()
