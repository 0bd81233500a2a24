# src/querysim/core/logging.py
"""Structured logging for querysim.

Every module logs through get_logger(__name__). configure_logging() routes
both structlog and stdlib records through one ProcessorFormatter, so
output is uniform (console or JSON lines) and always goes to stderr:
stdout is reserved for corpus JSONL.

A simulation session binds its seed with session_context(), so each event
emitted while the session runs can be traced back to the seed that
reproduces it.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _level_number(level: str) -> int:
    levels = logging.getLevelNamesMapping()
    try:
        return levels[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level {level!r}; expected one of DEBUG, INFO, WARNING, ERROR") from None


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "WARNING",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Args:
        json_output: Emit one JSON object per event instead of console lines.
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        stream: Destination; defaults to the current sys.stderr.

    Raises:
        ValueError: If level is not a known level name.
    """
    log_level = _level_number(level)

    final_processors: list[Any] = [ProcessorFormatter.remove_processors_meta]
    if json_output:
        final_processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        # ConsoleRenderer formats exceptions itself
        final_processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration must reach loggers created at import time
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=final_processors,
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Bound logger for a module (pass __name__)."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


@contextmanager
def session_context(seed: int) -> Iterator[None]:
    """Attach the session seed to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(seed=seed):
        yield
