"""Exception hierarchy for querysim.

Three failure families are kept apart so reporting can tell them apart:

- GenerationDefectError: an upstream contract was violated while building a
  property (empty insert, out-of-range row index, no tables). Fatal.
- SimulationOracleError: an assertion found data it cannot judge, e.g. an
  error result where a success was required. The oracle broke, not the
  invariant.
- CorpusFormatError: a persisted property could not be decoded.

Query failures are NOT exceptions. They are ordinary ResultSet values that
assertions inspect.
"""


class QuerysimError(Exception):
    """Base class for all querysim errors."""


class GenerationDefectError(QuerysimError):
    """Raised when property generation hits a programming-logic violation.

    This is never a property failure. It means a provider or caller broke
    its contract and generation must abort.
    """


class SimulationOracleError(QuerysimError):
    """Raised by an assertion that cannot evaluate its inputs.

    Carries the message of the underlying engine error when there is one.
    """

    def __init__(self, message: str, *, engine_error: str | None = None) -> None:
        super().__init__(message)
        self.engine_error = engine_error


class CorpusFormatError(QuerysimError):
    """Raised when a serialized property or corpus line is malformed."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line
