"""Kinds and categories used across subsystem boundaries.

Values are persisted in corpus files, so renaming a member is a
format change.
"""

from enum import StrEnum


class ColumnType(StrEnum):
    """Storage class of a table column."""

    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BLOB = "blob"


class QueryKind(StrEnum):
    """Discriminator for the Query variants."""

    INSERT = "insert"
    SELECT = "select"
    CREATE = "create"
    DELETE = "delete"


class QueryCategory(StrEnum):
    """Workload category a query is counted against.

    The budget tracker steers generation toward a target mix of these.
    """

    READ = "read"
    WRITE = "write"
    CREATE = "create"


class PredicateKind(StrEnum):
    """Node kinds in a predicate tree."""

    TRUE = "true"
    FALSE = "false"
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    AND = "and"
    OR = "or"


class InteractionKind(StrEnum):
    """Step kinds in a compiled interaction script."""

    QUERY = "query"
    ASSUMPTION = "assumption"
    ASSERTION = "assertion"


class PropertyKind(StrEnum):
    """Testable invariants.

    Stored in corpus files (property.kind).
    """

    INSERT_SELECT = "insert_select"
    DOUBLE_CREATE_FAILURE = "double_create_failure"


class ExecutionStatus(StrEnum):
    """Outcome of executing one compiled property against an engine.

    DISCARDED means an assumption did not hold, so the instance was not
    applicable and is not a failure. ERRORED means the oracle itself broke.
    """

    PASSED = "passed"
    FAILED = "failed"
    ERRORED = "errored"
    DISCARDED = "discarded"
