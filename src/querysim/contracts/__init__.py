"""Shared data contracts: schemas, queries, predicates and interaction scripts.

These types cross every boundary in querysim (generation, driver, corpus)
and carry no behavior beyond validation, evaluation and serialization.
"""

from querysim.contracts.enums import (
    ColumnType,
    ExecutionStatus,
    InteractionKind,
    PredicateKind,
    PropertyKind,
    QueryCategory,
    QueryKind,
)
from querysim.contracts.errors import (
    CorpusFormatError,
    GenerationDefectError,
    QuerysimError,
    SimulationOracleError,
)
from querysim.contracts.plan import (
    Check,
    Interaction,
    InteractionStats,
    LastResultErrorContains,
    ResultSet,
    RowInLastResult,
    TableAbsent,
    TableExists,
)
from querysim.contracts.query import Create, Delete, Insert, Predicate, Query, Select
from querysim.contracts.schema import Column, Row, Table, Value

__all__ = [
    "Check",
    "Column",
    "ColumnType",
    "CorpusFormatError",
    "Create",
    "Delete",
    "ExecutionStatus",
    "GenerationDefectError",
    "Insert",
    "Interaction",
    "InteractionKind",
    "InteractionStats",
    "LastResultErrorContains",
    "Predicate",
    "PredicateKind",
    "PropertyKind",
    "Query",
    "QueryCategory",
    "QueryKind",
    "QuerysimError",
    "ResultSet",
    "Row",
    "RowInLastResult",
    "Select",
    "SimulationOracleError",
    "Table",
    "TableAbsent",
    "TableExists",
    "Value",
]
