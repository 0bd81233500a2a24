# src/querysim/contracts/query.py
"""Queries and predicates.

These types answer: "What does the script ask the engine to do?"

Everything here is plain, immutable data. A Predicate is a small tree
rather than a closure, so it can be evaluated outside the query that
created it (filler filtering, the in-memory engine) and persisted in a
corpus for replay.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from querysim.contracts.enums import PredicateKind, QueryCategory, QueryKind
from querysim.contracts.errors import CorpusFormatError, GenerationDefectError
from querysim.contracts.schema import (
    Row,
    Table,
    Value,
    decode_row,
    decode_value,
    encode_row,
    encode_value,
    value_to_sql,
)

_LEAF_KINDS = frozenset({PredicateKind.EQ, PredicateKind.NEQ, PredicateKind.GT, PredicateKind.LT})
_COMPOSITE_KINDS = frozenset({PredicateKind.AND, PredicateKind.OR})
_SQL_OPERATORS = {
    PredicateKind.EQ: "=",
    PredicateKind.NEQ: "!=",
    PredicateKind.GT: ">",
    PredicateKind.LT: "<",
}


def compare_values(left: Value, right: Value) -> int | None:
    """Three-way compare two values with SQL-like typing.

    Returns:
        -1, 0 or 1, or None when the values are not comparable
        (either side NULL, or different storage classes other than
        int/float which compare numerically).
    """
    if left is None or right is None:
        return None
    numeric = (int, float)
    if isinstance(left, numeric) and isinstance(right, numeric):
        pass
    elif type(left) is not type(right):
        return None
    if left < right:  # type: ignore[operator]
        return -1
    if left > right:  # type: ignore[operator]
        return 1
    return 0


@dataclass(frozen=True, slots=True)
class Predicate:
    """A boolean test over (row, table).

    Use the factory methods to create instances.

    Invariants (enforced by __post_init__):
    - Leaf comparisons (EQ/NEQ/GT/LT) have a column and no children
    - AND/OR have no column and at least one child
    - TRUE/FALSE carry nothing
    """

    kind: PredicateKind
    column: str | None = None
    value: Value = None
    children: tuple[Predicate, ...] = ()

    def __post_init__(self) -> None:
        if self.kind in _LEAF_KINDS:
            if not self.column:
                raise ValueError(f"{self.kind.value.upper()} predicate requires a column")
            if self.children:
                raise ValueError(f"{self.kind.value.upper()} predicate must not have children")
        elif self.kind in _COMPOSITE_KINDS:
            if self.column is not None or self.value is not None:
                raise ValueError(f"{self.kind.value.upper()} predicate must not have a column or value")
            if not self.children:
                raise ValueError(f"{self.kind.value.upper()} predicate requires at least one child")
        elif self.column is not None or self.value is not None or self.children:
            raise ValueError(f"{self.kind.value.upper()} predicate must not carry a payload")

    @classmethod
    def true_(cls) -> Predicate:
        return cls(kind=PredicateKind.TRUE)

    @classmethod
    def false_(cls) -> Predicate:
        return cls(kind=PredicateKind.FALSE)

    @classmethod
    def eq(cls, column: str, value: Value) -> Predicate:
        return cls(kind=PredicateKind.EQ, column=column, value=value)

    @classmethod
    def neq(cls, column: str, value: Value) -> Predicate:
        return cls(kind=PredicateKind.NEQ, column=column, value=value)

    @classmethod
    def gt(cls, column: str, value: Value) -> Predicate:
        return cls(kind=PredicateKind.GT, column=column, value=value)

    @classmethod
    def lt(cls, column: str, value: Value) -> Predicate:
        return cls(kind=PredicateKind.LT, column=column, value=value)

    @classmethod
    def and_(cls, children: Sequence[Predicate]) -> Predicate:
        return cls(kind=PredicateKind.AND, children=tuple(children))

    @classmethod
    def or_(cls, children: Sequence[Predicate]) -> Predicate:
        return cls(kind=PredicateKind.OR, children=tuple(children))

    def test(self, row: Row, table: Table) -> bool:
        """Evaluate the predicate against a row of the given table.

        NULL never satisfies a comparison, and values of different storage
        classes never compare (numeric int/float excepted).

        Raises:
            KeyError: If a leaf references a column the table lacks.
        """
        match self.kind:
            case PredicateKind.TRUE:
                return True
            case PredicateKind.FALSE:
                return False
            case PredicateKind.AND:
                return all(child.test(row, table) for child in self.children)
            case PredicateKind.OR:
                return any(child.test(row, table) for child in self.children)

        assert self.column is not None
        cmp = compare_values(row[table.column_index(self.column)], self.value)
        if cmp is None:
            return False
        match self.kind:
            case PredicateKind.EQ:
                return cmp == 0
            case PredicateKind.NEQ:
                return cmp != 0
            case PredicateKind.GT:
                return cmp > 0
            case PredicateKind.LT:
                return cmp < 0
        raise AssertionError(f"Unhandled predicate kind: {self.kind}")

    def __str__(self) -> str:
        match self.kind:
            case PredicateKind.TRUE:
                return "TRUE"
            case PredicateKind.FALSE:
                return "FALSE"
            case PredicateKind.AND | PredicateKind.OR:
                joiner = f" {self.kind.value.upper()} "
                return "(" + joiner.join(str(c) for c in self.children) + ")"
        return f"{self.column} {_SQL_OPERATORS[self.kind]} {value_to_sql(self.value)}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value}
        if self.kind in _LEAF_KINDS:
            data["column"] = self.column
            data["value"] = encode_value(self.value)
        elif self.kind in _COMPOSITE_KINDS:
            data["children"] = [c.to_dict() for c in self.children]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Predicate:
        if not isinstance(data, dict) or "kind" not in data:
            raise CorpusFormatError(f"Malformed predicate: {data!r}")
        try:
            kind = PredicateKind(data["kind"])
            if kind in _LEAF_KINDS:
                return cls(kind=kind, column=data["column"], value=decode_value(data["value"]))
            if kind in _COMPOSITE_KINDS:
                return cls(kind=kind, children=tuple(cls.from_dict(c) for c in data["children"]))
            return cls(kind=kind)
        except (KeyError, ValueError, TypeError) as e:
            raise CorpusFormatError(f"Malformed predicate: {data!r}") from e


# =============================================================================
# Query variants
# =============================================================================


@dataclass(frozen=True, slots=True)
class Insert:
    """INSERT INTO <table> VALUES (...), (...).

    An insert with zero rows is a construction-time defect.
    """

    kind: ClassVar[QueryKind] = QueryKind.INSERT
    category: ClassVar[QueryCategory] = QueryCategory.WRITE

    table: str
    values: tuple[Row, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise GenerationDefectError(f"Insert into {self.table} must have at least 1 row")

    @property
    def table_name(self) -> str:
        return self.table

    def __str__(self) -> str:
        rows = ", ".join("(" + ", ".join(value_to_sql(v) for v in row) + ")" for row in self.values)
        return f"INSERT INTO {self.table} VALUES {rows};"


@dataclass(frozen=True, slots=True)
class Select:
    """SELECT * FROM <table> WHERE <predicate>."""

    kind: ClassVar[QueryKind] = QueryKind.SELECT
    category: ClassVar[QueryCategory] = QueryCategory.READ

    table: str
    predicate: Predicate

    @property
    def table_name(self) -> str:
        return self.table

    def __str__(self) -> str:
        return f"SELECT * FROM {self.table} WHERE {self.predicate};"


@dataclass(frozen=True, slots=True)
class Create:
    """CREATE TABLE <table> (...).

    Holds the full schema so a replayed script recreates the same table.
    """

    kind: ClassVar[QueryKind] = QueryKind.CREATE
    category: ClassVar[QueryCategory] = QueryCategory.CREATE

    table: Table

    @property
    def table_name(self) -> str:
        return self.table.name

    def __str__(self) -> str:
        return f"{self.table.to_sql()};"


@dataclass(frozen=True, slots=True)
class Delete:
    """DELETE FROM <table> WHERE <predicate>."""

    kind: ClassVar[QueryKind] = QueryKind.DELETE
    category: ClassVar[QueryCategory] = QueryCategory.WRITE

    table: str
    predicate: Predicate

    @property
    def table_name(self) -> str:
        return self.table

    def __str__(self) -> str:
        return f"DELETE FROM {self.table} WHERE {self.predicate};"


type Query = Insert | Select | Create | Delete


def query_to_dict(query: Query) -> dict[str, Any]:
    """Convert a query to a JSON-serializable dict tagged by kind."""
    match query:
        case Insert(table=table, values=values):
            return {"kind": QueryKind.INSERT.value, "table": table, "values": [encode_row(r) for r in values]}
        case Select(table=table, predicate=predicate):
            return {"kind": QueryKind.SELECT.value, "table": table, "predicate": predicate.to_dict()}
        case Create(table=table):
            return {"kind": QueryKind.CREATE.value, "table": table.to_dict()}
        case Delete(table=table, predicate=predicate):
            return {"kind": QueryKind.DELETE.value, "table": table, "predicate": predicate.to_dict()}
    raise TypeError(f"Not a query: {query!r}")


def query_from_dict(data: Any) -> Query:
    """Rebuild a query from query_to_dict() output.

    Raises:
        CorpusFormatError: If the dict is malformed or has an unknown kind.
    """
    if not isinstance(data, dict) or "kind" not in data:
        raise CorpusFormatError(f"Malformed query: {data!r}")
    try:
        kind = QueryKind(data["kind"])
    except ValueError as e:
        raise CorpusFormatError(f"Unknown query kind: {data['kind']!r}") from e
    try:
        match kind:
            case QueryKind.INSERT:
                return Insert(table=data["table"], values=tuple(decode_row(r) for r in data["values"]))
            case QueryKind.SELECT:
                return Select(table=data["table"], predicate=Predicate.from_dict(data["predicate"]))
            case QueryKind.CREATE:
                return Create(table=Table.from_dict(data["table"]))
            case QueryKind.DELETE:
                return Delete(table=data["table"], predicate=Predicate.from_dict(data["predicate"]))
    except (KeyError, TypeError, ValueError) as e:
        raise CorpusFormatError(f"Malformed {kind.value} query: {data!r}") from e
    except GenerationDefectError as e:
        raise CorpusFormatError(str(e)) from e
    raise AssertionError(f"Unhandled query kind: {kind}")
