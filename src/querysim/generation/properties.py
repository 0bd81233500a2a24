# src/querysim/generation/properties.py
"""Properties: checkable invariants of database behavior.

A Property holds only plain data (queries, indices), so it can be written
to a corpus and replayed. interactions() compiles it into the script the
driver runs. Compilation is a pure function of the stored fields:
identical fields always yield an identical interaction list.

Insert-Select
    INSERT INTO <t> VALUES (...)
    I_0 ... I_n
    SELECT * FROM <t> WHERE <predicate>
  The inserted row must appear in the select's result. Filler queries
  I_k never delete that row and never re-create <t>.

Double-Create-Failure
    CREATE TABLE <t> (...)
    I_0 ... I_n
    CREATE TABLE <t> (...)  -> error
  The second create must fail with "Table <t> already exists". Filler
  queries never create <t>.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Any, ClassVar

from querysim.contracts.enums import PropertyKind, QueryCategory
from querysim.contracts.errors import CorpusFormatError, GenerationDefectError
from querysim.contracts.plan import (
    Interaction,
    LastResultErrorContains,
    RowInLastResult,
    TableAbsent,
    TableExists,
)
from querysim.contracts.query import Create, Insert, Query, Select, query_from_dict, query_to_dict
from querysim.contracts.schema import Row
from querysim.core.canonical import canonical_json, stable_hash


def already_exists_message(table: str) -> str:
    """Error text an engine reports when creating a duplicate table."""
    return f"Table {table} already exists"


class Property(ABC):
    """Base class for property variants.

    Variants are frozen dataclasses registered in _PROPERTY_TYPES by kind.
    """

    kind: ClassVar[PropertyKind]
    display_name: ClassVar[str]

    @property
    def name(self) -> str:
        return self.display_name

    @abstractmethod
    def interactions(self) -> list[Interaction]:
        """Compile into an ordered, executable interaction script."""

    @abstractmethod
    def _fields_to_dict(self) -> dict[str, Any]: ...

    @abstractmethod
    def queries(self) -> list[Query]:
        """The queries the compiled script executes, in order."""

    def query_counts(self) -> dict[QueryCategory, int]:
        """Executed queries per workload category."""
        counts = Counter(q.category for q in self.queries())
        return {category: counts[category] for category in QueryCategory}

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict tagged by kind."""
        return {"kind": self.kind.value, **self._fields_to_dict()}

    def to_json(self) -> str:
        """Canonical JSON; identical properties give identical text."""
        return canonical_json(self.to_dict())

    def fingerprint(self) -> str:
        """Stable content hash, usable as a corpus key."""
        return stable_hash(self.to_dict())

    @staticmethod
    def from_dict(data: Any) -> Property:
        """Rebuild a property from to_dict() output.

        Raises:
            CorpusFormatError: On unknown kind or malformed fields.
        """
        if not isinstance(data, dict) or "kind" not in data:
            raise CorpusFormatError(f"Malformed property: {data!r}")
        try:
            kind = PropertyKind(data["kind"])
        except ValueError as e:
            raise CorpusFormatError(f"Unknown property kind: {data['kind']!r}") from e
        return _PROPERTY_TYPES[kind]._from_fields(data)

    @staticmethod
    def from_json(text: str) -> Property:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorpusFormatError(f"Invalid JSON: {e}") from e
        return Property.from_dict(data)


@dataclass(frozen=True, slots=True)
class InsertSelect(Property):
    """A row inserted into a table is found by a select matching it.

    Invariants (enforced by __post_init__):
    - 0 <= row_index < len(insert.values)
    - select targets the same table as insert
    """

    kind: ClassVar[PropertyKind] = PropertyKind.INSERT_SELECT
    display_name: ClassVar[str] = "Insert-Select"

    insert: Insert
    row_index: int
    queries_between: tuple[Query, ...]
    select: Select

    def __post_init__(self) -> None:
        if not 0 <= self.row_index < len(self.insert.values):
            raise GenerationDefectError(
                f"row_index {self.row_index} out of range for insert with {len(self.insert.values)} rows"
            )
        if self.select.table != self.insert.table:
            raise GenerationDefectError(
                f"select targets {self.select.table!r} but insert targets {self.insert.table!r}"
            )

    @property
    def row(self) -> Row:
        """The inserted row the select must find."""
        return self.insert.values[self.row_index]

    def queries(self) -> list[Query]:
        return [self.insert, *self.queries_between, self.select]

    def interactions(self) -> list[Interaction]:
        table = self.insert.table
        return [
            Interaction.assumption(TableExists(table=table)),
            Interaction.of_query(self.insert),
            *(Interaction.of_query(q) for q in self.queries_between),
            Interaction.of_query(self.select),
            Interaction.assertion(RowInLastResult(table=table, row=self.row)),
        ]

    def _fields_to_dict(self) -> dict[str, Any]:
        return {
            "insert": query_to_dict(self.insert),
            "row_index": self.row_index,
            "queries": [query_to_dict(q) for q in self.queries_between],
            "select": query_to_dict(self.select),
        }

    @classmethod
    def _from_fields(cls, data: dict[str, Any]) -> InsertSelect:
        try:
            insert = query_from_dict(data["insert"])
            select = query_from_dict(data["select"])
            queries = tuple(query_from_dict(q) for q in data["queries"])
            row_index = data["row_index"]
        except (KeyError, TypeError) as e:
            raise CorpusFormatError(f"Malformed Insert-Select property: {data!r}") from e
        if not isinstance(insert, Insert) or not isinstance(select, Select):
            raise CorpusFormatError("Insert-Select requires an insert and a select query")
        if not isinstance(row_index, int) or isinstance(row_index, bool):
            raise CorpusFormatError(f"row_index must be an integer, got {row_index!r}")
        try:
            return cls(insert=insert, row_index=row_index, queries_between=queries, select=select)
        except GenerationDefectError as e:
            raise CorpusFormatError(str(e)) from e


@dataclass(frozen=True, slots=True)
class DoubleCreateFailure(Property):
    """Creating a table whose name already exists fails."""

    kind: ClassVar[PropertyKind] = PropertyKind.DOUBLE_CREATE_FAILURE
    display_name: ClassVar[str] = "Double-Create-Failure"

    create: Create
    queries_between: tuple[Query, ...]

    def queries(self) -> list[Query]:
        return [self.create, *self.queries_between, self.create]

    def interactions(self) -> list[Interaction]:
        table = self.create.table_name
        return [
            Interaction.assumption(TableAbsent(table=table)),
            Interaction.of_query(self.create),
            *(Interaction.of_query(q) for q in self.queries_between),
            Interaction.of_query(self.create),
            Interaction.assertion(LastResultErrorContains(table=table, substring=already_exists_message(table))),
        ]

    def _fields_to_dict(self) -> dict[str, Any]:
        return {
            "create": query_to_dict(self.create),
            "queries": [query_to_dict(q) for q in self.queries_between],
        }

    @classmethod
    def _from_fields(cls, data: dict[str, Any]) -> DoubleCreateFailure:
        try:
            create = query_from_dict(data["create"])
            queries = tuple(query_from_dict(q) for q in data["queries"])
        except (KeyError, TypeError) as e:
            raise CorpusFormatError(f"Malformed Double-Create-Failure property: {data!r}") from e
        if not isinstance(create, Create):
            raise CorpusFormatError("Double-Create-Failure requires a create query")
        return cls(create=create, queries_between=queries)


_PROPERTY_TYPES: dict[PropertyKind, type[InsertSelect] | type[DoubleCreateFailure]] = {
    PropertyKind.INSERT_SELECT: InsertSelect,
    PropertyKind.DOUBLE_CREATE_FAILURE: DoubleCreateFailure,
}
