# src/querysim/contracts/schema.py
"""Table schemas, values and rows.

Schemas are owned by the simulator environment. Generated queries hold
their own copies (table names, or a full Table for CREATE), never
references into mutable state.

Values are plain Python objects:
- INTEGER -> int
- FLOAT   -> float (finite)
- TEXT    -> str
- BLOB    -> bytes
- NULL    -> None

For persistence each value is encoded as a tagged object so bytes and
floats survive a JSON round trip unchanged.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from querysim.contracts.enums import ColumnType
from querysim.contracts.errors import CorpusFormatError

type Value = int | float | str | bytes | None
type Row = tuple[Value, ...]


def value_type_name(value: Value) -> str:
    """Return the storage class name of a value ("null" for None)."""
    if value is None:
        return "null"
    # bool is an int subclass; it is never a generated value
    if isinstance(value, bool):
        raise TypeError(f"bool is not a supported value: {value!r}")
    if isinstance(value, int):
        return ColumnType.INTEGER.value
    if isinstance(value, float):
        return ColumnType.FLOAT.value
    if isinstance(value, str):
        return ColumnType.TEXT.value
    if isinstance(value, bytes):
        return ColumnType.BLOB.value
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def encode_value(value: Value) -> dict[str, Any]:
    """Encode a value as a tagged JSON-safe dict.

    Raises:
        ValueError: If value is a non-finite float.
    """
    kind = value_type_name(value)
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Cannot encode non-finite float: {value}")
    if isinstance(value, bytes):
        return {"type": kind, "value": value.hex()}
    return {"type": kind, "value": value}


def decode_value(data: Any) -> Value:
    """Decode a tagged value produced by encode_value().

    The raw value must already have the tag's JSON type; nothing is coerced.

    Raises:
        CorpusFormatError: On an unknown tag, a mismatched raw type or bad blob hex.
    """
    if not isinstance(data, dict) or "type" not in data or "value" not in data:
        raise CorpusFormatError(f"Malformed value: {data!r}")
    kind = data["type"]
    raw = data["value"]
    match kind:
        case "null" if raw is None:
            return None
        case ColumnType.INTEGER if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        case ColumnType.FLOAT if isinstance(raw, int | float) and not isinstance(raw, bool):
            if not math.isfinite(raw):
                raise CorpusFormatError(f"Non-finite float value: {raw!r}")
            return float(raw)
        case ColumnType.TEXT if isinstance(raw, str):
            return raw
        case ColumnType.BLOB if isinstance(raw, str):
            try:
                return bytes.fromhex(raw)
            except ValueError as e:
                raise CorpusFormatError(f"Invalid blob hex: {raw!r}") from e
        case "null" | ColumnType.INTEGER | ColumnType.FLOAT | ColumnType.TEXT | ColumnType.BLOB:
            raise CorpusFormatError(f"Value {raw!r} does not match type {kind!r}")
    raise CorpusFormatError(f"Unknown value type: {kind!r}")


def value_to_sql(value: Value) -> str:
    """Render a value as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, str):
        escaped = value.replace("'", "''")
        return f"'{escaped}'"
    if isinstance(value, bytes):
        return f"X'{value.hex()}'"
    return repr(value)


def encode_row(row: Row) -> list[dict[str, Any]]:
    return [encode_value(v) for v in row]


def decode_row(data: Any) -> Row:
    if not isinstance(data, list):
        raise CorpusFormatError(f"Row must be a list, got {type(data).__name__}")
    return tuple(decode_value(v) for v in data)


@dataclass(frozen=True, slots=True)
class Column:
    """A single column definition.

    Attributes:
        name: Column name
        column_type: Storage class of values in this column
        primary: Whether the column is the primary key
        unique: Whether the column carries a UNIQUE constraint
    """

    name: str
    column_type: ColumnType
    primary: bool = False
    unique: bool = False

    def to_sql(self) -> str:
        parts = [self.name, self.column_type.value.upper()]
        if self.primary:
            parts.append("PRIMARY KEY")
        elif self.unique:
            parts.append("UNIQUE")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "column_type": self.column_type.value,
            "primary": self.primary,
            "unique": self.unique,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Column:
        try:
            return cls(
                name=data["name"],
                column_type=ColumnType(data["column_type"]),
                primary=data["primary"],
                unique=data["unique"],
            )
        except (KeyError, ValueError, TypeError) as e:
            raise CorpusFormatError(f"Malformed column: {data!r}") from e


@dataclass(frozen=True, slots=True)
class Table:
    """A table schema: name plus ordered columns.

    Invariants (enforced by __post_init__):
    - At least one column
    - Column names are unique
    """

    name: str
    columns: tuple[Column, ...]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Table name must be non-empty")
        if not self.columns:
            raise ValueError(f"Table {self.name} must have at least one column")
        names = [c.name for c in self.columns]
        if len(names) != len(set(names)):
            duplicates = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Table {self.name} has duplicate columns: {duplicates}")

    def column_index(self, column: str) -> int:
        """Position of a column by name.

        Raises:
            KeyError: If the table has no such column.
        """
        for i, c in enumerate(self.columns):
            if c.name == column:
                return i
        raise KeyError(f"Table {self.name} has no column {column!r}")

    def to_sql(self) -> str:
        columns = ", ".join(c.to_sql() for c in self.columns)
        return f"CREATE TABLE {self.name} ({columns})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Table:
        try:
            name = data["name"]
            columns = tuple(Column.from_dict(c) for c in data["columns"])
        except (KeyError, TypeError) as e:
            raise CorpusFormatError(f"Malformed table: {data!r}") from e
        try:
            return cls(name=name, columns=columns)
        except ValueError as e:
            raise CorpusFormatError(str(e)) from e
