# src/querysim/core/corpus.py
"""Corpus files: one canonical-JSON property per line (JSONL).

Corpora hold properties, never interactions. Replaying a corpus recompiles
each property, which yields the identical script it produced when it was
recorded.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from querysim.contracts.errors import CorpusFormatError
from querysim.generation.properties import Property


def write_corpus(path: Path, properties: Iterable[Property]) -> int:
    """Write properties to a JSONL file, replacing it.

    Returns:
        Number of properties written.
    """
    count = 0
    with path.open("w", encoding="utf-8") as f:
        for prop in properties:
            f.write(prop.to_json())
            f.write("\n")
            count += 1
    return count


def read_corpus(path: Path) -> list[Property]:
    """Read every property from a JSONL corpus file.

    Blank lines are skipped.

    Raises:
        FileNotFoundError: If the file does not exist.
        CorpusFormatError: If any line is malformed (line number included).
    """
    properties: list[Property] = []
    with path.open(encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            text = line.strip()
            if not text:
                continue
            try:
                properties.append(Property.from_json(text))
            except CorpusFormatError as e:
                raise CorpusFormatError(str(e), line=line_no) from e
    return properties
