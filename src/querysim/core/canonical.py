# src/querysim/core/canonical.py
"""
Canonical JSON serialization for corpus files.

Properties are persisted as RFC 8785 (JCS) canonical JSON via the rfc8785
package, so an identical property always serializes to identical bytes.
That keeps corpus files diffable and lets stable_hash() identify a
property across runs.

NaN and Infinity are rejected: they have no canonical JSON form.
"""

from __future__ import annotations

import hashlib
import math
from typing import Any

import rfc8785


def _check_finite(obj: Any) -> None:
    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise ValueError(f"Cannot canonicalize non-finite float: {obj}")
    elif isinstance(obj, dict):
        for value in obj.values():
            _check_finite(value)
    elif isinstance(obj, list | tuple):
        for value in obj:
            _check_finite(value)


def canonical_json(obj: Any) -> str:
    """Serialize a JSON-safe object to canonical JSON text.

    Raises:
        ValueError: If obj contains NaN or Infinity.
    """
    _check_finite(obj)
    return rfc8785.dumps(obj).decode("utf-8")


def stable_hash(obj: Any) -> str:
    """SHA-256 hex digest of the canonical JSON form."""
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()
