"""Deterministic serialisation and hashing of nested data."""

import hashlib
import json
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel


def _to_plain(value: Any) -> Any:
    """Reduce models, sets, tuples and dates to JSON-friendly values."""
    if isinstance(value, BaseModel):
        return _to_plain(value.model_dump(mode="python"))
    if isinstance(value, dict):
        return {str(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    if isinstance(value, (set, frozenset)):
        # Sets have no order; sort their canonical forms instead.
        return sorted((_to_plain(v) for v in value), key=stable_stringify)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def stable_stringify(value: Any) -> str:
    """
    Serialise `value` to compact JSON with object keys sorted at every level.

    Two structurally equal values always produce the same string, whatever
    the insertion order of their dictionaries.
    """
    return json.dumps(
        _to_plain(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def stable_hash(value: Any) -> str:
    """SHA-256 hex digest of `stable_stringify(value)`."""
    return hashlib.sha256(stable_stringify(value).encode("utf-8")).hexdigest()
