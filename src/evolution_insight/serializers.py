"""Deterministic JSON for analysis results.

Two runs over the same input must serialize byte-for-byte identically, so
sets are sorted, mapping keys are sorted, and ``(file, function)`` keys are
flattened to ``"file::function"``.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def _key(key: Any) -> str:
    if isinstance(key, tuple):
        return "::".join(str(part) for part in key)
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


def to_jsonable(obj: Any) -> Any:
    """Convert dataclasses, enums, sets and mappings into plain JSON values."""
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, float):
        # NaN/inf have no JSON form
        return obj if math.isfinite(obj) else None
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Mapping):
        return {_key(k): to_jsonable(v) for k, v in sorted(obj.items(), key=lambda kv: _key(kv[0]))}
    if isinstance(obj, (set, frozenset)):
        return sorted((to_jsonable(v) for v in obj), key=lambda v: json.dumps(v, sort_keys=True))
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


def dumps(obj: Any, indent: int = 2) -> str:
    return json.dumps(to_jsonable(obj), indent=indent, sort_keys=True, ensure_ascii=False)
