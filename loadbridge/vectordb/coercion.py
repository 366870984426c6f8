# loadbridge/vectordb/coercion.py
# SPDX-License-Identifier: Apache-2.0
"""
Typed extraction from untyped configuration mappings.

Two strictness levels live side by side here:

- Single-field extractors (`get_string`, `get_bool`, `to_int`, ...) never
  raise. A value of the wrong type degrades to the documented fallback.
- Sequence converters (`to_string_list`, `to_float32_list`) are strict. One
  element of the wrong type aborts the whole conversion with TypeMismatch.

Python representations accepted for the JSON-like input:
    strings   -> str
    booleans  -> bool only (a bool is never read as a number)
    numbers   -> any numbers.Real except bool (int, float, numpy scalars, Fraction, ...)
    sequences -> list / tuple (never str or bytes)
    mappings  -> any collections.abc.Mapping
"""

from __future__ import annotations

import math
import numbers
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from loadbridge.vectordb.bridge_base import TypeMismatch

_DECIMAL_INT_RE = re.compile(r"[+-]?[0-9]+")


def is_sequence(value: Any) -> bool:
    """True for list/tuple values; strings and bytes are scalars here."""
    return isinstance(value, (list, tuple))


def is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def get_string(m: Mapping[str, Any], key: str) -> str:
    """
    Return m[key] if it is a string, else "".

    An absent key and a present-but-empty string are indistinguishable.
    """
    value = m.get(key)
    if isinstance(value, str):
        return value
    return ""


def get_bool(m: Mapping[str, Any], key: str, default: bool) -> bool:
    value = m.get(key)
    if isinstance(value, bool):
        return value
    return default


def get_mapping(m: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = m.get(key)
    if isinstance(value, Mapping):
        return value
    return None


def get_sequence(m: Mapping[str, Any], key: str) -> Optional[Sequence[Any]]:
    value = m.get(key)
    if is_sequence(value):
        return value
    return None


def to_int(value: Any) -> Tuple[int, bool]:
    """
    Normalize any common integer encoding to an int.

    Tried in order: native int, float (truncated toward zero), decimal
    string, then any other numbers.Integral / numbers.Number (numpy scalars,
    Decimal, Fraction). Returns (value, found); callers skip the field
    when found is False.
    """
    if isinstance(value, bool):
        return 0, False
    if isinstance(value, int):
        return value, True
    if isinstance(value, float):
        if math.isfinite(value):
            return int(value), True
        return 0, False
    if isinstance(value, str):
        if _DECIMAL_INT_RE.fullmatch(value):
            return int(value), True
        return 0, False
    if isinstance(value, numbers.Integral):
        return int(value), True
    if isinstance(value, numbers.Number):
        try:
            as_float = float(value)
        except (TypeError, ValueError, OverflowError):
            return 0, False
        if math.isfinite(as_float):
            return int(as_float), True
    return 0, False


def to_float(value: Any) -> Optional[float]:
    """Float for any non-bool real number, else None."""
    if is_number(value):
        return float(value)
    return None


def to_string_list(value: Any, *, field: str) -> Optional[List[str]]:
    """
    Convert a generic sequence into a list of strings.

    Returns None when `value` is not a sequence at all. Raises TypeMismatch
    at the first element that is not a string.
    """
    if not is_sequence(value):
        return None
    result: List[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, str):
            raise TypeMismatch(
                f"{field}[{index}] must be a string, got {type(item).__name__}",
                details={"field": field, "index": index},
            )
        result.append(item)
    return result


def to_float32_list(value: Any, *, field: str) -> List[float]:
    """
    Convert a numeric sequence into single-precision floats.

    Values are narrowed to float32 and returned as Python floats so the
    result serializes like any other list. Raises TypeMismatch when `value`
    is not a sequence or holds a non-numeric element.
    """
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if not is_sequence(value):
        raise TypeMismatch(
            f"{field} must be a list of numbers, got {type(value).__name__}",
            details={"field": field},
        )
    for index, item in enumerate(value):
        if not is_number(item):
            raise TypeMismatch(
                f"{field}[{index}] must be a number, got {type(item).__name__}",
                details={"field": field, "index": index},
            )
    return np.asarray(value, dtype=np.float32).tolist()


def to_named_float32_lists(value: Any, *, field: str) -> Dict[str, List[float]]:
    """Convert a name -> numeric sequence mapping, element-wise like to_float32_list."""
    if not isinstance(value, Mapping):
        raise TypeMismatch(
            f"{field} must be a mapping of name to vector, got {type(value).__name__}",
            details={"field": field},
        )
    return {
        str(name): to_float32_list(vec, field=f"{field}.{name}")
        for name, vec in value.items()
    }


__all__ = [
    "is_sequence",
    "is_number",
    "get_string",
    "get_bool",
    "get_mapping",
    "get_sequence",
    "to_int",
    "to_float",
    "to_string_list",
    "to_float32_list",
    "to_named_float32_lists",
]
