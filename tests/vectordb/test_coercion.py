# SPDX-License-Identifier: Apache-2.0
"""
Coercion helpers: lenient single-field extraction, strict sequence conversion.
"""

from decimal import Decimal
from fractions import Fraction

import numpy as np
import pytest

from loadbridge.vectordb.bridge_base import TypeMismatch
from loadbridge.vectordb.coercion import (
    get_bool,
    get_string,
    is_number,
    to_float32_list,
    to_int,
    to_named_float32_lists,
    to_string_list,
)


def test_get_string_degrades_to_empty():
    """Verify non-string and absent values both read as an empty string."""
    m = {"a": "x", "b": 3, "c": None, "d": ""}
    assert get_string(m, "a") == "x"
    assert get_string(m, "b") == ""
    assert get_string(m, "c") == ""
    assert get_string(m, "d") == ""
    assert get_string(m, "missing") == ""


def test_get_bool_uses_default_for_non_bool():
    """Verify only real booleans are read; 1/"true" fall back to the default."""
    m = {"t": True, "f": False, "one": 1, "s": "true"}
    assert get_bool(m, "t", False) is True
    assert get_bool(m, "f", True) is False
    assert get_bool(m, "one", False) is False
    assert get_bool(m, "s", True) is True
    assert get_bool(m, "missing", True) is True


@pytest.mark.parametrize(
    "value,expected",
    [
        (5, 5),
        (-3, -3),
        (2.9, 2),
        (-2.9, -2),
        ("42", 42),
        ("+7", 7),
        ("-7", -7),
        (np.int64(9), 9),
        (np.float32(4.5), 4),
        (Decimal("12.7"), 12),
        (Fraction(7, 2), 3),
    ],
)
def test_to_int_accepts_common_representations(value, expected):
    """Verify every supported numeric encoding normalizes to an int."""
    assert to_int(value) == (expected, True)


@pytest.mark.parametrize(
    "value",
    [True, False, "4.5", "abc", "", None, [1], float("nan"), float("inf"), "4\n", " 4", "4 "],
)
def test_to_int_reports_not_found(value):
    """Verify unsupported values are reported as not found instead of raising."""
    assert to_int(value)[1] is False


def test_is_number_excludes_bool():
    """Verify a bool is never treated as a number."""
    assert is_number(1)
    assert is_number(1.5)
    assert is_number(np.float64(1.0))
    assert not is_number(True)
    assert not is_number("1")


def test_to_string_list_converts_lists_and_tuples():
    """Verify list and tuple inputs convert; non-sequences return None."""
    assert to_string_list(["a", "b"], field="f") == ["a", "b"]
    assert to_string_list(("a",), field="f") == ["a"]
    assert to_string_list("ab", field="f") is None
    assert to_string_list(None, field="f") is None


def test_to_string_list_fails_on_first_non_string():
    """Verify one non-string element aborts the whole conversion."""
    with pytest.raises(TypeMismatch) as exc_info:
        to_string_list(["a", 1, "b"], field="additional")

    err = exc_info.value
    assert err.code == "TYPE_MISMATCH"
    assert err.details == {"field": "additional", "index": 1}


def test_to_float32_list_narrows_precision():
    """Verify values are narrowed to single precision and returned as floats."""
    result = to_float32_list([0.1, 1, np.float64(0.3)], field="vector")
    assert result == [float(np.float32(0.1)), 1.0, float(np.float32(0.3))]
    assert all(isinstance(x, float) for x in result)


def test_to_float32_list_accepts_ndarray():
    """Verify numpy arrays are accepted as vectors."""
    assert to_float32_list(np.array([1.0, 2.0]), field="vector") == [1.0, 2.0]


@pytest.mark.parametrize("value", [[0.1, "0.2"], [0.1, True], [None]])
def test_to_float32_list_rejects_non_numeric_elements(value):
    """Verify a non-numeric element raises TypeMismatch."""
    with pytest.raises(TypeMismatch):
        to_float32_list(value, field="vector")


def test_to_float32_list_rejects_non_sequence():
    """Verify a scalar cannot stand in for a vector."""
    with pytest.raises(TypeMismatch):
        to_float32_list(0.5, field="vector")


def test_to_named_float32_lists_converts_each_vector():
    """Verify every named vector is converted and errors name the vector."""
    assert to_named_float32_lists({"title": [1, 2]}, field="vectors") == {"title": [1.0, 2.0]}

    with pytest.raises(TypeMismatch) as exc_info:
        to_named_float32_lists({"title": [1, "x"]}, field="vectors")
    assert exc_info.value.details["field"] == "vectors.title"
