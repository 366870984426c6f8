# SPDX-License-Identifier: Apache-2.0
"""
Batch delete: where clause decoding, native filter construction, summary.
"""

from types import SimpleNamespace

import pytest
from weaviate.classes.config import ConsistencyLevel

from loadbridge.vectordb.bridge_base import BadRequest, ConfigError, NotSupported, TypeMismatch
from loadbridge.vectordb.filter_builder import (
    FilterSpec,
    build_delete_request,
    build_filter_spec,
    flatten_delete,
    to_weaviate_filter,
)


def _operator(native_filter):
    op = native_filter.operator
    return getattr(op, "value", op)


def test_full_options():
    """Verify every option is decoded into the request."""
    request = build_delete_request(
        "Article",
        {
            "where": {"operator": "Equal", "path": ["title"], "valueString": "x"},
            "dryRun": True,
            "output": "verbose",
            "tenant": "t1",
            "consistencyLevel": "quorum",
        },
    )
    assert request.where == FilterSpec(operator="Equal", path=["title"], value_string="x")
    assert request.dry_run is True
    assert request.verbose is True
    assert request.tenant == "t1"
    assert request.consistency_level is ConsistencyLevel.QUORUM


def test_unknown_operator_is_dropped_without_error(caplog):
    """Verify an unrecognized operator leaves the filter without an operator."""
    spec = build_filter_spec({"operator": "GreaterThanish", "path": ["title"], "valueString": "x"})
    assert spec.operator is None
    assert spec.path == ["title"]
    assert "GreaterThanish" in caplog.text


def test_unknown_consistency_level_is_ignored():
    """Verify delete degrades an unknown consistency level instead of failing."""
    request = build_delete_request("Article", {"consistencyLevel": "most"})
    assert request.consistency_level is None


def test_value_text_list_and_scalar():
    """Verify valueText accepts a list or a single string."""
    assert build_filter_spec({"valueText": ["a", "b"]}).value_text == ["a", "b"]
    assert build_filter_spec({"valueText": "a"}).value_text == "a"
    with pytest.raises(TypeMismatch):
        build_filter_spec({"valueText": ["a", 2]})


def test_path_elements_must_be_strings():
    """Verify a non-string path segment aborts the build."""
    with pytest.raises(TypeMismatch):
        build_filter_spec({"path": ["title", 0]})


def test_equal_filter():
    """Verify Equal on a property builds a property filter."""
    native = to_weaviate_filter(FilterSpec(operator="Equal", path=["title"], value_string="x"))
    assert native.target == "title"
    assert native.value == "x"
    assert _operator(native) == "Equal"


def test_like_and_less_than_filters():
    """Verify Like and LessThan map to their native operators."""
    like = to_weaviate_filter(FilterSpec(operator="Like", path=["title"], value_text="foo*"))
    assert _operator(like) == "Like"
    less = to_weaviate_filter(FilterSpec(operator="LessThan", path=["title"], value_string="m"))
    assert _operator(less) == "LessThan"


def test_contains_any_wraps_scalar():
    """Verify ContainsAny always receives a list."""
    native = to_weaviate_filter(FilterSpec(operator="ContainsAny", path=["tags"], value_text="a"))
    assert list(native.value) == ["a"]
    assert _operator(native) == "ContainsAny"


def test_missing_operator_cannot_be_submitted():
    """Verify a filter without operator is rejected at submission time."""
    with pytest.raises(NotSupported):
        to_weaviate_filter(FilterSpec(path=["title"], value_string="x"))


def test_missing_path_or_value():
    """Verify path and value are required to build a native filter."""
    with pytest.raises(ConfigError):
        to_weaviate_filter(FilterSpec(operator="Equal", value_string="x"))
    with pytest.raises(ConfigError):
        to_weaviate_filter(FilterSpec(operator="Equal", path=["title"]))


def test_multi_value_for_scalar_operator():
    """Verify Equal rejects more than one value."""
    with pytest.raises(BadRequest):
        to_weaviate_filter(FilterSpec(operator="Equal", path=["title"], value_text=["a", "b"]))


def test_id_path_rejects_like():
    """Verify the id path only supports Equal and ContainsAny."""
    with pytest.raises(NotSupported):
        to_weaviate_filter(FilterSpec(operator="Like", path=["id"], value_string="x"))


def test_flatten_minimal_response():
    """Verify counts are reported and objects omitted when not returned."""
    response = SimpleNamespace(matches=3, successful=3, failed=0, objects=None)
    assert flatten_delete(response) == {"matches": 3, "successful": 3, "failed": 0}


def test_flatten_verbose_response_statuses():
    """Verify per-object statuses are lower-cased and errors force "error"."""
    response = SimpleNamespace(
        matches=3,
        successful=1,
        failed=1,
        objects=[
            SimpleNamespace(uuid="id-1", successful=True, error=None),
            SimpleNamespace(uuid="id-2", successful=False, error="locked"),
            SimpleNamespace(uuid="id-3", successful=False, error=None),
        ],
    )
    assert flatten_delete(response)["objects"] == [
        {"id": "id-1", "status": "success"},
        {"id": "id-2", "status": "error", "error": "locked"},
        {"id": "id-3", "status": "failed"},
    ]


def test_flatten_dry_run_statuses():
    """Verify unsuccessful objects without errors report dryrun in a dry run."""
    response = SimpleNamespace(
        matches=1, successful=0, failed=0,
        objects=[SimpleNamespace(uuid="id-1", successful=False, error=None)],
    )
    assert flatten_delete(response, dry_run=True)["objects"] == [{"id": "id-1", "status": "dryrun"}]
