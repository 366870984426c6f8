# loadbridge/vectordb/filter_builder.py
# SPDX-License-Identifier: Apache-2.0
"""
Batch delete: options mapping -> DeleteRequest -> native filter, and the
delete summary back to a plain dict.

Options
-------
where             {operator, path, valueString | valueText}
dryRun            bool
output            "minimal" (default) or "verbose"
tenant            tenant name
consistencyLevel  "all" | "one" | "quorum"; anything else is logged and ignored

An operator outside the supported set is dropped while building the request.
The resulting filter has no operator and cannot be submitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from weaviate.classes.config import ConsistencyLevel
from weaviate.classes.query import Filter

from loadbridge.vectordb.batch_marshaller import result_status
from loadbridge.vectordb.bridge_base import (
    BadRequest,
    ConfigError,
    NotSupported,
    resolve_consistency_level,
)
from loadbridge.vectordb.coercion import get_bool, get_mapping, get_string, to_string_list

logger = logging.getLogger(__name__)

OPERATORS = ("Equal", "Like", "ContainsAny", "LessThan")
ID_PATH = ["id"]

OUTPUT_MINIMAL = "minimal"
OUTPUT_VERBOSE = "verbose"


@dataclass(frozen=True)
class FilterSpec:
    """
    Declarative where clause.

    Attributes:
        operator: One of OPERATORS, or None when absent/unrecognized
        path: Property path segments
        value_string: valueString, if given
        value_text: valueText as a scalar or a list, if given
    """
    operator: Optional[str] = None
    path: Optional[List[str]] = None
    value_string: Optional[str] = None
    value_text: Optional[Union[str, List[str]]] = None

    def value(self) -> Optional[Union[str, List[str]]]:
        if self.value_text is not None:
            return self.value_text
        return self.value_string


@dataclass(frozen=True)
class DeleteRequest:
    collection: str
    where: Optional[FilterSpec] = None
    dry_run: bool = False
    output: str = ""
    tenant: str = ""
    consistency_level: Optional[ConsistencyLevel] = None

    @property
    def verbose(self) -> bool:
        return self.output.lower() == OUTPUT_VERBOSE


def build_filter_spec(where: Mapping[str, Any]) -> FilterSpec:
    operator: Optional[str] = get_string(where, "operator") or None
    if operator is not None and operator not in OPERATORS:
        logger.warning("dropping unsupported where operator %r (supported: %s)", operator, ", ".join(OPERATORS))
        operator = None

    value_text: Optional[Union[str, List[str]]] = None
    raw_text = where.get("valueText")
    if isinstance(raw_text, str):
        value_text = raw_text
    else:
        value_text = to_string_list(raw_text, field="where.valueText")

    return FilterSpec(
        operator=operator,
        path=to_string_list(where.get("path"), field="where.path"),
        value_string=where["valueString"] if isinstance(where.get("valueString"), str) else None,
        value_text=value_text,
    )


def build_delete_request(collection: str, options: Optional[Mapping[str, Any]] = None) -> DeleteRequest:
    opts: Mapping[str, Any] = options or {}

    where_raw = get_mapping(opts, "where")
    output = get_string(opts, "output")
    if output and output.lower() not in (OUTPUT_MINIMAL, OUTPUT_VERBOSE):
        logger.warning("unknown batch delete output %r; using %s", output, OUTPUT_MINIMAL)

    return DeleteRequest(
        collection=collection,
        where=build_filter_spec(where_raw) if where_raw is not None else None,
        dry_run=get_bool(opts, "dryRun", False),
        output=output,
        tenant=get_string(opts, "tenant"),
        consistency_level=resolve_consistency_level(
            get_string(opts, "consistencyLevel"), strict=False, op="batch_delete"
        ),
    )


def _scalar(value: Union[str, List[str]], operator: str) -> str:
    if isinstance(value, str):
        return value
    if len(value) == 1:
        return value[0]
    raise BadRequest(
        f"operator {operator} takes a single value, got {len(value)}",
        details={"operator": operator},
    )


def to_weaviate_filter(spec: FilterSpec) -> Any:
    """
    Build the native filter for a FilterSpec.

    Raises:
        NotSupported: no recognized operator, or an operator the id path lacks
        ConfigError: missing path or value
    """
    if spec.operator is None:
        raise NotSupported("where filter has no supported operator", details={"supported": list(OPERATORS)})
    if not spec.path:
        raise ConfigError("where filter requires a path", details={"field": "where.path"})
    value = spec.value()
    if value is None:
        raise ConfigError("where filter requires valueString or valueText", details={"field": "where"})

    if spec.path == ID_PATH:
        target = Filter.by_id()
        if spec.operator == "Equal":
            return target.equal(_scalar(value, spec.operator))
        if spec.operator == "ContainsAny":
            return target.contains_any([value] if isinstance(value, str) else value)
        raise NotSupported(f"operator {spec.operator} is not supported on the id path")

    if len(spec.path) == 1:
        target = Filter.by_property(spec.path[0])
    else:
        # [reference, TargetClass, property]
        target = Filter.by_ref(spec.path[0]).by_property(spec.path[-1])

    if spec.operator == "ContainsAny":
        return target.contains_any([value] if isinstance(value, str) else value)
    scalar = _scalar(value, spec.operator)
    if spec.operator == "Equal":
        return target.equal(scalar)
    if spec.operator == "Like":
        return target.like(scalar)
    return target.less_than(scalar)


def _object_status(obj: Any, dry_run: bool) -> str:
    if getattr(obj, "successful", False):
        return "SUCCESS"
    if dry_run and not getattr(obj, "error", None):
        return "DRYRUN"
    return "FAILED"


def flatten_delete(response: Any, *, dry_run: bool = False) -> Dict[str, Any]:
    """
    Summary of a delete_many response:

        {"matches": n, "successful": n, "failed": n, "objects": [{id, status, error?}]}

    `objects` is present only when the library returned per-object results.
    """
    out: Dict[str, Any] = {
        "matches": response.matches,
        "successful": response.successful,
        "failed": response.failed,
    }
    objects = getattr(response, "objects", None)
    if objects is not None:
        flat: List[Dict[str, Any]] = []
        for obj in objects:
            error = getattr(obj, "error", None)
            entry: Dict[str, Any] = {
                "id": str(obj.uuid),
                "status": result_status(_object_status(obj, dry_run), error),
            }
            if error:
                entry["error"] = error
            flat.append(entry)
        out["objects"] = flat
    return out


__all__ = [
    "OPERATORS",
    "FilterSpec",
    "DeleteRequest",
    "build_filter_spec",
    "build_delete_request",
    "to_weaviate_filter",
    "flatten_delete",
]
