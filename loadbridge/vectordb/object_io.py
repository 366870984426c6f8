# loadbridge/vectordb/object_io.py
# SPDX-License-Identifier: Apache-2.0
"""
Single-object insert and fetch: request building and response flattening.

Both operations return plain dicts shaped like:

    {"id": str, "properties": {...}, "vector"?: [float], "vectors"?: {name: [float]}}

Insert adds `tenant` when one was given; fetch adds `additional` with the
requested metadata under its REST names.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from weaviate.classes.config import ConsistencyLevel
from weaviate.classes.query import MetadataQuery

from loadbridge.vectordb.bridge_base import BadRequest, TypeMismatch, resolve_consistency_level
from loadbridge.vectordb.coercion import (
    get_mapping,
    get_string,
    is_sequence,
    to_float32_list,
    to_int,
    to_named_float32_lists,
    to_string_list,
)

logger = logging.getLogger(__name__)

DEFAULT_VECTOR_NAME = "default"

# Additional property name (REST or snake_case) -> MetadataQuery field.
ADDITIONAL_METADATA = {
    "creationTimeUnix": "creation_time",
    "creation_time": "creation_time",
    "lastUpdateTimeUnix": "last_update_time",
    "last_update_time": "last_update_time",
    "distance": "distance",
    "certainty": "certainty",
    "score": "score",
    "explainScore": "explain_score",
    "explain_score": "explain_score",
    "isConsistent": "is_consistent",
    "is_consistent": "is_consistent",
}

# MetadataQuery field -> REST name used in responses.
_REST_NAMES = {
    "creation_time": "creationTimeUnix",
    "last_update_time": "lastUpdateTimeUnix",
    "distance": "distance",
    "certainty": "certainty",
    "score": "score",
    "explain_score": "explainScore",
    "is_consistent": "isConsistent",
}


# =============================================================================
# Insert
# =============================================================================


@dataclass(frozen=True)
class InsertRequest:
    """
    Attributes:
        collection: Target collection
        uuid: Optional object id
        properties: Property values, passed through
        vector: Single vector narrowed to float32
        vectors: Named vectors narrowed to float32
        tenant: Tenant name ("" for none)
        consistency_level: Resolved level, None when not requested
    """
    collection: str
    uuid: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    vector: Optional[List[float]] = None
    vectors: Optional[Dict[str, List[float]]] = None
    tenant: str = ""
    consistency_level: Optional[ConsistencyLevel] = None

    def native_vector(self) -> Any:
        if self.vectors:
            merged: Dict[str, Any] = dict(self.vectors)
            if self.vector:
                merged.setdefault(DEFAULT_VECTOR_NAME, self.vector)
            return merged
        return self.vector


def build_insert_request(collection: str, obj: Mapping[str, Any]) -> InsertRequest:
    """
    Raises:
        BadRequest: consistencyLevel is present but not one of all/one/quorum
        TypeMismatch: a vector element is not a number
    """
    vector: Optional[List[float]] = None
    if is_sequence(obj.get("vector")):
        vector = to_float32_list(obj["vector"], field="vector")

    vectors: Optional[Dict[str, List[float]]] = None
    named = get_mapping(obj, "vectors")
    if named is not None:
        vectors = to_named_float32_lists(named, field="vectors")

    return InsertRequest(
        collection=collection,
        uuid=get_string(obj, "id") or None,
        properties=dict(get_mapping(obj, "properties") or {}),
        vector=vector,
        vectors=vectors,
        tenant=get_string(obj, "tenant"),
        consistency_level=resolve_consistency_level(
            get_string(obj, "consistencyLevel"), strict=True, op="object_insert"
        ),
    )


def flatten_insert(request: InsertRequest, uuid: Any) -> Dict[str, Any]:
    """The insert call only returns the id; everything else echoes the request."""
    result: Dict[str, Any] = {
        "id": str(uuid),
        "properties": dict(request.properties),
    }
    if request.vector:
        result["vector"] = list(request.vector)
    if request.vectors:
        result["vectors"] = {name: list(vec) for name, vec in request.vectors.items()}
    if request.tenant:
        result["tenant"] = request.tenant
    return result


# =============================================================================
# Fetch
# =============================================================================


@dataclass(frozen=True)
class FetchOptions:
    """
    Attributes:
        uuid: Fetch exactly this object
        limit: Page size
        offset: Number of objects to skip
        after: Cursor (id of the last object of the previous page)
        consistency_level: Resolved level, None when absent or unknown
        tenant: Tenant name ("" for none)
        node_name: Requested node (not routable through the client library)
        include_vector: True when "vector" was among the additional properties
        metadata: MetadataQuery fields requested
    """
    uuid: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    after: Optional[str] = None
    consistency_level: Optional[ConsistencyLevel] = None
    tenant: str = ""
    node_name: str = ""
    include_vector: bool = False
    metadata: List[str] = field(default_factory=list)

    def metadata_query(self) -> Optional[MetadataQuery]:
        if not self.metadata:
            return None
        return MetadataQuery(**{name: True for name in self.metadata})


def _optional_int(options: Mapping[str, Any], key: str) -> Optional[int]:
    if key not in options:
        return None
    value, found = to_int(options[key])
    if not found:
        logger.debug("fetch_objects: ignoring %s=%r", key, options[key])
        return None
    return value


def _additional(value: Any) -> List[str]:
    if value is None:
        return []
    names = to_string_list(value, field="additional")
    if names is None:
        raise TypeMismatch(
            f"additional must be a list of strings, got {type(value).__name__}",
            details={"field": "additional"},
        )
    return names


def build_fetch_options(options: Optional[Mapping[str, Any]] = None) -> FetchOptions:
    """
    Raises:
        BadRequest: an additional property that cannot be requested
        TypeMismatch: `additional` holds a non-string element
    """
    opts: Mapping[str, Any] = options or {}

    include_vector = False
    metadata: List[str] = []
    for name in _additional(opts.get("additional")):
        if name == "vector":
            include_vector = True
        elif name == "id":
            continue
        elif name in ADDITIONAL_METADATA:
            mapped = ADDITIONAL_METADATA[name]
            if mapped not in metadata:
                metadata.append(mapped)
        else:
            raise BadRequest(
                f"unsupported additional property: {name}",
                details={"field": "additional", "allowed": sorted(set(_REST_NAMES.values()) | {"id", "vector"})},
            )

    node_name = get_string(opts, "nodeName")
    if node_name:
        logger.warning("fetch_objects: nodeName %r cannot be routed by the client library; ignored", node_name)

    return FetchOptions(
        uuid=get_string(opts, "id") or None,
        limit=_optional_int(opts, "limit"),
        offset=_optional_int(opts, "offset"),
        after=get_string(opts, "after") or None,
        consistency_level=resolve_consistency_level(
            get_string(opts, "consistencyLevel"), strict=False, op="fetch_objects"
        ),
        tenant=get_string(opts, "tenant"),
        node_name=node_name,
        include_vector=include_vector,
        metadata=metadata,
    )


def _metadata_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    return value


def _flatten_vectors(item: Dict[str, Any], vector: Any) -> None:
    if not vector:
        return
    if isinstance(vector, Mapping):
        if set(vector) == {DEFAULT_VECTOR_NAME}:
            item["vector"] = list(vector[DEFAULT_VECTOR_NAME])
        else:
            item["vectors"] = {str(name): list(vec) for name, vec in vector.items()}
    else:
        item["vector"] = list(vector)


def flatten_object(obj: Any) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "id": str(obj.uuid),
        "properties": dict(obj.properties or {}),
    }
    _flatten_vectors(item, getattr(obj, "vector", None))

    metadata = getattr(obj, "metadata", None)
    if metadata is not None:
        additional = {
            rest: _metadata_value(getattr(metadata, attr, None))
            for attr, rest in _REST_NAMES.items()
            if getattr(metadata, attr, None) is not None
        }
        if additional:
            item["additional"] = additional
    return item


def flatten_fetch(objects: List[Any]) -> Dict[str, Any]:
    return {"objects": [flatten_object(obj) for obj in objects]}


__all__ = [
    "ADDITIONAL_METADATA",
    "InsertRequest",
    "FetchOptions",
    "build_insert_request",
    "flatten_insert",
    "build_fetch_options",
    "flatten_object",
    "flatten_fetch",
]
