# loadbridge/vectordb/batch_marshaller.py
# SPDX-License-Identifier: Apache-2.0
"""
Batch create marshalling.

`build_batch_objects` validates every entry before anything is submitted;
one entry without `class` fails the whole batch. `flatten_batch_results`
turns what the batcher reports back into one entry per input object, in
input order:

    {"class": <collection>, "id": <uuid>, "status": "success"}
    {"class": <collection>, "id": <uuid>, "status": "error", "error": <message>}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from loadbridge.vectordb.bridge_base import ConfigError, TypeMismatch
from loadbridge.vectordb.coercion import (
    get_mapping,
    get_string,
    is_number,
    is_sequence,
    to_float32_list,
    to_named_float32_lists,
)

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "SUCCESS"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class BatchObjectRequest:
    """
    One object of a batch create.

    Attributes:
        index: Position in the caller's list
        collection: Target collection (the mapping's `class`)
        uuid: Optional object id; generated by the library when None
        properties: Property values, passed through
        vector: Single unnamed vector
        vectors: Named vectors; take precedence over `vector`
        vector_weights: Per-vector weights as supplied
        tenant: Optional tenant name ("" for none)
    """
    index: int
    collection: str
    uuid: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    vector: Optional[List[float]] = None
    vectors: Optional[Dict[str, List[float]]] = None
    vector_weights: Optional[Dict[str, float]] = None
    tenant: str = ""

    def native_vector(self) -> Any:
        """Vector argument for the batcher: the named map if any, else the single vector."""
        if self.vectors:
            return self.vectors
        return self.vector


def result_status(status: str, error: Optional[str]) -> str:
    """Lower-cased library status, forced to "error" when an error is attached."""
    if error:
        return STATUS_ERROR
    return status.lower()


def _vector_weights(raw: Mapping[str, Any], index: int) -> Dict[str, float]:
    weights: Dict[str, float] = {}
    for name, weight in raw.items():
        if not is_number(weight):
            raise TypeMismatch(
                f"objects[{index}].vectorWeights.{name} must be a number",
                details={"field": "vectorWeights", "index": index},
            )
        weights[str(name)] = float(weight)
    return weights


def _build_one(index: int, obj: Any) -> BatchObjectRequest:
    if not isinstance(obj, Mapping):
        raise ConfigError(
            f"object at index {index} is not a mapping",
            details={"field": "objects", "index": index},
        )

    collection = get_string(obj, "class")
    if not collection:
        raise ConfigError(
            f"object at index {index} missing class name",
            details={"field": "class", "index": index},
        )

    vectors: Optional[Dict[str, List[float]]] = None
    vector: Optional[List[float]] = None
    named = get_mapping(obj, "vectors")
    if named is not None:
        vectors = to_named_float32_lists(named, field=f"objects[{index}].vectors")
    elif is_sequence(obj.get("vector")):
        vector = to_float32_list(obj["vector"], field=f"objects[{index}].vector")

    weights_raw = get_mapping(obj, "vectorWeights")

    return BatchObjectRequest(
        index=index,
        collection=collection,
        uuid=get_string(obj, "id") or None,
        properties=dict(get_mapping(obj, "properties") or {}),
        vector=vector,
        vectors=vectors,
        vector_weights=_vector_weights(weights_raw, index) if weights_raw is not None else None,
        tenant=get_string(obj, "tenant"),
    )


def build_batch_objects(objects: Sequence[Mapping[str, Any]]) -> List[BatchObjectRequest]:
    """
    Validate and convert every object mapping.

    Raises:
        ConfigError: an entry is not a mapping or has no `class`; the message
            names the offending index and nothing is returned for the others
        TypeMismatch: a vector holds a non-numeric element
    """
    if not is_sequence(objects):
        raise TypeMismatch(
            f"objects must be a list, got {type(objects).__name__}",
            details={"field": "objects"},
        )
    requests = [_build_one(i, obj) for i, obj in enumerate(objects)]
    for req in requests:
        if req.vector_weights:
            logger.warning(
                "objects[%d]: vectorWeights are not supported by the batch API and were dropped",
                req.index,
            )
    return requests


def collect_failures(failed_objects: Iterable[Any]) -> Dict[str, str]:
    """uuid -> error message, from the batcher's failed-object list."""
    failures: Dict[str, str] = {}
    for failed in failed_objects or ():
        batch_object = getattr(failed, "object_", None)
        uuid = getattr(batch_object, "uuid", None)
        if uuid is None:
            logger.debug("failed batch object without uuid: %r", failed)
            continue
        failures[str(uuid)] = str(getattr(failed, "message", "") or "unknown error")
    return failures


def flatten_batch_results(
    requests: Sequence[BatchObjectRequest],
    uuids: Sequence[Any],
    failures: Mapping[str, str],
) -> List[Dict[str, Any]]:
    """
    One result entry per submitted object, in submission order.

    `uuids[i]` is the id the batcher assigned to `requests[i]`.
    """
    results: List[Dict[str, Any]] = []
    for req, uuid in zip(requests, uuids):
        object_id = str(uuid)
        error = failures.get(object_id)
        entry: Dict[str, Any] = {
            "class": req.collection,
            "id": object_id,
            "status": result_status(STATUS_SUCCESS, error),
        }
        if error:
            entry["error"] = error
        results.append(entry)
    return results


__all__ = [
    "BatchObjectRequest",
    "result_status",
    "build_batch_objects",
    "collect_failures",
    "flatten_batch_results",
]
