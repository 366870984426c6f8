# loadbridge/vectordb/bridge_base.py
# SPDX-License-Identifier: Apache-2.0
"""
Loadbridge vector database bridge: shared contracts.

Purpose
-------
A load-testing script hands us loosely typed, JSON-like arguments. This module
defines what every other module in `loadbridge.vectordb` agrees on:

- The structured error taxonomy (with stable UPPER_SNAKE_CASE codes)
- The metrics sink used to time each operation
- The consistency-level lookup table shared by delete, insert and fetch paths
- The `BridgeProtocol` surface exposed to the scripting host
- A thin wire handler that converts envelopes <-> the typed API

Wire contract
-------------

    Request:
        {
            "op": "vectordb.<operation>",
            "args": { ... }
        }

    Response (success):
        {
            "ok": true,
            "code": "OK",
            "ms": <float>,
            "result": <object|list|null>
        }

    Response (error):
        {
            "ok": false,
            "code": "<UPPER_SNAKE_CASE>",
            "error": "<ErrorClassName>",
            "message": "<human readable>",
            "details": { ... } | null,
            "ms": <float>
        }

Errors raised by the native client library are never rewritten by the bridge.
They only become `UNAVAILABLE` envelopes at the wire boundary.
"""

from __future__ import annotations

import logging
import time
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from weaviate.classes.config import ConsistencyLevel

BRIDGE_PROTOCOL_VERSION = "1.0.0"
BRIDGE_MODULE_NAME = "vectordb/weaviate"
LOG = logging.getLogger(__name__)

# =============================================================================
# Normalized Errors
# =============================================================================


class BridgeError(Exception):
    """
    Base exception for all errors raised by the bridge itself.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (UPPER_SNAKE_CASE)
        details: Additional context (JSON-serializable, never holds credentials)
    """

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = dict(details or {})

    def asdict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization and logging."""
        return {
            "message": self.message,
            "code": self.code,
            "details": {k: self.details[k] for k in sorted(self.details)},
        }


class BadRequest(BridgeError):
    """Caller supplied an invalid value (unknown enum constant, bad shape)."""

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "BAD_REQUEST")
        super().__init__(message, **kwargs)


class ConfigError(BadRequest):
    """A required configuration field is missing or cannot be resolved."""

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "BAD_CONFIG")
        super().__init__(message, **kwargs)


class TypeMismatch(BadRequest):
    """An element of a generic sequence has the wrong underlying type."""

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "TYPE_MISMATCH")
        super().__init__(message, **kwargs)


class NotSupported(BridgeError):
    """Requested operation or parameter is not supported."""

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "NOT_SUPPORTED")
        super().__init__(message, **kwargs)


# =============================================================================
# Metrics Interface (low-cardinality, never carries tenant names)
# =============================================================================


class MetricsSink(Protocol):
    """
    Protocol for metrics collection implementations.

    Load-test harnesses usually plug their own trend/counter collectors in here.
    """

    def observe(
        self,
        *,
        component: str,
        op: str,
        ms: float,
        ok: bool,
        code: str = "OK",
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Record operation timing and status.
        """
        ...


class NoopMetrics:
    """No-operation metrics sink for testing or when metrics are disabled."""

    def observe(self, **_: Any) -> None: ...


# =============================================================================
# Consistency levels
# =============================================================================

CONSISTENCY_LEVELS: Mapping[str, ConsistencyLevel] = {
    "all": ConsistencyLevel.ALL,
    "one": ConsistencyLevel.ONE,
    "quorum": ConsistencyLevel.QUORUM,
}


def resolve_consistency_level(
    value: str,
    *,
    strict: bool,
    op: str,
) -> Optional[ConsistencyLevel]:
    """
    Map a consistency-level string onto the client library's enum.

    The table keys are "all", "one" and "quorum"; the canonical upper-case
    spellings are accepted too. An empty string means "not requested".

    With `strict=True` an unknown value raises BadRequest. Otherwise it is
    logged and dropped, and the request goes out without a consistency level.
    """
    if not value:
        return None
    level = CONSISTENCY_LEVELS.get(value) or CONSISTENCY_LEVELS.get(value.lower())
    if level is not None:
        return level
    if strict:
        raise BadRequest(
            f"invalid consistency level: {value}",
            details={"op": op, "allowed": sorted(CONSISTENCY_LEVELS)},
        )
    LOG.warning(
        "%s: ignoring unknown consistency level %r (allowed: %s)",
        op,
        value,
        ", ".join(sorted(CONSISTENCY_LEVELS)),
    )
    return None


# =============================================================================
# Stable surface exposed to the scripting host
# =============================================================================


@runtime_checkable
class BridgeProtocol(Protocol):
    """
    One call per scripting-host operation.

    Every argument is an untyped mapping (or a list of them); every return
    value is a plain dict/list structure the host can consume directly.
    """

    def create_collection(self, name: str, config: Optional[Mapping[str, Any]] = None) -> None: ...

    def delete_collection(self, name: str) -> None: ...

    def delete_all_collections(self) -> None: ...

    def create_tenant(self, collection: str, tenants: Sequence[Mapping[str, Any]]) -> None: ...

    def update_tenant(self, collection: str, tenants: Sequence[Mapping[str, Any]]) -> None: ...

    def delete_tenant(self, collection: str, names: Sequence[str]) -> None: ...

    def batch_create(self, objects: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]: ...

    def batch_delete(self, collection: str, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]: ...

    def object_insert(self, collection: str, obj: Mapping[str, Any]) -> Dict[str, Any]: ...

    def fetch_objects(self, collection: str, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]: ...


# =============================================================================
# Wire-Level Helpers (canonical envelopes)
# =============================================================================


def _error_to_wire(e: Exception, ms: float) -> Dict[str, Any]:
    """
    Map BridgeError (or any library/unexpected Exception) to an error envelope.
    """
    if isinstance(e, BridgeError):
        payload = e.asdict()
        return {
            "ok": False,
            "code": payload.get("code") or type(e).__name__.upper(),
            "error": type(e).__name__,
            "message": payload.get("message", ""),
            "details": payload.get("details") or None,
            "ms": ms,
        }
    return {
        "ok": False,
        "code": "UNAVAILABLE",
        "error": type(e).__name__,
        "message": str(e) or "internal error",
        "details": None,
        "ms": ms,
    }


def _success_to_wire(result: Any, ms: float) -> Dict[str, Any]:
    return {
        "ok": True,
        "code": "OK",
        "ms": ms,
        "result": result,
    }


def _require_str(args: Mapping[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value:
        raise BadRequest(f"'{key}' must be provided as a non-empty string")
    return value


def _require_list(args: Mapping[str, Any], key: str) -> List[Any]:
    value = args.get(key)
    if not isinstance(value, (list, tuple)):
        raise BadRequest(f"'{key}' must be provided as a list")
    return list(value)


def _optional_mapping(args: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = args.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise BadRequest(f"'{key}' must be a mapping when provided")
    return value


class WireBridgeHandler:
    """
    Thin wire-level adapter that exposes a BridgeProtocol implementation using
    the canonical JSON envelope contract:

        { "op": "vectordb.fetch_objects", "args": {...} } -> { ... }

    This keeps the bridge transport-agnostic: a scripting engine, an HTTP
    shim or a replay file can all drive it with plain dicts.
    """

    def __init__(self, bridge: BridgeProtocol):
        self._bridge = bridge

    def handle(self, envelope: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Handle a single request envelope and return a response envelope.

        Expects:
            op: "vectordb.<operation>"
            args: { ... } (operation-specific)
        """
        t0 = time.monotonic()
        try:
            op = envelope.get("op")
            if not isinstance(op, str):
                raise BadRequest("missing or invalid 'op'")

            args = envelope.get("args") or {}
            if not isinstance(args, Mapping):
                raise BadRequest("'args' must be a mapping")

            result = self._dispatch(op, args)
            return _success_to_wire(result, (time.monotonic() - t0) * 1000.0)

        except Exception as e:  # noqa: BLE001
            ms = (time.monotonic() - t0) * 1000.0
            LOG.debug("wire envelope failed: %r", e)
            return _error_to_wire(e, ms)

    def _dispatch(self, op: str, args: Mapping[str, Any]) -> Any:
        bridge = self._bridge

        if op == "vectordb.create_collection":
            return bridge.create_collection(_require_str(args, "name"), _optional_mapping(args, "config"))

        if op == "vectordb.delete_collection":
            return bridge.delete_collection(_require_str(args, "name"))

        if op == "vectordb.delete_all_collections":
            return bridge.delete_all_collections()

        if op == "vectordb.create_tenant":
            return bridge.create_tenant(_require_str(args, "collection"), _require_list(args, "tenants"))

        if op == "vectordb.update_tenant":
            return bridge.update_tenant(_require_str(args, "collection"), _require_list(args, "tenants"))

        if op == "vectordb.delete_tenant":
            return bridge.delete_tenant(_require_str(args, "collection"), _require_list(args, "names"))

        if op == "vectordb.batch_create":
            return bridge.batch_create(_require_list(args, "objects"))

        if op == "vectordb.batch_delete":
            return bridge.batch_delete(_require_str(args, "collection"), _optional_mapping(args, "options"))

        if op == "vectordb.object_insert":
            return bridge.object_insert(_require_str(args, "collection"), _optional_mapping(args, "object"))

        if op == "vectordb.fetch_objects":
            return bridge.fetch_objects(_require_str(args, "collection"), _optional_mapping(args, "options"))

        raise NotSupported(f"unknown operation '{op}'")


__all__ = [
    "BRIDGE_PROTOCOL_VERSION",
    "BRIDGE_MODULE_NAME",
    "BridgeError",
    "BadRequest",
    "ConfigError",
    "TypeMismatch",
    "NotSupported",
    "MetricsSink",
    "NoopMetrics",
    "CONSISTENCY_LEVELS",
    "resolve_consistency_level",
    "BridgeProtocol",
    "WireBridgeHandler",
    "_error_to_wire",
    "_success_to_wire",
]
