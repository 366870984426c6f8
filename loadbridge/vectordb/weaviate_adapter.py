# loadbridge/vectordb/weaviate_adapter.py
# SPDX-License-Identifier: Apache-2.0
"""
Weaviate bridge client.

Wraps a `weaviate-client` v4 connection and exposes the BridgeProtocol
surface: every call takes loosely typed mappings, normalizes them through the
builders in this package, makes exactly one library call and flattens the
response into plain dicts/lists.

Error policy:
- Bridge validation failures raise BridgeError subclasses before any network
  call is made.
- Library errors propagate unchanged (same type, same message). The failing
  operation is recorded on the exception via `attach_context`.

Every call records one metrics observation. Tenant names are hashed before
they reach the sink.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

import weaviate
from weaviate.classes.config import ConsistencyLevel
from weaviate.classes.init import AdditionalConfig, Auth, Timeout

from loadbridge.core.error_context import attach_context
from loadbridge.vectordb.batch_marshaller import (
    build_batch_objects,
    collect_failures,
    flatten_batch_results,
)
from loadbridge.vectordb.bridge_base import (
    BadRequest,
    BridgeError,
    ConfigError,
    MetricsSink,
    NoopMetrics,
)
from loadbridge.vectordb.coercion import get_string
from loadbridge.vectordb.endpoint import AuthCredential, ClientIdentity, resolve_endpoint
from loadbridge.vectordb.filter_builder import (
    build_delete_request,
    flatten_delete,
    to_weaviate_filter,
)
from loadbridge.vectordb.object_io import (
    build_fetch_options,
    build_insert_request,
    flatten_fetch,
    flatten_insert,
)
from loadbridge.vectordb.schema_builder import build_collection
from loadbridge.vectordb.tenant_builder import (
    build_tenant_names,
    build_tenants_for_create,
    build_tenants_for_update,
)

LOG = logging.getLogger(__name__)

COMPONENT = "vectordb_weaviate"

T = TypeVar("T")


def _tenant_of(args: Any) -> str:
    if isinstance(args, Mapping):
        return get_string(args, "tenant")
    return ""


def _auth_credentials(auth: Optional[AuthCredential]) -> Any:
    if auth is None:
        return None
    if auth.kind == "bearer":
        return Auth.bearer_token(access_token=auth.value)
    return Auth.api_key(api_key=auth.value)


def connect_kwargs(identity: ClientIdentity) -> Dict[str, Any]:
    """Keyword arguments for `weaviate.connect_to_custom` derived from an identity."""
    http_host, http_port = identity.http_endpoint()
    grpc_host, grpc_port = identity.grpc_endpoint()
    kwargs: Dict[str, Any] = {
        "http_host": http_host,
        "http_port": http_port,
        "http_secure": identity.secure,
        "grpc_host": grpc_host,
        "grpc_port": grpc_port,
        "grpc_secure": identity.secure,
        "headers": dict(identity.headers) or None,
        "auth_credentials": _auth_credentials(identity.auth),
    }
    if identity.startup_timeout is not None:
        kwargs["additional_config"] = AdditionalConfig(
            timeout=Timeout(init=identity.startup_timeout.total_seconds())
        )
    return kwargs


class WeaviateBridgeClient:
    """
    BridgeProtocol implementation backed by a weaviate-client v4 connection.

    The client holds no per-call state; concurrent use is as safe as the
    underlying connection.
    """

    def __init__(
        self,
        identity: ClientIdentity,
        native: Any,
        *,
        metrics: Optional[MetricsSink] = None,
    ) -> None:
        self._identity = identity
        self._native = native
        self._metrics: MetricsSink = metrics or NoopMetrics()
        self._component = COMPONENT

    @property
    def identity(self) -> ClientIdentity:
        return self._identity

    @property
    def native(self) -> Any:
        """The wrapped weaviate-client connection."""
        return self._native

    def close(self) -> None:
        self._native.close()

    def __enter__(self) -> "WeaviateBridgeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Instrumentation
    # ------------------------------------------------------------------ #

    @staticmethod
    def _tenant_hash(tenant: Optional[str]) -> Optional[str]:
        if not tenant:
            return None
        return hashlib.sha256(tenant.encode()).hexdigest()[:12]

    def _record(
        self,
        op: str,
        t0: float,
        ok: bool,
        *,
        code: str = "OK",
        tenant: Optional[str] = None,
        **extra: Any,
    ) -> None:
        try:
            ms = (time.monotonic() - t0) * 1000.0
            x = {k: v for k, v in extra.items() if v is not None}
            tenant_h = self._tenant_hash(tenant)
            if tenant_h:
                x["tenant_hash"] = tenant_h
            self._metrics.observe(
                component=self._component,
                op=op,
                ms=ms,
                ok=ok,
                code=code,
                extra=x or None,
            )
        except Exception:  # noqa: BLE001
            # Never let metrics recording break the operation
            LOG.debug("metrics sink failed for %s", op, exc_info=True)

    def _run(
        self,
        op: str,
        call: Callable[[], T],
        *,
        collection: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> T:
        t0 = time.monotonic()
        try:
            result = call()
        except BridgeError as e:
            self._record(op, t0, False, code=e.code or type(e).__name__, tenant=tenant, collection=collection)
            raise
        except Exception as e:
            attach_context(
                e,
                self._component,
                operation=op,
                collection=collection,
                tenant_hash=self._tenant_hash(tenant),
            )
            LOG.debug("%s failed in client library: %r", op, e)
            self._record(op, t0, False, code="UNAVAILABLE", tenant=tenant, collection=collection)
            raise
        self._record(op, t0, True, tenant=tenant, collection=collection)
        return result

    def _collection(
        self,
        name: str,
        *,
        tenant: str = "",
        consistency_level: Optional[ConsistencyLevel] = None,
    ) -> Any:
        handle = self._native.collections.get(name)
        if tenant:
            handle = handle.with_tenant(tenant)
        if consistency_level is not None:
            handle = handle.with_consistency_level(consistency_level)
        return handle

    @staticmethod
    def _require_collection(name: Any) -> str:
        if not isinstance(name, str) or not name:
            raise ConfigError("collection name is required", details={"field": "collection"})
        return name

    # ------------------------------------------------------------------ #
    # Schema
    # ------------------------------------------------------------------ #

    def create_collection(self, name: str, config: Optional[Mapping[str, Any]] = None) -> None:
        def call() -> None:
            descriptor = build_collection(name, config)
            LOG.debug("creating collection %s", descriptor.name)
            self._native.collections.create_from_dict(descriptor.to_dict())

        return self._run("create_collection", call, collection=name)

    def delete_collection(self, name: str) -> None:
        def call() -> None:
            self._native.collections.delete(self._require_collection(name))

        return self._run("delete_collection", call, collection=name)

    def delete_all_collections(self) -> None:
        return self._run("delete_all_collections", self._native.collections.delete_all)

    # ------------------------------------------------------------------ #
    # Tenants
    # ------------------------------------------------------------------ #

    def create_tenant(self, collection: str, tenants: Sequence[Mapping[str, Any]]) -> None:
        def call() -> None:
            records = build_tenants_for_create(tenants)
            handle = self._collection(self._require_collection(collection))
            handle.tenants.create([r.to_weaviate() for r in records])

        return self._run("create_tenant", call, collection=collection)

    def update_tenant(self, collection: str, tenants: Sequence[Mapping[str, Any]]) -> None:
        def call() -> None:
            records = build_tenants_for_update(tenants)
            handle = self._collection(self._require_collection(collection))
            handle.tenants.update([r.to_weaviate() for r in records])

        return self._run("update_tenant", call, collection=collection)

    def delete_tenant(self, collection: str, names: Sequence[str]) -> None:
        def call() -> None:
            tenant_names = build_tenant_names(names)
            handle = self._collection(self._require_collection(collection))
            handle.tenants.remove(tenant_names)

        return self._run("delete_tenant", call, collection=collection)

    # ------------------------------------------------------------------ #
    # Objects
    # ------------------------------------------------------------------ #

    def batch_create(self, objects: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        def call() -> List[Dict[str, Any]]:
            requests = build_batch_objects(objects)
            if not requests:
                return []
            uuids: List[Any] = []
            with self._native.batch.fixed_size(batch_size=len(requests)) as batch:
                for req in requests:
                    uuids.append(
                        batch.add_object(
                            collection=req.collection,
                            properties=req.properties,
                            uuid=req.uuid,
                            vector=req.native_vector(),
                            tenant=req.tenant or None,
                        )
                    )
            failures = collect_failures(self._native.batch.failed_objects)
            LOG.debug("batch_create submitted=%d failed=%d", len(requests), len(failures))
            return flatten_batch_results(requests, uuids, failures)

        return self._run("batch_create", call)

    def batch_delete(self, collection: str, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Delete every object matching `options["where"]`.

        An unrecognized where operator is dropped while the request is built.
        The resulting filter cannot be expressed natively, so the call is
        rejected locally with NotSupported and nothing is sent to the server.
        A missing where raises ConfigError the same way.
        """
        def call() -> Dict[str, Any]:
            request = build_delete_request(self._require_collection(collection), options)
            if request.where is None:
                raise ConfigError("batch delete requires a where filter", details={"field": "where"})
            where = to_weaviate_filter(request.where)
            handle = self._collection(
                request.collection,
                tenant=request.tenant,
                consistency_level=request.consistency_level,
            )
            response = handle.data.delete_many(where=where, verbose=request.verbose, dry_run=request.dry_run)
            return flatten_delete(response, dry_run=request.dry_run)

        return self._run(
            "batch_delete",
            call,
            collection=collection,
            tenant=_tenant_of(options),
        )

    def object_insert(self, collection: str, obj: Mapping[str, Any]) -> Dict[str, Any]:
        def call() -> Dict[str, Any]:
            if not isinstance(obj, Mapping):
                raise BadRequest(
                    f"object must be a mapping, got {type(obj).__name__}",
                    details={"field": "object"},
                )
            request = build_insert_request(self._require_collection(collection), obj)
            handle = self._collection(
                request.collection,
                tenant=request.tenant,
                consistency_level=request.consistency_level,
            )
            uuid = handle.data.insert(
                properties=request.properties,
                uuid=request.uuid,
                vector=request.native_vector(),
            )
            return flatten_insert(request, uuid)

        return self._run("object_insert", call, collection=collection, tenant=_tenant_of(obj))

    def fetch_objects(self, collection: str, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        def call() -> Dict[str, Any]:
            fetch = build_fetch_options(options)
            handle = self._collection(
                self._require_collection(collection),
                tenant=fetch.tenant,
                consistency_level=fetch.consistency_level,
            )
            if fetch.uuid is not None:
                found = handle.query.fetch_object_by_id(fetch.uuid, include_vector=fetch.include_vector)
                return flatten_fetch([found] if found is not None else [])
            response = handle.query.fetch_objects(
                limit=fetch.limit,
                offset=fetch.offset,
                after=fetch.after,
                include_vector=fetch.include_vector,
                return_metadata=fetch.metadata_query(),
            )
            return flatten_fetch(list(response.objects))

        return self._run(
            "fetch_objects",
            call,
            collection=collection,
            tenant=_tenant_of(options),
        )


def new_client(
    config: Mapping[str, Any],
    *,
    metrics: Optional[MetricsSink] = None,
    connect: Optional[Callable[..., Any]] = None,
) -> WeaviateBridgeClient:
    """
    Resolve `config` into a ClientIdentity and open a connection.

    Raises ConfigError for an unresolvable endpoint. Connection failures from
    the client library (including the startup readiness check) propagate
    unchanged.
    """
    identity = resolve_endpoint(config)
    connector = connect or weaviate.connect_to_custom
    native = connector(**connect_kwargs(identity))
    LOG.debug("connected to %s://%s", identity.scheme, identity.host)
    return WeaviateBridgeClient(identity, native, metrics=metrics)


__all__ = [
    "COMPONENT",
    "WeaviateBridgeClient",
    "connect_kwargs",
    "new_client",
]
