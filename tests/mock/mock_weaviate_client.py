# SPDX-License-Identifier: Apache-2.0
"""
In-memory stand-in for a weaviate-client v4 connection.

Implements only the surface the bridge touches:

    client.collections.create_from_dict / delete / delete_all / get
    collection.with_tenant / with_consistency_level
    collection.tenants.create / update / remove
    collection.data.insert / delete_many
    collection.query.fetch_objects / fetch_object_by_id
    client.batch.fixed_size(...) -> add_object, client.batch.failed_objects
    client.close

Objects are kept per collection and returned ordered by uuid, which is how
the database pages through a collection without a sort clause.
"""

from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional


class MockWeaviateError(Exception):
    """Raised where the real client would raise a library error."""


@dataclass
class StoredObject:
    uuid: uuid_lib.UUID
    properties: Dict[str, Any]
    vector: Dict[str, List[float]]
    tenant: Optional[str]
    created: datetime


@dataclass
class MockMetadata:
    creation_time: Optional[datetime] = None
    last_update_time: Optional[datetime] = None
    distance: Optional[float] = None
    certainty: Optional[float] = None
    score: Optional[float] = None
    explain_score: Optional[str] = None
    is_consistent: Optional[bool] = None


@dataclass
class MockObject:
    uuid: uuid_lib.UUID
    properties: Dict[str, Any]
    vector: Dict[str, List[float]]
    metadata: MockMetadata
    collection: str = ""


@dataclass
class MockQueryReturn:
    objects: List[MockObject]


@dataclass
class MockDeleteObject:
    uuid: uuid_lib.UUID
    successful: bool
    error: Optional[str] = None


@dataclass
class MockDeleteReturn:
    failed: int
    matches: int
    objects: Optional[List[MockDeleteObject]]
    successful: int


@dataclass
class MockBatchObject:
    collection: str
    uuid: str


@dataclass
class MockErrorObject:
    message: str
    object_: MockBatchObject


def _as_vector_map(vector: Any) -> Dict[str, List[float]]:
    if vector is None:
        return {}
    if isinstance(vector, Mapping):
        return {name: list(vec) for name, vec in vector.items()}
    return {"default": list(vector)}


class MockTenants:
    def __init__(self, store: "MockWeaviateClient", collection: str) -> None:
        self._store = store
        self._collection = collection

    def create(self, tenants: Any) -> None:
        self._store.calls.append(("tenants.create", self._collection, list(tenants)))

    def update(self, tenants: Any) -> None:
        self._store.calls.append(("tenants.update", self._collection, list(tenants)))

    def remove(self, tenants: Any) -> None:
        self._store.calls.append(("tenants.remove", self._collection, list(tenants)))


class MockData:
    def __init__(self, view: "MockCollection") -> None:
        self._view = view

    def insert(self, properties: Mapping[str, Any], uuid: Any = None, vector: Any = None, references: Any = None) -> uuid_lib.UUID:
        store = self._view.store
        store.calls.append(("data.insert", self._view.name, self._view.tenant, self._view.consistency_level))
        objects = store.objects_for(self._view.name)
        object_id = uuid_lib.UUID(str(uuid)) if uuid is not None else uuid_lib.uuid4()
        if str(object_id) in objects:
            raise MockWeaviateError(f"id '{object_id}' already exists")
        objects[str(object_id)] = StoredObject(
            uuid=object_id,
            properties=dict(properties),
            vector=_as_vector_map(vector),
            tenant=self._view.tenant,
            created=datetime.now(timezone.utc),
        )
        return object_id

    def delete_many(self, where: Any, verbose: bool = False, dry_run: bool = False) -> MockDeleteReturn:
        store = self._view.store
        store.calls.append(
            ("data.delete_many", self._view.name, self._view.tenant, self._view.consistency_level, where, verbose, dry_run)
        )
        if store.delete_response is not None:
            return store.delete_response
        matched = list(store.objects_for(self._view.name).values())
        objects = None
        if verbose:
            objects = [MockDeleteObject(uuid=o.uuid, successful=not dry_run) for o in matched]
        return MockDeleteReturn(
            failed=0,
            matches=len(matched),
            objects=objects,
            successful=0 if dry_run else len(matched),
        )


class MockQuery:
    def __init__(self, view: "MockCollection") -> None:
        self._view = view

    def _to_object(self, stored: StoredObject, include_vector: bool, return_metadata: Any) -> MockObject:
        metadata = MockMetadata()
        if return_metadata is not None and getattr(return_metadata, "creation_time", False):
            metadata.creation_time = stored.created
        return MockObject(
            uuid=stored.uuid,
            properties=dict(stored.properties),
            vector=dict(stored.vector) if include_vector else {},
            metadata=metadata,
            collection=self._view.name,
        )

    def fetch_objects(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        after: Any = None,
        include_vector: bool = False,
        return_metadata: Any = None,
        **_: Any,
    ) -> MockQueryReturn:
        store = self._view.store
        store.calls.append(
            ("query.fetch_objects", self._view.name, self._view.tenant, self._view.consistency_level,
             {"limit": limit, "offset": offset, "after": after, "include_vector": include_vector,
              "return_metadata": return_metadata})
        )
        ordered = sorted(store.objects_for(self._view.name).values(), key=lambda o: str(o.uuid))
        if after is not None:
            ordered = [o for o in ordered if str(o.uuid) > str(after)]
        if offset:
            ordered = ordered[offset:]
        if limit is not None:
            ordered = ordered[:limit]
        return MockQueryReturn(objects=[self._to_object(o, include_vector, return_metadata) for o in ordered])

    def fetch_object_by_id(self, uuid: Any, include_vector: bool = False, **_: Any) -> Optional[MockObject]:
        store = self._view.store
        store.calls.append(("query.fetch_object_by_id", self._view.name, str(uuid), include_vector))
        stored = store.objects_for(self._view.name).get(str(uuid))
        if stored is None:
            return None
        return self._to_object(stored, include_vector, None)


class MockCollection:
    def __init__(
        self,
        store: "MockWeaviateClient",
        name: str,
        tenant: Optional[str] = None,
        consistency_level: Any = None,
    ) -> None:
        self.store = store
        self.name = name
        self.tenant = tenant
        self.consistency_level = consistency_level
        self.tenants = MockTenants(store, name)
        self.data = MockData(self)
        self.query = MockQuery(self)

    def with_tenant(self, tenant: str) -> "MockCollection":
        return MockCollection(self.store, self.name, tenant, self.consistency_level)

    def with_consistency_level(self, consistency_level: Any) -> "MockCollection":
        return MockCollection(self.store, self.name, self.tenant, consistency_level)


class MockCollections:
    def __init__(self, store: "MockWeaviateClient") -> None:
        self._store = store

    def create_from_dict(self, config: Mapping[str, Any]) -> MockCollection:
        name = config["class"]
        if name in self._store.schemas:
            raise MockWeaviateError(f"class name {name!r} already exists")
        self._store.schemas[name] = dict(config)
        self._store.calls.append(("collections.create_from_dict", name))
        return MockCollection(self._store, name)

    def delete(self, name: str) -> None:
        self._store.calls.append(("collections.delete", name))
        self._store.schemas.pop(name, None)
        self._store.objects.pop(name, None)

    def delete_all(self) -> None:
        self._store.calls.append(("collections.delete_all",))
        self._store.schemas.clear()
        self._store.objects.clear()

    def get(self, name: str) -> MockCollection:
        return MockCollection(self._store, name)


class MockBatchContext:
    def __init__(self, store: "MockWeaviateClient") -> None:
        self._store = store

    def __enter__(self) -> "MockBatchContext":
        self._store.batch.failed_objects = []
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    def add_object(
        self,
        collection: str,
        properties: Optional[Mapping[str, Any]] = None,
        references: Any = None,
        uuid: Any = None,
        vector: Any = None,
        tenant: Optional[str] = None,
    ) -> uuid_lib.UUID:
        object_id = uuid_lib.UUID(str(uuid)) if uuid is not None else uuid_lib.uuid4()
        self._store.batch.added.append(
            {"collection": collection, "properties": properties, "uuid": object_id, "vector": vector, "tenant": tenant}
        )
        message = self._store.batch.fail_uuids.get(str(object_id))
        if message is not None:
            self._store.batch.failed_objects.append(
                MockErrorObject(message=message, object_=MockBatchObject(collection=collection, uuid=str(object_id)))
            )
            return object_id
        self._store.objects_for(collection)[str(object_id)] = StoredObject(
            uuid=object_id,
            properties=dict(properties or {}),
            vector=_as_vector_map(vector),
            tenant=tenant,
            created=datetime.now(timezone.utc),
        )
        return object_id


class MockBatch:
    def __init__(self, store: "MockWeaviateClient") -> None:
        self._store = store
        self.failed_objects: List[MockErrorObject] = []
        self.added: List[Dict[str, Any]] = []
        self.fail_uuids: Dict[str, str] = {}
        self.batch_sizes: List[int] = []

    def fixed_size(self, batch_size: int = 100, concurrent_requests: int = 2) -> MockBatchContext:
        self.batch_sizes.append(batch_size)
        return MockBatchContext(self._store)


class MockWeaviateClient:
    """Records every call in `calls`; failures can be injected per uuid."""

    def __init__(self) -> None:
        self.schemas: Dict[str, Dict[str, Any]] = {}
        self.objects: Dict[str, Dict[str, StoredObject]] = {}
        self.calls: List[tuple] = []
        self.delete_response: Optional[MockDeleteReturn] = None
        self.closed = False
        self.collections = MockCollections(self)
        self.batch = MockBatch(self)

    def objects_for(self, collection: str) -> Dict[str, StoredObject]:
        return self.objects.setdefault(collection, {})

    def close(self) -> None:
        self.closed = True


class RecordingConnect:
    """Stands in for `weaviate.connect_to_custom`; keeps the kwargs it was called with."""

    def __init__(self, client: Optional[MockWeaviateClient] = None) -> None:
        self.client = client or MockWeaviateClient()
        self.kwargs: Dict[str, Any] = {}

    def __call__(self, **kwargs: Any) -> MockWeaviateClient:
        self.kwargs = kwargs
        return self.client


__all__ = [
    "MockWeaviateError",
    "MockWeaviateClient",
    "MockDeleteReturn",
    "MockDeleteObject",
    "RecordingConnect",
]
