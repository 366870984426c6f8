# SPDX-License-Identifier: Apache-2.0
"""
Live round trips against a real database.

Runs only when LOADBRIDGE_LIVE_HOST is set, e.g.:

    LOADBRIDGE_LIVE_HOST=localhost:8080 LOADBRIDGE_LIVE_GRPC_HOST=localhost:50051 pytest tests/live
"""

import os
import uuid

import pytest

from loadbridge.vectordb import new_client

LIVE_HOST = os.environ.get("LOADBRIDGE_LIVE_HOST")

pytestmark = pytest.mark.skipif(not LIVE_HOST, reason="LOADBRIDGE_LIVE_HOST not set")


def _uuid(i: int) -> str:
    return f"00000000-0000-0000-0000-{i:012d}"


@pytest.fixture
def live():
    cfg = {"host": LIVE_HOST, "grpcHost": os.environ.get("LOADBRIDGE_LIVE_GRPC_HOST", "")}
    api_key = os.environ.get("LOADBRIDGE_LIVE_API_KEY")
    if api_key:
        cfg["apiKey"] = api_key
    with new_client(cfg) as bridge:
        yield bridge


@pytest.fixture
def collection(live):
    name = "Loadbridge" + uuid.uuid4().hex[:8]
    live.create_collection(
        name,
        {
            "vectorizer": "none",
            "properties": [{"name": "title", "dataType": ["text"]}],
        },
    )
    yield name
    live.delete_collection(name)


def test_insert_then_fetch_vector(live, collection):
    """Verify an inserted vector is returned unchanged when fetched by id."""
    live.object_insert(collection, {"id": _uuid(1), "properties": {"title": "a"}, "vector": [0.1, 0.2, 0.3]})

    (obj,) = live.fetch_objects(collection, {"id": _uuid(1), "additional": ["vector"]})["objects"]
    assert obj["id"] == _uuid(1)
    assert obj["vector"] == pytest.approx([0.1, 0.2, 0.3], rel=1e-6)


def test_pagination(live, collection):
    """Verify limit/offset paging over five objects ordered by id."""
    results = live.batch_create(
        [{"class": collection, "id": _uuid(i), "properties": {"title": str(i)}} for i in range(5)]
    )
    assert [r["status"] for r in results] == ["success"] * 5

    def ids(options):
        return [o["id"] for o in live.fetch_objects(collection, options)["objects"]]

    assert ids({"limit": 2}) == [_uuid(0), _uuid(1)]
    assert ids({"offset": 2, "limit": 2}) == [_uuid(2), _uuid(3)]
    assert ids({"offset": 4, "limit": 2}) == [_uuid(4)]
    assert ids({"additional": ["id"], "limit": 1}) == [_uuid(0)]


def test_batch_delete_dry_run(live, collection):
    """Verify a verbose dry run reports matches without deleting."""
    live.batch_create([{"class": collection, "id": _uuid(i), "properties": {"title": "x"}} for i in range(2)])

    summary = live.batch_delete(
        collection,
        {
            "where": {"operator": "Equal", "path": ["title"], "valueText": "x"},
            "dryRun": True,
            "output": "verbose",
        },
    )
    assert summary["matches"] == 2
    assert {o["status"] for o in summary["objects"]} == {"dryrun"}
    assert len(live.fetch_objects(collection)["objects"]) == 2
