# SPDX-License-Identifier: Apache-2.0
"""
Vectordb ex04: Object insert & fetch

Demonstrates:
  • Single inserts with ordered ids and a vector
  • Named vectors on a collection with vectorConfig
  • Tenant-scoped insert and fetch
  • Fetch by id, with limit/offset, and with additional fields
"""

from loadbridge.vectordb import new_client
from examples.common.connection import example_config, unique_name
from examples.common.printing import box, print_json, print_kv

PROPERTIES = [
    {"name": "title", "dataType": ["text"]},
    {"name": "content", "dataType": ["text"]},
]


def _ordered_id(i: int) -> str:
    return f"00000000-0000-0000-0000-{i:012d}"


def main() -> None:
    box("Vectordb ex04: Object insert & fetch")
    plain = unique_name("InsertDemo")
    tenanted = unique_name("InsertDemoMT")
    named = unique_name("InsertDemoNamedVectors")

    with new_client(example_config()) as client:
        client.create_collection(plain, {"properties": PROPERTIES})
        client.create_collection(tenanted, {"properties": PROPERTIES, "multiTenancy": {"enabled": True}})
        client.create_collection(
            named,
            {
                "properties": PROPERTIES,
                "vectorConfig": {
                    "vector1": {"vectorizer": {"none": None}, "vectorIndexType": "hnsw"},
                    "vector2": {"vectorizer": {"none": None}, "vectorIndexType": "flat"},
                },
            },
        )
        try:
            for i in range(10):
                client.object_insert(
                    plain,
                    {
                        "id": _ordered_id(i),
                        "properties": {"title": f"Document {i}", "content": f"Content of document {i}"},
                        "vector": [0.1 * i, 0.2 * i, 0.3 * i],
                    },
                )

            multi = client.object_insert(
                named,
                {
                    "properties": {"title": "Multi Vector Doc"},
                    "vectors": {"vector1": [0.1, 0.2, 0.3], "vector2": [0.4] * 8},
                },
            )

            client.create_tenant(tenanted, [{"name": "tenantA"}])
            tenant_obj = client.object_insert(tenanted, {"properties": {"title": "Tenant Document"}, "tenant": "tenantA"})
            print_kv({"tenant on insert": tenant_obj["tenant"]})

            page = client.fetch_objects(plain, {"limit": 2, "offset": 3, "additional": ["id"]})
            print_kv({"page ids": [o["id"] for o in page["objects"]]})

            by_id = client.fetch_objects(plain, {"id": _ordered_id(2), "additional": ["vector", "creationTimeUnix"]})
            print_json(by_id)

            vectors = client.fetch_objects(named, {"id": multi["id"], "additional": ["vector"]})
            print_kv({"named vectors": sorted(vectors["objects"][0].get("vectors", {}))})

            scoped = client.fetch_objects(tenanted, {"tenant": "tenantA"})
            print_kv({"tenant objects": len(scoped["objects"])})
        finally:
            client.delete_all_collections()

    print("\n[lesson] ex04: additional fields choose what comes back; ids and tenants scope the fetch.")


if __name__ == "__main__":
    main()
