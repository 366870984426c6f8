# SPDX-License-Identifier: Apache-2.0
"""
Vectordb ex03: Batch create & delete

Demonstrates:
  • Batch insert of 1000 objects with random 3-d vectors
  • Per-object results in input order
  • Filtered batch delete with verbose output
  • A dry run first, so the match count is visible before anything is removed
"""

import random
from collections import Counter

from loadbridge.vectordb import new_client
from examples.common.connection import example_config, unique_name
from examples.common.printing import box, print_json, print_kv

N_OBJECTS = 1000


def main() -> None:
    box("Vectordb ex03: Batch create & delete")
    name = unique_name("TestCollection")

    with new_client(example_config()) as client:
        client.create_collection(
            name,
            {
                "description": "Test collection for batch operations",
                "properties": [{"name": "title", "dataType": ["text"]}],
            },
        )
        try:
            objects = [
                {
                    "class": name,
                    "properties": {"title": f"Document {i + 1}"},
                    "vector": [random.random() for _ in range(3)],
                }
                for i in range(N_OBJECTS)
            ]
            results = client.batch_create(objects)
            print_kv(dict(Counter(r["status"] for r in results)))

            where = {"operator": "Like", "path": ["title"], "valueText": "*"}
            dry = client.batch_delete(name, {"where": where, "dryRun": True})
            print_kv({"dry run matches": dry["matches"]})

            summary = client.batch_delete(name, {"where": where, "output": "verbose"})
            print_json({k: v for k, v in summary.items() if k != "objects"})
            print_kv({"first deleted": (summary.get("objects") or [{}])[0]})
        finally:
            client.delete_collection(name)

    print("\n[lesson] ex03: batch results keep input order; deletes report matches, successes and failures.")


if __name__ == "__main__":
    main()
