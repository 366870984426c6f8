# SPDX-License-Identifier: Apache-2.0
"""
Vectordb ex02: Collections & tenants

Demonstrates:
  • Creating a multi-tenant collection
  • Creating tenants, then deactivating one
  • Deleting tenants and the collection
  • One metrics line per operation via ConsoleMetrics
"""

from loadbridge.vectordb import new_client
from examples.common.connection import example_config, unique_name
from examples.common.metrics_console import ConsoleMetrics
from examples.common.printing import box, print_kv


def main() -> None:
    box("Vectordb ex02: Collections & tenants")
    name = unique_name("MultiTenantCollection")

    with new_client(example_config(), metrics=ConsoleMetrics()) as client:
        client.create_collection(
            name,
            {
                "description": "Collection with multi-tenancy enabled",
                "multiTenancy": {"enabled": True},
                "properties": [{"name": "name", "dataType": ["text"]}],
            },
        )
        try:
            client.create_tenant(name, [{"name": "tenant1"}, {"name": "tenant2"}])
            client.update_tenant(name, [{"name": "tenant1", "activityStatus": "inactive"}])
            client.delete_tenant(name, ["tenant1", "tenant2"])
        finally:
            client.delete_collection(name)

    print_kv({"collection": name, "tenants": "created, updated, deleted"})
    print("\n[lesson] ex02: tenant statuses are upper-cased before they reach the database.")


if __name__ == "__main__":
    main()
