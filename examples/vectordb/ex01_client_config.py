# SPDX-License-Identifier: Apache-2.0
"""
Vectordb ex01: Client configuration

Demonstrates:
  • host:port with an explicit gRPC host
  • http:// and https:// prefixes on the host
  • Managed-cloud hosts: https, gRPC host and port 443 are inferred
  • Configuration errors raised before any connection is attempted

Nothing here opens a connection.
"""

from loadbridge.vectordb import ConfigError
from loadbridge.vectordb.endpoint import resolve_endpoint
from examples.common.printing import box, print_kv, print_table

CONFIGS = [
    {"host": "localhost:8080", "scheme": "http", "grpcHost": "localhost:50051"},
    {"host": "http://localhost:8080", "grpcHost": "localhost:50051"},
    {"host": "https://localhost:8080", "grpcHost": "localhost:50051"},
    {"host": "my-instance.c0.europe-west3.gcp.weaviate.cloud"},
    {"host": "my-instance.c0.europe-west3.gcp.weaviate.cloud:443"},
    {"host": "https://my-instance.c0.europe-west3.gcp.weaviate.cloud", "apiKey": "example-key"},
]


def main() -> None:
    box("Vectordb ex01: Client configuration")

    rows = []
    for cfg in CONFIGS:
        identity = resolve_endpoint(cfg)
        rows.append(
            {
                "config host": cfg["host"],
                "scheme": identity.scheme,
                "host": identity.host,
                "grpc host": identity.grpc_host,
                "auth": identity.auth.kind if identity.auth else "-",
            }
        )
    print_table(rows, headers=["config host", "scheme", "host", "grpc host", "auth"])

    print()
    for cfg in ({"grpcHost": "localhost:50051"}, {"host": "localhost:8080"}):
        try:
            resolve_endpoint(cfg)
        except ConfigError as e:
            print_kv({"config": cfg, "error": e.code, "field": e.details.get("field")})

    print("\n[lesson] ex01: only managed-cloud hosts may omit grpcHost; everything else needs both endpoints.")


if __name__ == "__main__":
    main()
