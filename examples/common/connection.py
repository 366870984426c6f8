# SPDX-License-Identifier: Apache-2.0
"""
Connection settings for the examples.

Every example talks to a local database unless WEAVIATE_HOST is set:

    WEAVIATE_HOST=localhost:8080 WEAVIATE_GRPC_HOST=localhost:50051 \
        python -m examples.vectordb.ex03_batch_create_delete
"""

from __future__ import annotations

import os
import time
from typing import Any, Dict

__all__ = ["example_config", "unique_name"]


def example_config() -> Dict[str, Any]:
    cfg: Dict[str, Any] = {
        "host": os.environ.get("WEAVIATE_HOST", "localhost:8080"),
        "grpcHost": os.environ.get("WEAVIATE_GRPC_HOST", "localhost:50051"),
    }
    api_key = os.environ.get("WEAVIATE_API_KEY")
    if api_key:
        cfg["apiKey"] = api_key
    return cfg


def unique_name(prefix: str) -> str:
    """Collection names start upper-case; the suffix keeps reruns apart."""
    return f"{prefix}_{os.getpid()}_{time.time_ns()}"
