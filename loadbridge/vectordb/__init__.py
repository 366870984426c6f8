# loadbridge/vectordb/__init__.py
# SPDX-License-Identifier: Apache-2.0
"""
Vector database bridge for load-testing scripts.

Public surface:

    from loadbridge.vectordb import new_client, WireBridgeHandler

    client = new_client({"host": "localhost:8080", "grpcHost": "localhost:50051"})
    handler = WireBridgeHandler(client)
    handler.handle({"op": "vectordb.fetch_objects", "args": {"collection": "Article"}})
"""

from loadbridge.vectordb.bridge_base import (
    BRIDGE_MODULE_NAME,
    BRIDGE_PROTOCOL_VERSION,
    BadRequest,
    BridgeError,
    BridgeProtocol,
    ConfigError,
    MetricsSink,
    NoopMetrics,
    NotSupported,
    TypeMismatch,
    WireBridgeHandler,
)
from loadbridge.vectordb.endpoint import (
    ClientIdentity,
    resolve_endpoint,
    resolve_endpoint_from_env,
)
from loadbridge.vectordb.registry import get_module, register
from loadbridge.vectordb.weaviate_adapter import WeaviateBridgeClient, new_client

__all__ = [
    "BRIDGE_MODULE_NAME",
    "BRIDGE_PROTOCOL_VERSION",
    "BridgeError",
    "BadRequest",
    "ConfigError",
    "TypeMismatch",
    "NotSupported",
    "MetricsSink",
    "NoopMetrics",
    "BridgeProtocol",
    "WireBridgeHandler",
    "ClientIdentity",
    "resolve_endpoint",
    "resolve_endpoint_from_env",
    "WeaviateBridgeClient",
    "new_client",
    "register",
    "get_module",
]
