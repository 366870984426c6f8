# loadbridge/vectordb/registry.py
# SPDX-License-Identifier: Apache-2.0
"""
Process-wide module registry.

A scripting host discovers the bridge by name. Registration is an explicit
call made once during host initialization; importing this package registers
nothing.

    from loadbridge.vectordb import registry

    registry.register()
    client = registry.get_module("vectordb/weaviate").new_client({"host": ...})
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from loadbridge.vectordb.bridge_base import BRIDGE_MODULE_NAME, BRIDGE_PROTOCOL_VERSION
from loadbridge.vectordb.weaviate_adapter import new_client

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


@dataclass(frozen=True)
class BridgeModule:
    """
    Module root handed to the scripting host.

    Attributes:
        name: Registry name, e.g. "vectordb/weaviate"
        new_client: Factory taking a configuration mapping
        version: Bridge protocol version
    """
    name: str
    new_client: ClientFactory
    version: str = BRIDGE_PROTOCOL_VERSION


_modules: Dict[str, BridgeModule] = {}
_lock = threading.Lock()


def register_module(name: str, factory: ClientFactory) -> BridgeModule:
    """
    Install `factory` under `name`.

    Registering the same factory again is a no-op that returns the existing
    module. A different factory under a taken name raises ValueError.
    """
    if not name or not isinstance(name, str):
        raise ValueError("module name must be a non-empty string")
    if not callable(factory):
        raise ValueError("module factory must be callable")
    with _lock:
        existing = _modules.get(name)
        if existing is not None:
            if existing.new_client is factory:
                return existing
            raise ValueError(f"module '{name}' is already registered with a different factory")
        module = BridgeModule(name=name, new_client=factory)
        _modules[name] = module
    logger.debug("Registered bridge module: %s", name)
    return module


def register() -> BridgeModule:
    """Register the Weaviate bridge under "vectordb/weaviate"."""
    return register_module(BRIDGE_MODULE_NAME, new_client)


def get_module(name: str) -> Optional[BridgeModule]:
    with _lock:
        return _modules.get(name)


def unregister(name: str) -> None:
    with _lock:
        _modules.pop(name, None)


__all__ = [
    "BridgeModule",
    "register_module",
    "register",
    "get_module",
    "unregister",
]
