# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures: a fake native connection, a bridge client wired to it, and a
metrics sink that keeps every observation.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from loadbridge.vectordb.weaviate_adapter import new_client
from tests.mock.mock_weaviate_client import MockWeaviateClient, RecordingConnect


class CapturingMetrics:
    """MetricsSink that stores observations for assertions."""

    def __init__(self) -> None:
        self.observations: List[Dict[str, Any]] = []

    def observe(self, **kwargs: Any) -> None:
        self.observations.append(kwargs)

    def ops(self) -> List[str]:
        return [o["op"] for o in self.observations]


@pytest.fixture
def native() -> MockWeaviateClient:
    return MockWeaviateClient()


@pytest.fixture
def metrics() -> CapturingMetrics:
    return CapturingMetrics()


@pytest.fixture
def connect(native: MockWeaviateClient) -> RecordingConnect:
    return RecordingConnect(native)


@pytest.fixture
def client(connect: RecordingConnect, metrics: CapturingMetrics):
    bridge = new_client(
        {"host": "localhost:8080", "grpcHost": "localhost:50051"},
        metrics=metrics,
        connect=connect,
    )
    yield bridge
    bridge.close()
