# loadbridge/vectordb/schema_builder.py
# SPDX-License-Identifier: Apache-2.0
"""
Collection configuration mapping -> CollectionDescriptor.

The descriptor serializes (`to_dict`) to the database's REST class schema,
which the native client accepts unchanged through
`client.collections.create_from_dict`.

Recognized keys (all optional except the collection name itself):

    description, vectorizer, vectorIndexType   strings
    vectorIndexConfig                          mapping, passed through
    vectorConfig                               name -> {vectorizer: mapping,
                                                        vectorIndexType: str,
                                                        vectorIndexConfig: mapping}
    invertedIndexConfig.bm25                   {k1: number, b: number}
    invertedIndexConfig.stopwords              {preset: str, additions: [str], removals: [str]}
    multiTenancy                               {enabled, autoTenantCreation, autoTenantActivation}
    replicationConfig                          {factor: number, asyncEnabled: bool, deletionStrategy: str}
    properties                                 [{name, dataType: [str], description, tokenization}]

Empty strings are treated exactly like absent keys and omitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from loadbridge.vectordb.bridge_base import ConfigError, TypeMismatch
from loadbridge.vectordb.coercion import (
    get_bool,
    get_mapping,
    get_sequence,
    get_string,
    is_number,
    to_int,
    to_string_list,
)

logger = logging.getLogger(__name__)

DEFAULT_REPLICATION_FACTOR = 1


# =============================================================================
# Descriptor types
# =============================================================================


@dataclass(frozen=True)
class PropertyDescriptor:
    """
    One property of a collection.

    Attributes:
        name: Property name (unique within the collection)
        data_type: Data type list, e.g. ["text"] or ["int[]"]
        description: Optional human description
        tokenization: Optional tokenization mode ("word", "field", ...)
    """
    name: str
    data_type: List[str]
    description: str = ""
    tokenization: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "dataType": list(self.data_type)}
        if self.description:
            out["description"] = self.description
        if self.tokenization:
            out["tokenization"] = self.tokenization
        return out


@dataclass(frozen=True)
class NamedVectorConfig:
    vectorizer: Optional[Mapping[str, Any]] = None
    vector_index_type: str = ""
    vector_index_config: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.vectorizer is not None:
            out["vectorizer"] = dict(self.vectorizer)
        if self.vector_index_type:
            out["vectorIndexType"] = self.vector_index_type
        if self.vector_index_config is not None:
            out["vectorIndexConfig"] = dict(self.vector_index_config)
        return out


@dataclass(frozen=True)
class BM25Config:
    k1: float
    b: float


@dataclass(frozen=True)
class StopwordConfig:
    preset: str = ""
    additions: Optional[List[str]] = None
    removals: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.preset:
            out["preset"] = self.preset
        if self.additions is not None:
            out["additions"] = list(self.additions)
        if self.removals is not None:
            out["removals"] = list(self.removals)
        return out


@dataclass(frozen=True)
class InvertedIndexConfig:
    bm25: Optional[BM25Config] = None
    stopwords: Optional[StopwordConfig] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.bm25 is not None:
            out["bm25"] = {"k1": self.bm25.k1, "b": self.bm25.b}
        if self.stopwords is not None:
            out["stopwords"] = self.stopwords.to_dict()
        return out


@dataclass(frozen=True)
class MultiTenancyConfig:
    enabled: bool = False
    auto_tenant_creation: bool = False
    auto_tenant_activation: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "autoTenantCreation": self.auto_tenant_creation,
            "autoTenantActivation": self.auto_tenant_activation,
        }


@dataclass(frozen=True)
class ReplicationConfig:
    factor: int = DEFAULT_REPLICATION_FACTOR
    async_enabled: bool = False
    deletion_strategy: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"factor": self.factor, "asyncEnabled": self.async_enabled}
        if self.deletion_strategy:
            out["deletionStrategy"] = self.deletion_strategy
        return out


@dataclass(frozen=True)
class CollectionDescriptor:
    """
    Structured, validated description of a collection to create.

    Attributes:
        name: Collection (class) name
        description: Optional description
        properties: Property descriptors, names unique
        vectorizer: Module name of the collection-level vectorizer
        vector_index_type: e.g. "hnsw", "flat", "dynamic"
        vector_index_config: Raw index configuration, passed through
        vector_config: Named-vector configurations
        inverted_index_config: BM25 and stopword settings
        multi_tenancy: Multi-tenancy flags
        replication: Replication settings
    """
    name: str
    description: str = ""
    properties: List[PropertyDescriptor] = field(default_factory=list)
    vectorizer: str = ""
    vector_index_type: str = ""
    vector_index_config: Optional[Mapping[str, Any]] = None
    vector_config: Dict[str, NamedVectorConfig] = field(default_factory=dict)
    inverted_index_config: Optional[InvertedIndexConfig] = None
    multi_tenancy: Optional[MultiTenancyConfig] = None
    replication: Optional[ReplicationConfig] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the REST class schema shape."""
        out: Dict[str, Any] = {
            "class": self.name,
            "properties": [p.to_dict() for p in self.properties],
        }
        if self.description:
            out["description"] = self.description
        if self.vectorizer:
            out["vectorizer"] = self.vectorizer
        if self.vector_index_type:
            out["vectorIndexType"] = self.vector_index_type
        if self.vector_index_config is not None:
            out["vectorIndexConfig"] = dict(self.vector_index_config)
        if self.vector_config:
            out["vectorConfig"] = {name: vc.to_dict() for name, vc in self.vector_config.items()}
        if self.inverted_index_config is not None:
            out["invertedIndexConfig"] = self.inverted_index_config.to_dict()
        if self.multi_tenancy is not None:
            out["multiTenancyConfig"] = self.multi_tenancy.to_dict()
        if self.replication is not None:
            out["replicationConfig"] = self.replication.to_dict()
        return out


# =============================================================================
# Builders
# =============================================================================


def _float32_param(section: Mapping[str, Any], key: str, *, field_name: str) -> float:
    value = section.get(key)
    if not is_number(value):
        raise TypeMismatch(
            f"{field_name} must be a number, got {type(value).__name__}",
            details={"field": field_name},
        )
    return float(np.float32(value))


def _build_vector_config(raw: Mapping[str, Any]) -> Dict[str, NamedVectorConfig]:
    configs: Dict[str, NamedVectorConfig] = {}
    for name, entry in raw.items():
        if not isinstance(entry, Mapping):
            logger.debug("skipping vectorConfig[%r]: not a mapping", name)
            continue
        configs[str(name)] = NamedVectorConfig(
            vectorizer=get_mapping(entry, "vectorizer"),
            vector_index_type=get_string(entry, "vectorIndexType"),
            vector_index_config=get_mapping(entry, "vectorIndexConfig"),
        )
    return configs


def _build_inverted_index(raw: Mapping[str, Any]) -> InvertedIndexConfig:
    bm25: Optional[BM25Config] = None
    bm25_raw = get_mapping(raw, "bm25")
    if bm25_raw is not None:
        bm25 = BM25Config(
            k1=_float32_param(bm25_raw, "k1", field_name="invertedIndexConfig.bm25.k1"),
            b=_float32_param(bm25_raw, "b", field_name="invertedIndexConfig.bm25.b"),
        )

    stopwords: Optional[StopwordConfig] = None
    stop_raw = get_mapping(raw, "stopwords")
    if stop_raw is not None:
        stopwords = StopwordConfig(
            preset=get_string(stop_raw, "preset"),
            additions=to_string_list(stop_raw.get("additions"), field="invertedIndexConfig.stopwords.additions"),
            removals=to_string_list(stop_raw.get("removals"), field="invertedIndexConfig.stopwords.removals"),
        )

    return InvertedIndexConfig(bm25=bm25, stopwords=stopwords)


def _replication_factor(value: Any) -> int:
    if not is_number(value):
        return DEFAULT_REPLICATION_FACTOR
    factor, found = to_int(value)
    return factor if found else DEFAULT_REPLICATION_FACTOR


def _build_properties(raw: List[Any]) -> List[PropertyDescriptor]:
    properties: List[PropertyDescriptor] = []
    seen = set()
    for index, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            logger.debug("skipping properties[%d]: not a mapping", index)
            continue

        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise ConfigError(
                f"property at index {index} missing name",
                details={"field": "properties", "index": index},
            )
        if name in seen:
            raise ConfigError(
                f"duplicate property name '{name}'",
                details={"field": "properties", "index": index},
            )

        data_type = to_string_list(entry.get("dataType"), field=f"properties[{index}].dataType")
        if not data_type:
            raise ConfigError(
                f"property '{name}' missing dataType",
                details={"field": "properties", "index": index},
            )

        seen.add(name)
        properties.append(
            PropertyDescriptor(
                name=name,
                data_type=data_type,
                description=get_string(entry, "description"),
                tokenization=get_string(entry, "tokenization"),
            )
        )
    return properties


def build_collection(name: str, config: Optional[Mapping[str, Any]] = None) -> CollectionDescriptor:
    """
    Translate a collection configuration mapping into a CollectionDescriptor.

    Raises:
        ConfigError: missing collection name, property name or dataType
        TypeMismatch: non-numeric BM25 parameter, non-string list element
    """
    if not isinstance(name, str) or not name:
        raise ConfigError("collection name is required", details={"field": "name"})
    cfg: Mapping[str, Any] = config or {}

    inverted: Optional[InvertedIndexConfig] = None
    inverted_raw = get_mapping(cfg, "invertedIndexConfig")
    if inverted_raw is not None:
        inverted = _build_inverted_index(inverted_raw)

    multi_tenancy: Optional[MultiTenancyConfig] = None
    mt_raw = get_mapping(cfg, "multiTenancy")
    if mt_raw is not None:
        multi_tenancy = MultiTenancyConfig(
            enabled=get_bool(mt_raw, "enabled", False),
            auto_tenant_creation=get_bool(mt_raw, "autoTenantCreation", False),
            auto_tenant_activation=get_bool(mt_raw, "autoTenantActivation", False),
        )

    replication: Optional[ReplicationConfig] = None
    rep_raw = get_mapping(cfg, "replicationConfig")
    if rep_raw is not None:
        replication = ReplicationConfig(
            factor=_replication_factor(rep_raw.get("factor")),
            async_enabled=get_bool(rep_raw, "asyncEnabled", False),
            deletion_strategy=get_string(rep_raw, "deletionStrategy"),
        )

    vector_config_raw = get_mapping(cfg, "vectorConfig")

    return CollectionDescriptor(
        name=name,
        description=get_string(cfg, "description"),
        properties=_build_properties(list(get_sequence(cfg, "properties") or [])),
        vectorizer=get_string(cfg, "vectorizer"),
        vector_index_type=get_string(cfg, "vectorIndexType"),
        vector_index_config=get_mapping(cfg, "vectorIndexConfig"),
        vector_config=_build_vector_config(vector_config_raw) if vector_config_raw is not None else {},
        inverted_index_config=inverted,
        multi_tenancy=multi_tenancy,
        replication=replication,
    )


__all__ = [
    "PropertyDescriptor",
    "NamedVectorConfig",
    "BM25Config",
    "StopwordConfig",
    "InvertedIndexConfig",
    "MultiTenancyConfig",
    "ReplicationConfig",
    "CollectionDescriptor",
    "build_collection",
]
