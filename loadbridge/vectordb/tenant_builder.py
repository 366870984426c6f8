# loadbridge/vectordb/tenant_builder.py
# SPDX-License-Identifier: Apache-2.0
"""
Tenant mappings -> TenantRecord lists for create/update/delete.

Names are extracted leniently: an absent or non-string `name` becomes "",
which the database rejects on submission.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from weaviate.classes.tenants import Tenant, TenantActivityStatus

from loadbridge.vectordb.bridge_base import BadRequest, TypeMismatch
from loadbridge.vectordb.coercion import get_string, is_sequence, to_string_list


@dataclass(frozen=True)
class TenantRecord:
    """
    Attributes:
        name: Tenant name ("" when the caller omitted it)
        activity_status: Upper-cased status, or None to keep the library default
    """
    name: str
    activity_status: Optional[str] = None

    def to_weaviate(self) -> Tenant:
        if self.activity_status is None:
            return Tenant(name=self.name)
        try:
            status = TenantActivityStatus(self.activity_status)
        except ValueError:
            raise BadRequest(
                f"unknown tenant activity status: {self.activity_status}",
                details={
                    "tenant": self.name,
                    "allowed": sorted(s.value for s in TenantActivityStatus),
                },
            ) from None
        return Tenant(name=self.name, activity_status=status)


def _tenant_mappings(tenants: Any) -> Sequence[Mapping[str, Any]]:
    if not is_sequence(tenants):
        raise TypeMismatch(
            f"tenants must be a list, got {type(tenants).__name__}",
            details={"field": "tenants"},
        )
    for index, entry in enumerate(tenants):
        if not isinstance(entry, Mapping):
            raise TypeMismatch(
                f"tenants[{index}] must be a mapping, got {type(entry).__name__}",
                details={"field": "tenants", "index": index},
            )
    return tenants


def build_tenants_for_create(tenants: Sequence[Mapping[str, Any]]) -> List[TenantRecord]:
    return [TenantRecord(name=get_string(t, "name")) for t in _tenant_mappings(tenants)]


def build_tenants_for_update(tenants: Sequence[Mapping[str, Any]]) -> List[TenantRecord]:
    records: List[TenantRecord] = []
    for t in _tenant_mappings(tenants):
        status = get_string(t, "activityStatus")
        records.append(TenantRecord(name=get_string(t, "name"), activity_status=status.upper() or None))
    return records


def build_tenant_names(names: Sequence[str]) -> List[str]:
    result = to_string_list(names, field="names")
    if result is None:
        raise TypeMismatch(
            f"names must be a list of strings, got {type(names).__name__}",
            details={"field": "names"},
        )
    return result


__all__ = [
    "TenantRecord",
    "build_tenants_for_create",
    "build_tenants_for_update",
    "build_tenant_names",
]
