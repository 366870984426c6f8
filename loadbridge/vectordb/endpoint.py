# loadbridge/vectordb/endpoint.py
# SPDX-License-Identifier: Apache-2.0
"""
Endpoint resolution: raw client configuration -> ClientIdentity.

Recognized keys
---------------
host        (required) "host:port", optionally prefixed with http:// or https://
scheme      "http" (default) or "https"; a scheme prefix on `host` wins
grpcHost    "host:port" of the gRPC endpoint; derived for managed-cloud hosts
authToken   bearer token (checked first)
apiKey      API key (used only when no bearer token is given)
headers     mapping of extra request headers
timeout     startup timeout in seconds

Managed-cloud hosts (containing "weaviate.cloud") always resolve to https,
get "grpc-<host>" as gRPC host when none is given, and default to port 443.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional, Tuple

from loadbridge.vectordb.bridge_base import ConfigError, TypeMismatch
from loadbridge.vectordb.coercion import get_mapping, get_string, to_float

logger = logging.getLogger(__name__)

CLOUD_DOMAIN_MARKER = "weaviate.cloud"
CLOUD_GRPC_PREFIX = "grpc-"
CLOUD_DEFAULT_PORT = 443

DEFAULT_HTTP_PORTS = {"http": 80, "https": 443}
DEFAULT_GRPC_PORTS = {"http": 50051, "https": 443}

_SCHEME_PREFIXES = (("http://", "http"), ("https://", "https"))

# Environment variables read by resolve_endpoint_from_env().
ENV_KEYS = {
    "host": "WEAVIATE_HOST",
    "grpcHost": "WEAVIATE_GRPC_HOST",
    "scheme": "WEAVIATE_SCHEME",
    "authToken": "WEAVIATE_AUTH_TOKEN",
    "apiKey": "WEAVIATE_API_KEY",
    "timeout": "WEAVIATE_TIMEOUT",
}


@dataclass(frozen=True)
class AuthCredential:
    """
    A single authentication credential.

    Attributes:
        kind: "bearer" or "api_key"
        value: The secret itself (never included in repr)
    """
    kind: str
    value: str = field(repr=False)


@dataclass(frozen=True)
class ClientIdentity:
    """
    Validated network identity of one client.

    Attributes:
        scheme: "http" or "https"
        host: HTTP endpoint as "host[:port]"
        grpc_host: gRPC endpoint as "host[:port]"
        auth: Optional credential (bearer token or API key)
        headers: Extra headers sent with every request
        startup_timeout: Optional timeout for the initial readiness check
    """
    scheme: str
    host: str
    grpc_host: str
    auth: Optional[AuthCredential] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    startup_timeout: Optional[timedelta] = None

    @property
    def secure(self) -> bool:
        return self.scheme == "https"

    def http_endpoint(self) -> Tuple[str, int]:
        return split_host_port(self.host, DEFAULT_HTTP_PORTS.get(self.scheme, 80))

    def grpc_endpoint(self) -> Tuple[str, int]:
        return split_host_port(self.grpc_host, DEFAULT_GRPC_PORTS.get(self.scheme, 50051))


def split_host_port(hostport: str, default_port: int) -> Tuple[str, int]:
    """
    Split "host:port" into its parts; bracketed IPv6 literals are supported.

    A missing or non-numeric port falls back to `default_port`.
    """
    if hostport.startswith("["):
        end = hostport.find("]")
        if end != -1:
            host = hostport[1:end]
            rest = hostport[end + 1:]
            if rest.startswith(":") and rest[1:].isdigit():
                return host, int(rest[1:])
            return host, default_port
    host, sep, port = hostport.rpartition(":")
    if sep and port.isdigit() and host:
        return host, int(port)
    return hostport, default_port


def _has_port(hostport: str) -> bool:
    return ":" in hostport


def _strip_scheme(host: str) -> Tuple[str, Optional[str]]:
    lowered = host.lower()
    for prefix, scheme in _SCHEME_PREFIXES:
        if lowered.startswith(prefix):
            return host[len(prefix):], scheme
    return host, None


def _headers_from(cfg: Mapping[str, Any]) -> Dict[str, str]:
    raw = get_mapping(cfg, "headers")
    if raw is None:
        return {}
    headers: Dict[str, str] = {}
    for name, value in raw.items():
        if not isinstance(value, str):
            raise TypeMismatch(
                f"headers[{name!r}] must be a string, got {type(value).__name__}",
                details={"field": "headers", "header": str(name)},
            )
        headers[str(name)] = value
    return headers


def resolve_endpoint(cfg: Mapping[str, Any]) -> ClientIdentity:
    """
    Build a ClientIdentity from a raw configuration mapping.

    Raises ConfigError when `host` is missing, when no gRPC host is given
    for a host outside the managed cloud, or when `timeout` is not a finite
    number of seconds that fits a timedelta.
    """
    scheme = get_string(cfg, "scheme") or "http"

    host = cfg.get("host")
    if not isinstance(host, str) or not host:
        raise ConfigError("host is required in config", details={"field": "host"})

    host, prefixed_scheme = _strip_scheme(host)
    if prefixed_scheme is not None:
        scheme = prefixed_scheme

    is_cloud = CLOUD_DOMAIN_MARKER in host

    grpc_host = get_string(cfg, "grpcHost")
    if not grpc_host:
        if not is_cloud:
            raise ConfigError("grpcHost is required in config", details={"field": "grpcHost"})
        grpc_host = CLOUD_GRPC_PREFIX + host
        scheme = "https"

    if is_cloud and not _has_port(host):
        host = f"{host}:{CLOUD_DEFAULT_PORT}"
        if not _has_port(grpc_host):
            grpc_host = f"{grpc_host}:{CLOUD_DEFAULT_PORT}"
        scheme = "https"

    auth: Optional[AuthCredential] = None
    token = get_string(cfg, "authToken")
    api_key = get_string(cfg, "apiKey")
    if token:
        auth = AuthCredential(kind="bearer", value=token)
    elif api_key:
        auth = AuthCredential(kind="api_key", value=api_key)

    identity = ClientIdentity(
        scheme=scheme,
        host=host,
        grpc_host=grpc_host,
        auth=auth,
        headers=_headers_from(cfg),
        startup_timeout=_startup_timeout(cfg.get("timeout")),
    )
    logger.debug(
        "resolved endpoint scheme=%s host=%s grpc_host=%s auth=%s",
        identity.scheme,
        identity.host,
        identity.grpc_host,
        identity.auth.kind if identity.auth else None,
    )
    return identity


def _startup_timeout(value: Any) -> Optional[timedelta]:
    try:
        seconds = to_float(value)
        if seconds is None:
            return None
        if math.isfinite(seconds):
            return timedelta(seconds=seconds)
    except OverflowError:
        pass
    raise ConfigError(f"timeout out of range: {value!r}", details={"field": "timeout"})


def resolve_endpoint_from_env(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientIdentity:
    """
    Resolve an identity from WEAVIATE_* environment variables.

    Keys present in `overrides` take precedence over the environment.
    """
    env = os.environ if environ is None else environ
    cfg: Dict[str, Any] = {}
    for key, var in ENV_KEYS.items():
        value = env.get(var)
        if value:
            cfg[key] = value
    if "timeout" in cfg:
        try:
            cfg["timeout"] = float(cfg["timeout"])
        except ValueError:
            logger.warning("ignoring non-numeric %s=%r", ENV_KEYS["timeout"], cfg["timeout"])
            del cfg["timeout"]
    cfg.update(overrides or {})
    return resolve_endpoint(cfg)


__all__ = [
    "CLOUD_DOMAIN_MARKER",
    "AuthCredential",
    "ClientIdentity",
    "split_host_port",
    "resolve_endpoint",
    "resolve_endpoint_from_env",
]
