# loadbridge/core/error_context.py
# SPDX-License-Identifier: Apache-2.0

"""
Diagnostic context on exceptions that pass through the bridge.

Errors raised by the native database client are re-raised unchanged. Before
they leave the bridge, the operation that failed is recorded on the exception
object itself, so a load-test harness can tell which call broke without
parsing messages:

    try:
        client.batch_delete("Article", options)
    except Exception as exc:
        ctx = get_context(exc)
        ctx["operation"]   # "batch_delete"
        ctx["component"]   # "vectordb_weaviate"

Two attributes are set:

* `__loadbridge_context__` (canonical, merged across calls)
* `__<component>_context__` (same mapping under a component-specific name)

Attaching context never raises and never changes the exception's type,
message or traceback.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CANONICAL_ATTR = "__loadbridge_context__"


def _component_attr(component: str) -> str:
    return f"__{component}_context__"


def attach_context(exc: BaseException, component: str, **context: Any) -> None:
    """
    Merge `context` into the exception's diagnostic context.

    Keys from earlier calls are kept unless overwritten; `component` is set
    once and never replaced. Do not pass tenant names or credentials; hash
    them first.
    """
    try:
        merged: Dict[str, Any] = {}
        existing = getattr(exc, CANONICAL_ATTR, None)
        if isinstance(existing, Mapping):
            merged.update(existing)
        merged.setdefault("component", component)
        merged.update(context)

        setattr(exc, CANONICAL_ATTR, merged)
        setattr(exc, _component_attr(component), merged)
    except Exception as attachment_error:  # noqa: BLE001
        # Some exception types reject attribute assignment.
        logger.debug(
            "Failed to attach error context to %s: %s",
            type(exc).__name__,
            attachment_error,
            extra={"component": component},
        )


def get_context(exc: BaseException, *, component: Optional[str] = None) -> Mapping[str, Any]:
    """
    Return the attached context, or {} when there is none.

    With `component`, the component-specific attribute is preferred.
    """
    if component:
        ctx = getattr(exc, _component_attr(component), None)
        if isinstance(ctx, Mapping):
            return ctx
    ctx = getattr(exc, CANONICAL_ATTR, None)
    if isinstance(ctx, Mapping):
        return ctx
    return {}


def has_context(exc: BaseException, *, component: Optional[str] = None) -> bool:
    return len(get_context(exc, component=component)) > 0


__all__ = [
    "attach_context",
    "get_context",
    "has_context",
]
