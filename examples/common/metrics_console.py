# SPDX-License-Identifier: Apache-2.0
"""
A console MetricsSink for the examples.

Prints one line per bridge operation:

    [OBS] ✓ vectordb_weaviate.batch_create 12.345ms code=OK {"collection": "..."}
"""

from __future__ import annotations

import json
import sys
import threading
from typing import Any, Mapping, Optional, TextIO

__all__ = ["ConsoleMetrics"]

_LOCK = threading.Lock()


class ConsoleMetrics:
    """
    Example metrics sink that writes structured lines to a stream.

    Args:
        output_file: Stream to write to (default: stdout).
        max_extra_fields: Extra fields beyond this count are dropped.
    """

    def __init__(self, *, output_file: Optional[TextIO] = None, max_extra_fields: int = 10) -> None:
        self.output_file = output_file or sys.stdout
        self.max_extra_fields = max_extra_fields

    def observe(
        self,
        *,
        component: str,
        op: str,
        ms: float,
        ok: bool,
        code: str = "OK",
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        mark = "✓" if ok else "✗"
        line = f"[OBS] {mark} {component}.{op} {max(0.0, float(ms)):.3f}ms code={code or 'OK'}"
        if extra:
            kept = dict(list(extra.items())[: self.max_extra_fields])
            line += " " + json.dumps(kept, separators=(",", ":"), default=str)
        with _LOCK:
            self.output_file.write(line + "\n")
            self.output_file.flush()
