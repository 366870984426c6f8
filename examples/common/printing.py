# SPDX-License-Identifier: Apache-2.0
"""
Console helpers shared by the vectordb examples.

Includes:
  • box        : one-line section header
  • print_kv   : aligned key/value output
  • print_json : bridge results as JSON
  • print_table: fixed-width table for lists of flat dicts
"""
from __future__ import annotations

import json
import shutil
from typing import Any, Iterable, List, Mapping, Sequence

__all__ = ["box", "print_kv", "print_json", "print_table"]


def _term_width(default: int = 100) -> int:
    cols = shutil.get_terminal_size((default, 20)).columns
    return max(40, min(cols, 200))


def _cell(x: Any) -> str:
    if isinstance(x, (dict, list, tuple)):
        return json.dumps(x, ensure_ascii=False, default=str)
    return str(x)


def box(title: str, *, fill: str = "─") -> None:
    width = _term_width()
    title = f" {title.strip()} "
    bar = fill * min(len(title), width - 4)
    print(f"\n┌{bar}┐")
    print(f"│{title}│")
    print(f"└{bar}┘\n")


def print_kv(pairs: Mapping[str, Any], *, indent: int = 2) -> None:
    """Print aligned key/value pairs."""
    if not pairs:
        return
    k_width = max(len(str(k)) for k in pairs)
    for k, v in pairs.items():
        print(" " * indent + f"{str(k).rjust(k_width)}: {v}")


def print_json(obj: Any, *, pretty: bool = True) -> None:
    """
    Print a bridge result as JSON.

    Values the json module cannot encode (datetimes, UUIDs) fall back to str().
    """
    if pretty:
        print(json.dumps(obj, indent=2, ensure_ascii=False, default=str))
    else:
        print(json.dumps(obj, separators=(",", ":"), ensure_ascii=False, default=str))


def print_table(rows: Iterable[Mapping[str, Any]], headers: Sequence[str]) -> None:
    """Print dict rows under `headers`; overlong cells are truncated with '…'."""
    data: List[List[str]] = [[_cell(r.get(h, "")) for h in headers] for r in rows]
    if not data:
        return
    widths = [max(len(h), *(len(row[i]) for row in data)) for i, h in enumerate(headers)]
    limit = _term_width()
    total = sum(widths) + 3 * (len(headers) - 1)
    if total > limit:
        scale = (limit - 3 * (len(headers) - 1)) / max(1, sum(widths))
        widths = [max(4, int(w * scale)) for w in widths]

    def fit(cell: str, w: int) -> str:
        return cell.ljust(w) if len(cell) <= w else cell[: w - 1] + "…"

    print(" | ".join(fit(h, widths[i]) for i, h in enumerate(headers)))
    print("-+-".join("-" * w for w in widths))
    for row in data:
        print(" | ".join(fit(cell, widths[i]) for i, cell in enumerate(row)))
