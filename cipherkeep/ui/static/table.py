#!/usr/bin/env python3
# cipherkeep/ui/static/table.py
from __future__ import annotations

from typing import List, Optional, Sequence

from cipherkeep.ui.utils import print_line, strip_ansi


def _visible_len(cell: str) -> int:
    return len(strip_ansi(cell))


def _column_widths(rows: Sequence[Sequence[str]]) -> List[int]:
    """Visual width per column, ignoring ANSI sequences."""
    widths: List[int] = []
    for row in rows:
        for idx, cell in enumerate(row):
            if idx >= len(widths):
                widths.append(_visible_len(cell))
            else:
                widths[idx] = max(widths[idx], _visible_len(cell))
    return widths


def format_table(
    rows: Sequence[Sequence[object]],
    headers: Optional[Sequence[object]] = None,
    *,
    padding: int = 1,
    border: bool = True,
) -> str:
    """Return an ASCII table string (ANSI-safe width calculation)."""
    body = [[str(cell) for cell in row] for row in rows]
    head = [str(h) for h in headers] if headers is not None else None
    widths = _column_widths(([head] if head else []) + body)
    if not widths:
        return ""

    pad = " " * padding

    def render_row(row: Sequence[str]) -> str:
        cells = [
            f"{pad}{cell}{' ' * (widths[i] - _visible_len(cell))}{pad}"
            for i, cell in enumerate(row)
        ]
        return "|" + "|".join(cells) + "|"

    rule = "-" * (sum(widths) + padding * 2 * len(widths) + len(widths) + 1)
    lines: List[str] = [rule] if border else []
    if head:
        lines.append(render_row(head))
        lines.append(render_row(["-" * w for w in widths]))
    lines.extend(render_row(row) for row in body)
    if border:
        lines.append(rule)
    return "\n".join(lines)


def print_table(
    rows: Sequence[Sequence[object]],
    headers: Optional[Sequence[object]] = None,
    *,
    padding: int = 1,
    border: bool = True,
    file=None,
) -> None:
    print_line(format_table(rows, headers, padding=padding, border=border), file=file)
