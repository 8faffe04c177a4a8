"""Plain-text table rendering for CLI listings.

Cells are either plain values or ``{"value": ..., "color": ...}`` mappings.
Colors are ANSI escapes and are only emitted when the output is a terminal
and NO_COLOR is unset.

Last updated: 2026-10-18
"""

from __future__ import annotations

import os
import sys
from typing import Dict, Mapping, Optional, Sequence

_COLORS = {
    "gray": "\033[90m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
}
_RESET = "\033[0m"


def color_enabled(stream=None) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    stream = stream if stream is not None else sys.stderr
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def colorize(text: str, color: Optional[str], *, enabled: bool) -> str:
    if not enabled or not color or color not in _COLORS:
        return text
    return f"{_COLORS[color]}{text}{_RESET}"


def cell_value(cell: object) -> str:
    if isinstance(cell, Mapping):
        return str(cell.get("value", ""))
    return "" if cell is None else str(cell)


def cell_color(cell: object) -> Optional[str]:
    if isinstance(cell, Mapping):
        color = cell.get("color")
        return str(color) if color else None
    return None


def compute_column_widths(
    columns: Sequence[str],
    rows: Sequence[Mapping[str, object]],
) -> Dict[str, int]:
    """Return the display width of each column, header included."""
    widths = {col: len(col) for col in columns}
    for row in rows:
        for col in columns:
            widths[col] = max(widths[col], len(cell_value(row.get(col))))
    return widths


def format_table(
    title: Optional[str],
    columns: Sequence[str],
    rows: Sequence[Mapping[str, object]],
    *,
    width: Optional[int] = None,
    colors: Optional[Mapping[str, str]] = None,
    title_color: Optional[str] = None,
    col_widths: Optional[Mapping[str, int]] = None,
    use_color: Optional[bool] = None,
) -> str:
    """Render rows as an aligned text table.

    Args:
        title: Optional heading printed above the table.
        columns: Column keys, also used as header labels.
        rows: Row mappings keyed by column.
        width: Maximum line width; the last column is truncated to fit.
        colors: Default color per column.
        title_color: Color for the heading.
        col_widths: Minimum widths to align several tables.
        use_color: Force colors on or off; auto-detected when None.

    Returns:
        The rendered table without a trailing newline.
    """
    if use_color is None:
        use_color = color_enabled()
    colors = colors or {}
    widths = compute_column_widths(columns, rows)
    if col_widths:
        for col, value in col_widths.items():
            if col in widths:
                widths[col] = max(widths[col], value)
    if width is not None and columns:
        fixed = sum(widths[col] + 2 for col in columns[:-1])
        last = columns[-1]
        widths[last] = max(len(last), min(widths[last], width - fixed))

    lines = []
    if title:
        lines.append(colorize(title, title_color, enabled=use_color))
    header = "  ".join(col.upper().ljust(widths[col]) for col in columns)
    lines.append(header.rstrip())
    lines.append("  ".join("-" * widths[col] for col in columns))
    for row in rows:
        parts = []
        for col in columns:
            cell = row.get(col)
            text = cell_value(cell)
            if len(text) > widths[col]:
                text = text[: max(widths[col] - 1, 0)] + "~"
            padded = text.ljust(widths[col])
            color = cell_color(cell) or colors.get(col)
            parts.append(colorize(padded, color, enabled=use_color))
        lines.append("  ".join(parts).rstrip())
    return "\n".join(lines)


__all__ = [
    "cell_value",
    "color_enabled",
    "colorize",
    "compute_column_widths",
    "format_table",
]
