"""Helpers for reading the tabular output of system utilities.

Utilities such as ``route -n``, ``lsmod`` and ``systemctl list-sockets``
print whitespace-aligned tables. These helpers detect the delimiter,
split the output into rows, and address columns by header name (or by
position where a header contains spaces and cannot be split reliably).

Example:
-------
    >>> from hostcheck import shell_util
    >>> table = shell_util.split_table("Module  Size  Used by\\nvfat  20480  1")
    >>> shell_util.column_by_header(table, "Module")
    ['vfat']

"""

from __future__ import annotations

import re
from collections import Counter
from typing import Sequence

from hostcheck.errors import InfrastructureError

# ── Table splitting ───────────────────────────────────────────────────────

_WHITESPACE = re.compile(r"\s+")

# Candidate delimiters, tried in order. None means "runs of whitespace".
DELIMITERS: tuple[str | None, ...] = ("\t", ",", "|", None)


def _split_line(line: str, delimiter: str | None) -> list[str]:
    if delimiter is None:
        return line.split()
    return [cell.strip() for cell in line.split(delimiter)]


def _table_lines(text: str) -> list[str]:
    """Return the contiguous block of non-blank lines at the top of ``text``.

    Many utilities print a legend after a blank line; it is not part of
    the table.
    """
    lines: list[str] = []
    for line in text.splitlines():
        if not line.strip():
            if lines:
                break
            continue
        lines.append(line)
    return lines


def detect_delimiter(lines: Sequence[str]) -> str | None:
    """Pick the delimiter that splits the most lines into the same number of columns.

    Delimiters that never produce more than one column are ignored.
    Whitespace is the fallback.
    """
    best: str | None = None
    best_score = 0.0
    for delimiter in DELIMITERS:
        widths = Counter(len(_split_line(line, delimiter)) for line in lines)
        if not widths:
            continue
        width, hits = widths.most_common(1)[0]
        if width < 2:
            continue
        score = hits / len(lines)
        if score > best_score:
            best, best_score = delimiter, score
    return best


def split_table(text: str) -> list[list[str]]:
    """Split utility output into rows of cells using the detected delimiter."""
    lines = _table_lines(text)
    delimiter = detect_delimiter(lines)
    return [_split_line(line, delimiter) for line in lines]


def split_fixed_width(text: str) -> list[list[str]]:
    """Split a column-aligned table at the offsets where its headers start.

    For tables whose cells may contain single spaces, such as the
    ``kobject-uevent 1`` netlink entries of ``systemctl list-sockets``.
    Every row has one cell per header; cells past the end of a short
    line are empty.
    """
    lines = _table_lines(text)
    if not lines:
        return []
    starts = [m.start() for m in re.finditer(r"\S+", lines[0])]
    bounds = list(zip(starts, starts[1:] + [None]))
    return [[line[start:end].strip() for start, end in bounds] for line in lines]


# ── Column access ─────────────────────────────────────────────────────────


def column_by_header(table: Sequence[Sequence[str]], header: str) -> list[str]:
    """Return the values under ``header``; the first row is the header row.

    Rows too short to reach the column are skipped.

    Raises:
        InfrastructureError: If the table is empty or has no such header.

    """
    if not table:
        raise InfrastructureError(f"Cannot read column {header!r}: table is empty")
    headers = list(table[0])
    if header not in headers:
        raise InfrastructureError(
            f"Column {header!r} not found in table headers {headers}",
            context={"header": header, "headers": headers},
        )
    return column(table[1:], headers.index(header))


def column(rows: Sequence[Sequence[str]], index: int) -> list[str]:
    """Return the cell at ``index`` from every row long enough to have one."""
    return [row[index] for row in rows if len(row) > index]
