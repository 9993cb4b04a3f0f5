"""Deterministic ordering of alarm rows."""

from __future__ import annotations

from zbxcsv.core.types import OutputRow

# Never appears inside a column value.
_TIEBREAK_SEPARATOR = "\0"


def row_sort_key(row: OutputRow) -> tuple[int, int, str]:
    """Unsuppressed first, then newest first, then NUL-joined values ascending."""
    return (
        1 if row.suppressed else 0,
        -row.clock,
        _TIEBREAK_SEPARATOR.join(row.values()),
    )


def sort_rows(rows: list[OutputRow]) -> list[OutputRow]:
    """Return a new, totally ordered list; the input is left untouched."""
    return sorted(rows, key=row_sort_key)
