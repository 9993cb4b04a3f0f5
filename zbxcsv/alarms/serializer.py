"""Semicolon-separated text tables for the display client.

Two shapes exist and a reader must tell them apart by the header line:

Success::

    clock;severity;suppressed;hostid;host;name
    1733896822;5;0;12847;;

Failure::

    jsonrpc;error.code;error.message;error.data;id
    2.0;1;connection refused;;7@192.0.2.10

Values are written verbatim; there is no quoting or escaping.
"""

from __future__ import annotations

from typing import Any

from zbxcsv.core.types import OutputRow

FIELD_SEPARATOR = ";"
LINE_TERMINATOR = "\n"

ERROR_COLUMNS = ["jsonrpc", "error.code", "error.message", "error.data", "id"]
JSONRPC_VERSION = "2.0"
DEFAULT_ERROR_CODE = 1


def _line(values: list[str]) -> str:
    return FIELD_SEPARATOR.join(values) + LINE_TERMINATOR


def render_rows(rows: list[OutputRow]) -> str:
    """Render sorted rows as header + one line per row.

    No rows means no header either: the result is the empty string.
    """
    if not rows:
        return ""
    # Column names are taken from the first row.
    parts = [_line(rows[0].columns())]
    for row in rows:
        parts.append(_line(row.values()))
    return "".join(parts)


def _render_id(request_id: Any) -> str:
    if request_id is None:
        return ""
    return str(request_id)


def render_error(
    message: str,
    request_id: Any,
    origin: str,
    code: int = DEFAULT_ERROR_CODE,
) -> str:
    """Render the two-line error table.

    The ``id`` column carries ``<id>@<origin>`` so the caller can correlate
    with server logs. A ``None`` id renders as nothing before the ``@``.
    """
    data_line = [
        JSONRPC_VERSION,
        str(code),
        message,
        "",
        f"{_render_id(request_id)}@{origin}",
    ]
    return _line(ERROR_COLUMNS) + _line(data_line)


def parse_table(text: str) -> list[dict[str, str]]:
    """Read either table shape back into ``{column: value}`` dicts.

    The first non-empty line is the header. Lines whose field count does not
    match the header are skipped, the same way the display drops them.
    """
    lines = [line for line in text.split(LINE_TERMINATOR) if line]
    if not lines:
        return []
    header = lines[0].split(FIELD_SEPARATOR)
    records: list[dict[str, str]] = []
    for line in lines[1:]:
        values = line.split(FIELD_SEPARATOR)
        if len(values) != len(header):
            continue
        records.append(dict(zip(header, values)))
    return records


def is_error_table(text: str) -> bool:
    """Whether *text* is the failure shape rather than the alarm table."""
    header, _, _ = text.partition(LINE_TERMINATOR)
    return header.split(FIELD_SEPARATOR) == ERROR_COLUMNS
