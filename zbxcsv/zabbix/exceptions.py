"""Exception hierarchy for the Zabbix JSON-RPC client."""

from __future__ import annotations

import json
from typing import Any


def extract_request_id(body: str | bytes | None) -> Any:
    """Return the ``id`` member of a serialized JSON-RPC request.

    Anything that does not decode to a JSON object yields ``None``.
    """
    if body is None:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return data.get("id")


class ZabbixError(Exception):
    """Base exception for all Zabbix client errors.

    ``request_id`` is the id of the outbound request that failed. ``code``
    is what the error table reports; every fault currently maps to ``1``.
    """

    code: int = 1

    def __init__(self, message: str, request_id: Any = None) -> None:
        super().__init__(message)
        self.request_id = request_id


class ZabbixConnectionError(ZabbixError):
    """Failed to reach the JSON-RPC endpoint, or it answered with an HTTP error."""


class ZabbixParseError(ZabbixError):
    """The endpoint answered with something that is not a JSON-RPC response."""


class ZabbixApiError(ZabbixError):
    """The JSON-RPC response carried an ``error`` member."""
