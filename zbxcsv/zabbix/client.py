"""Async JSON-RPC client for the three read-only Zabbix queries."""

from __future__ import annotations

import json
from types import TracebackType
from typing import Any

import httpx
import structlog

from zbxcsv.core.config import ZabbixConfig, get_settings
from zbxcsv.core.types import Event, Problem, Severity, Trigger
from zbxcsv.zabbix.exceptions import (
    ZabbixApiError,
    ZabbixConnectionError,
    ZabbixParseError,
    extract_request_id,
)

logger = structlog.stdlib.get_logger()

_PROBLEM_OUTPUT = [
    "eventid",
    "r_eventid",
    "objectid",
    "clock",
    "ns",
    "severity",
    "suppressed",
    "name",
]
_EVENT_OUTPUT = ["eventid", "acknowledged"]
_TRIGGER_OUTPUT = ["triggerid", "status", "error", "suppressed", "flags", "value"]
_TRIGGER_HOSTS = ["hostid", "host", "status"]
_TRIGGER_ITEMS = ["hostid", "status"]


def encode_request(method: str, params: dict[str, Any], request_id: Any) -> str:
    """Serialize a JSON-RPC 2.0 request body."""
    return json.dumps({
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": request_id,
    })


def _error_message(error: Any) -> str:
    """Pick the human-readable text out of a JSON-RPC error member.

    Zabbix puts the useful detail in ``data``; ``message`` is usually just
    "Invalid params." or similar.
    """
    if isinstance(error, dict):
        data = error.get("data")
        if data:
            return str(data)
        return str(error.get("message", ""))
    return str(error)


class ZabbixClient:
    """Async client for the Zabbix JSON-RPC API.

    Only the three queries needed for the alarm table are exposed. Each
    takes an explicit ``request_id`` so that a failure can be traced back
    to the request that caused it.

    Usage::

        async with ZabbixClient() as client:
            problems = await client.list_problems(request_id=1)
    """

    def __init__(self, config: ZabbixConfig | None = None) -> None:
        self._config = config or get_settings().zabbix
        self._http: httpx.AsyncClient | None = None

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def connected(self) -> bool:
        """Whether the HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout_secs),
            verify=self._config.verify_tls,
        )
        logger.info("zabbix_client_connected", url=self._config.url)

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
            logger.info("zabbix_client_closed")

    async def __aenter__(self) -> ZabbixClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def call(
        self,
        method: str,
        params: dict[str, Any],
        request_id: Any = 1,
        token: str | None = None,
        expect_list: bool = False,
    ) -> Any:
        """Issue one JSON-RPC request and return its ``result`` member.

        With ``expect_list`` a non-list result is a parse error.

        Raises:
            ZabbixConnectionError: transport failure or non-2xx status.
            ZabbixParseError: body is not a JSON-RPC response.
            ZabbixApiError: the response carries an ``error`` member.
        """
        body = encode_request(method, params, request_id)
        # Errors carry the id as parsed back out of what was actually sent.
        sent_id = extract_request_id(body)

        if self._http is None:
            raise ZabbixConnectionError("HTTP client not connected", sent_id)

        api_token = token or self._config.api_token.get_secret_value()
        headers = {"Content-Type": "application/json-rpc"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        logger.debug("zabbix_request", method=method, request_id=request_id)
        try:
            response = await self._http.post(self._config.url, content=body, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ZabbixConnectionError(
                f"Zabbix API returned {exc.response.status_code}", sent_id
            ) from exc
        except httpx.HTTPError as exc:
            raise ZabbixConnectionError(f"Zabbix API request failed: {exc}", sent_id) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ZabbixParseError("Zabbix API returned invalid JSON", sent_id) from exc

        if not isinstance(payload, dict):
            raise ZabbixParseError("Zabbix API returned a non-object response", sent_id)

        if "error" in payload:
            message = _error_message(payload["error"])
            logger.warning(
                "zabbix_api_error",
                method=method,
                request_id=request_id,
                error=message,
            )
            raise ZabbixApiError(message, sent_id)

        if "result" not in payload:
            raise ZabbixParseError("Zabbix API response has no result", sent_id)

        result = payload["result"]
        if expect_list and not isinstance(result, list):
            raise ZabbixParseError(f"{method} did not return a list", sent_id)
        return result

    async def list_problems(
        self,
        request_id: Any = 1,
        token: str | None = None,
    ) -> list[Problem]:
        """Open, non-recent trigger problems of disaster severity."""
        params: dict[str, Any] = {
            "output": _PROBLEM_OUTPUT,
            "source": 0,
            "object": 0,
            "recent": False,
            "severities": [int(Severity.DISASTER)],
        }
        raw = await self.call(
            "problem.get", params, request_id=request_id, token=token, expect_list=True,
        )
        return [Problem.model_validate(obj) for obj in raw]

    async def list_events(
        self,
        eventids: list[int],
        request_id: Any = 1,
        token: str | None = None,
    ) -> list[Event]:
        """Acknowledgement state for the given events.

        An empty id list returns ``[]`` without a round trip; ``event.get``
        treats a missing filter as "everything".
        """
        if not eventids:
            logger.debug("zabbix_request_skipped", method="event.get", reason="no_ids")
            return []
        params: dict[str, Any] = {
            "output": _EVENT_OUTPUT,
            "eventids": list(eventids),
        }
        raw = await self.call(
            "event.get", params, request_id=request_id, token=token, expect_list=True,
        )
        return [Event.model_validate(obj) for obj in raw]

    async def list_triggers(
        self,
        triggerids: list[int],
        request_id: Any = 1,
        token: str | None = None,
    ) -> list[Trigger]:
        """Trigger metadata, with hosts and items, for the given triggers.

        An empty id list returns ``[]`` without a round trip.
        """
        if not triggerids:
            logger.debug("zabbix_request_skipped", method="trigger.get", reason="no_ids")
            return []
        params: dict[str, Any] = {
            "output": _TRIGGER_OUTPUT,
            "selectHosts": _TRIGGER_HOSTS,
            "selectItems": _TRIGGER_ITEMS,
            "triggerids": list(triggerids),
        }
        raw = await self.call(
            "trigger.get", params, request_id=request_id, token=token, expect_list=True,
        )
        return [Trigger.model_validate(obj) for obj in raw]
