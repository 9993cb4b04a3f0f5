"""Alarm pipeline — fetch, index, assemble, sort and render one table.

A pipeline object serves exactly one request. It holds no cache and keeps
nothing once :meth:`AlarmPipeline.render` returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from zbxcsv.alarms.assembler import assemble_rows
from zbxcsv.alarms.index import build_ack_set, build_problem_index
from zbxcsv.alarms.serializer import render_error, render_rows
from zbxcsv.alarms.sorter import sort_rows
from zbxcsv.core.types import OutputRow
from zbxcsv.zabbix.client import ZabbixClient
from zbxcsv.zabbix.exceptions import ZabbixError

logger = structlog.stdlib.get_logger()

# Reported when a fault happens before any request was sent.
FALLBACK_REQUEST_ID = -1

PROBLEMS_REQUEST_ID = 1
EVENTS_REQUEST_ID = 2
TRIGGERS_REQUEST_ID = 3


def _single_line(exc: Exception) -> str:
    """Collapse an exception message onto one line of the error table.

    Validation errors span several lines; the table has exactly two.
    """
    return " ".join(str(exc).split())


@dataclass(frozen=True)
class AlarmTable:
    """Rendered table plus what the transport needs to know about it."""

    body: str
    ok: bool
    row_count: int = 0

    @property
    def content(self) -> bytes:
        return self.body.encode("utf-8")


class AlarmPipeline:
    """Runs the three Zabbix queries in order and turns them into a table.

    Usage::

        pipeline = AlarmPipeline(client, token="...")
        table = await pipeline.render(origin="192.0.2.10")
    """

    def __init__(self, client: ZabbixClient, token: str | None = None) -> None:
        self._client = client
        self._token = token
        self._last_request_id: Any = FALLBACK_REQUEST_ID

    @property
    def last_request_id(self) -> Any:
        return self._last_request_id

    async def build_rows(self) -> list[OutputRow]:
        """Fetch and combine the upstream data into sorted rows.

        Raises whatever the client or the models raise; :meth:`render` is
        the place that turns faults into the error table.
        """
        self._last_request_id = PROBLEMS_REQUEST_ID
        problems = await self._client.list_problems(
            request_id=PROBLEMS_REQUEST_ID, token=self._token,
        )
        index = build_problem_index(problems)
        if index.empty:
            logger.debug("alarm_no_open_problems")
            return []

        self._last_request_id = EVENTS_REQUEST_ID
        events = await self._client.list_events(
            index.eventids, request_id=EVENTS_REQUEST_ID, token=self._token,
        )
        acked = build_ack_set(events)

        self._last_request_id = TRIGGERS_REQUEST_ID
        triggers = await self._client.list_triggers(
            index.triggerids, request_id=TRIGGERS_REQUEST_ID, token=self._token,
        )

        rows = sort_rows(assemble_rows(triggers, index, acked))
        logger.info(
            "alarm_rows_built",
            problems=len(problems),
            acknowledged=len(acked),
            triggers=len(triggers),
            rows=len(rows),
        )
        return rows

    async def render(self, origin: str) -> AlarmTable:
        """Return the alarm table, or the error table if anything failed.

        Faults raised while rendering the error table itself propagate.
        """
        try:
            rows = await self.build_rows()
        except ZabbixError as exc:
            logger.warning(
                "alarm_pipeline_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                request_id=exc.request_id,
            )
            return AlarmTable(
                body=render_error(str(exc), exc.request_id, origin, code=exc.code),
                ok=False,
            )
        except Exception as exc:
            logger.exception(
                "alarm_pipeline_failed",
                error_type=type(exc).__name__,
                request_id=self._last_request_id,
            )
            return AlarmTable(
                body=render_error(_single_line(exc), self._last_request_id, origin),
                ok=False,
            )
        return AlarmTable(body=render_rows(rows), ok=True, row_count=len(rows))
