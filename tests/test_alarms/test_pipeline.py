"""Tests for AlarmPipeline — end-to-end scenarios against a mocked client."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from zbxcsv.alarms.pipeline import (
    EVENTS_REQUEST_ID,
    FALLBACK_REQUEST_ID,
    PROBLEMS_REQUEST_ID,
    TRIGGERS_REQUEST_ID,
    AlarmPipeline,
)
from zbxcsv.alarms.serializer import is_error_table, parse_table
from zbxcsv.core.config import ZabbixConfig
from zbxcsv.core.types import Event, Host, Problem, Trigger
from zbxcsv.zabbix.client import ZabbixClient
from zbxcsv.zabbix.exceptions import ZabbixApiError, ZabbixConnectionError

ORIGIN = "192.0.2.10"
HEADER = "clock;severity;suppressed;hostid;host;name\n"
ERROR_HEADER = "jsonrpc;error.code;error.message;error.data;id\n"

# ── Helpers ─────────────────────────────────────────────────────


def _make_client(
    problems: list[Problem] | None = None,
    events: list[Event] | None = None,
    triggers: list[Trigger] | None = None,
) -> AsyncMock:
    client = AsyncMock(spec=ZabbixClient)
    client.list_problems.return_value = problems or []
    client.list_events.return_value = events or []
    client.list_triggers.return_value = triggers or []
    return client


def _scenario_a(**overrides: Any) -> dict[str, Any]:
    """Problem 1 on trigger 10, one enabled host 5, unacknowledged."""
    data: dict[str, Any] = {
        "problems": [Problem(eventid=1, objectid=10, clock=100, severity=5, suppressed=0)],
        "events": [Event(eventid=1, acknowledged=False)],
        "triggers": [Trigger(triggerid=10, status=0, hosts=[Host(hostid=5, status=0)])],
    }
    data.update(overrides)
    return data


# ── Scenarios ──────────────────────────────────────────────────


class TestScenarios:
    async def test_scenario_a_single_open_problem(self) -> None:
        client = _make_client(**_scenario_a())
        table = await AlarmPipeline(client).render(ORIGIN)
        assert table.ok
        assert table.row_count == 1
        assert table.body == HEADER + "100;5;0;5;;\n"

    async def test_scenario_b_acknowledged(self) -> None:
        client = _make_client(**_scenario_a(events=[Event(eventid=1, acknowledged=True)]))
        table = await AlarmPipeline(client).render(ORIGIN)
        assert table.body == HEADER + "100;5;1;5;;\n"

    async def test_scenario_c_disabled_trigger(self) -> None:
        client = _make_client(**_scenario_a(
            triggers=[Trigger(triggerid=10, status=1, hosts=[Host(hostid=5, status=0)])],
        ))
        table = await AlarmPipeline(client).render(ORIGIN)
        assert table.ok
        assert table.body == ""
        assert table.content == b""

    async def test_scenario_d_upstream_fault(self) -> None:
        client = _make_client()
        client.list_problems.side_effect = ZabbixApiError("connection refused", request_id=7)
        table = await AlarmPipeline(client).render(ORIGIN)
        assert not table.ok
        assert table.body == ERROR_HEADER + f"2.0;1;connection refused;;7@{ORIGIN}\n"


# ── Query sequencing ───────────────────────────────────────────


class TestQuerySequence:
    async def test_no_problems_skips_followup_queries(self) -> None:
        client = _make_client(problems=[])
        table = await AlarmPipeline(client).render(ORIGIN)
        assert table.body == ""
        client.list_events.assert_not_called()
        client.list_triggers.assert_not_called()

    async def test_ids_passed_to_followup_queries(self) -> None:
        problems = [
            Problem(eventid=1, objectid=10, clock=100, severity=5),
            Problem(eventid=2, objectid=20, clock=200, severity=5),
            Problem(eventid=3, objectid=10, clock=300, severity=5),
        ]
        client = _make_client(problems=problems)
        await AlarmPipeline(client, token="tok").render(ORIGIN)

        client.list_problems.assert_awaited_once_with(request_id=PROBLEMS_REQUEST_ID, token="tok")
        client.list_events.assert_awaited_once_with(
            [1, 2, 3], request_id=EVENTS_REQUEST_ID, token="tok",
        )
        client.list_triggers.assert_awaited_once_with(
            [10, 20], request_id=TRIGGERS_REQUEST_ID, token="tok",
        )

    async def test_fallback_id_before_any_request(self) -> None:
        pipeline = AlarmPipeline(_make_client())
        assert pipeline.last_request_id == FALLBACK_REQUEST_ID


# ── Full pipeline behaviour ────────────────────────────────────


class TestPipelineRows:
    async def test_sorted_and_filtered(self) -> None:
        problems = [
            Problem(eventid=1, objectid=10, clock=100, severity=5),
            Problem(eventid=2, objectid=10, clock=300, severity=5, suppressed=1),
            Problem(eventid=3, objectid=20, clock=200, severity=5),
            Problem(eventid=4, objectid=30, clock=999, severity=5),
        ]
        events = [Event(eventid=3, acknowledged=True)]
        triggers = [
            Trigger(triggerid=10, hosts=[Host(hostid=5), Host(hostid=6, status=1)]),
            Trigger(triggerid=20, hosts=[Host(hostid=7)]),
            Trigger(triggerid=30, status=1, hosts=[Host(hostid=8)]),
        ]
        client = _make_client(problems=problems, events=events, triggers=triggers)
        table = await AlarmPipeline(client).render(ORIGIN)

        records = parse_table(table.body)
        assert [(r["suppressed"], r["clock"], r["hostid"]) for r in records] == [
            ("0", "100", "5"),
            ("1", "300", "5"),
            ("1", "200", "7"),
        ]
        assert all(r["host"] == "" and r["name"] == "" for r in records)

    async def test_problem_repeated_per_enabled_host(self) -> None:
        client = _make_client(
            problems=[Problem(eventid=1, objectid=10, clock=100, severity=5)],
            triggers=[Trigger(triggerid=10, hosts=[Host(hostid=5), Host(hostid=6)])],
        )
        table = await AlarmPipeline(client).render(ORIGIN)
        assert table.body == HEADER + "100;5;0;5;;\n100;5;0;6;;\n"

    async def test_build_rows_is_repeatable(self) -> None:
        client = _make_client(**_scenario_a())
        first = await AlarmPipeline(client).render(ORIGIN)
        second = await AlarmPipeline(client).render(ORIGIN)
        assert first.body == second.body


# ── Failure path ───────────────────────────────────────────────


class TestPipelineFailures:
    async def test_trigger_fault_reports_its_id(self) -> None:
        client = _make_client(**_scenario_a())
        client.list_triggers.side_effect = ZabbixApiError("Not authorized.", request_id=3)
        table = await AlarmPipeline(client).render(ORIGIN)
        assert table.body.splitlines()[1] == f"2.0;1;Not authorized.;;3@{ORIGIN}"

    async def test_connection_fault(self) -> None:
        client = _make_client(**_scenario_a())
        client.list_events.side_effect = ZabbixConnectionError("timed out", request_id=2)
        table = await AlarmPipeline(client).render("127.0.0.1")
        assert is_error_table(table.body)
        assert table.body.splitlines()[1] == "2.0;1;timed out;;2@127.0.0.1"

    async def test_null_id_renders_empty(self) -> None:
        client = _make_client()
        client.list_problems.side_effect = ZabbixApiError("bad", request_id=None)
        table = await AlarmPipeline(client).render(ORIGIN)
        assert table.body.splitlines()[1] == f"2.0;1;bad;;@{ORIGIN}"

    async def test_unexpected_fault_uses_last_request_id(self) -> None:
        client = _make_client(**_scenario_a())
        client.list_triggers.side_effect = ValueError("bad trigger payload")
        pipeline = AlarmPipeline(client)
        table = await pipeline.render(ORIGIN)
        assert not table.ok
        assert table.body.splitlines()[1] == (
            f"2.0;1;bad trigger payload;;{TRIGGERS_REQUEST_ID}@{ORIGIN}"
        )

    async def test_schema_drift_stays_on_one_line(self) -> None:
        url = "https://zbx.test/api_jsonrpc.php"
        drifted = {
            "jsonrpc": "2.0",
            "result": [{
                "eventid": "1", "objectid": "10", "clock": "notanint",
                "severity": "5", "suppressed": "0",
            }],
            "id": 1,
        }
        async with ZabbixClient(config=ZabbixConfig(url=url)) as client:
            with patch.object(client._http, "post", new_callable=AsyncMock) as mock_post:  # type: ignore[union-attr]
                mock_post.return_value = httpx.Response(
                    status_code=200,
                    json=drifted,
                    request=httpx.Request("POST", url),
                )
                table = await AlarmPipeline(client).render(ORIGIN)

        assert not table.ok
        lines = table.body.splitlines()
        assert len(lines) == 2
        assert is_error_table(table.body)
        records = parse_table(table.body)
        assert len(records) == 1
        assert "validation error for Problem" in records[0]["error.message"]
        assert records[0]["id"] == f"{PROBLEMS_REQUEST_ID}@{ORIGIN}"

    async def test_upstream_message_kept_verbatim(self) -> None:
        client = _make_client()
        client.list_problems.side_effect = ZabbixApiError("a  b", request_id=1)
        table = await AlarmPipeline(client).render(ORIGIN)
        assert table.body.splitlines()[1] == f"2.0;1;a  b;;1@{ORIGIN}"

    async def test_build_rows_propagates(self) -> None:
        client = _make_client()
        client.list_problems.side_effect = ZabbixApiError("boom", request_id=1)
        with pytest.raises(ZabbixApiError):
            await AlarmPipeline(client).build_rows()
