"""Expand triggers × hosts × problems into flat alarm rows."""

from __future__ import annotations

from collections.abc import Set

import structlog

from zbxcsv.alarms.index import ProblemIndex
from zbxcsv.core.types import OutputRow, Problem, Trigger

logger = structlog.stdlib.get_logger()


def resolve_suppressed(problem: Problem, acked: Set[int]) -> int:
    """Suppressed if Zabbix says so or the event is acknowledged."""
    return int(problem.suppressed != 0 or problem.eventid in acked)


def assemble_rows(
    triggers: list[Trigger],
    index: ProblemIndex,
    acked: Set[int],
) -> list[OutputRow]:
    """Build one row per (enabled trigger, enabled host, problem).

    Disabled triggers and disabled hosts are dropped outright rather than
    marked suppressed. Host and problem names are blanked.
    """
    rows: list[OutputRow] = []
    skipped_triggers = 0
    skipped_hosts = 0

    for trigger in triggers:
        if trigger.disabled:
            skipped_triggers += 1
            continue
        problems = index.problems_for(trigger.triggerid)
        for host in trigger.hosts:
            if host.disabled:
                skipped_hosts += 1
                continue
            for problem in problems:
                rows.append(OutputRow(
                    clock=problem.clock,
                    severity=problem.severity,
                    suppressed=resolve_suppressed(problem, acked),
                    hostid=host.hostid,
                    host="",
                    name="",
                ))

    logger.debug(
        "alarm_rows_assembled",
        triggers=len(triggers),
        rows=len(rows),
        skipped_triggers=skipped_triggers,
        skipped_hosts=skipped_hosts,
    )
    return rows
