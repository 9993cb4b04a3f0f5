"""Lookup structures built from the problem and event query results."""

from __future__ import annotations

from dataclasses import dataclass, field

from zbxcsv.core.types import Event, Problem


@dataclass
class ProblemIndex:
    """Problems grouped by owning trigger, plus the event ids they reference.

    Both keep first-seen order: the per-trigger problem order decides the
    order of rows that tie on every sort key but the last.
    """

    by_trigger: dict[int, list[Problem]] = field(default_factory=dict)
    eventids: list[int] = field(default_factory=list)

    @property
    def triggerids(self) -> list[int]:
        return list(self.by_trigger)

    @property
    def empty(self) -> bool:
        return not self.by_trigger

    def problems_for(self, triggerid: int) -> list[Problem]:
        return self.by_trigger.get(triggerid, [])


def build_problem_index(problems: list[Problem]) -> ProblemIndex:
    """Group problems by ``objectid`` and collect their distinct event ids."""
    index = ProblemIndex()
    seen_events: set[int] = set()
    for problem in problems:
        index.by_trigger.setdefault(problem.objectid, []).append(problem)
        if problem.eventid not in seen_events:
            seen_events.add(problem.eventid)
            index.eventids.append(problem.eventid)
    return index


def build_ack_set(events: list[Event]) -> frozenset[int]:
    """Event ids that have been acknowledged. Missing ids are unacknowledged."""
    return frozenset(event.eventid for event in events if event.acknowledged)
