"""Domain types for Zabbix problem data and the flattened alarm table.

Zabbix returns every scalar as a JSON string (``"eventid": "123"``); the
models below rely on pydantic's lax coercion to turn those into ints/bools.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field


class Severity(IntEnum):
    """Zabbix trigger severity."""

    NOT_CLASSIFIED = 0
    INFORMATION = 1
    WARNING = 2
    AVERAGE = 3
    HIGH = 4
    DISASTER = 5


class Status(IntEnum):
    """Enablement status shared by triggers, hosts and items."""

    ENABLED = 0
    DISABLED = 1


class Problem(BaseModel):
    """An open problem as returned by ``problem.get``."""

    eventid: int
    r_eventid: int = 0
    objectid: int  # triggerid for trigger-sourced problems
    clock: int
    ns: int = 0
    severity: int
    suppressed: int = 0
    name: str = ""


class Event(BaseModel):
    """Acknowledgement state of a problem event (``event.get``)."""

    eventid: int
    acknowledged: bool = False


class Host(BaseModel):
    hostid: int
    host: str = ""
    status: int = Status.ENABLED

    @property
    def disabled(self) -> bool:
        return self.status == Status.DISABLED


class TriggerItem(BaseModel):
    hostid: int
    status: int = Status.ENABLED


class Trigger(BaseModel):
    """Trigger metadata with its hosts and items (``trigger.get``)."""

    triggerid: int
    status: int = Status.ENABLED
    error: str = ""
    suppressed: int = 0
    flags: int = 0
    value: int = 0
    hosts: list[Host] = Field(default_factory=list)
    items: list[TriggerItem] = Field(default_factory=list)

    @property
    def disabled(self) -> bool:
        return self.status == Status.DISABLED


class OutputRow(BaseModel):
    """One line of the alarm table. Field order is the column order."""

    clock: int
    severity: int
    suppressed: int
    hostid: int
    host: str = ""
    name: str = ""

    @classmethod
    def columns(cls) -> list[str]:
        return list(cls.model_fields)

    def values(self) -> list[str]:
        """Column values rendered as strings, in column order."""
        return [str(getattr(self, col)) for col in self.columns()]
