"""Core module — config, types, logging."""

from zbxcsv.core.config import Settings, get_settings, load_settings, reset_settings
from zbxcsv.core.logging import setup_logging
from zbxcsv.core.types import (
    Event,
    Host,
    OutputRow,
    Problem,
    Severity,
    Status,
    Trigger,
    TriggerItem,
)

__all__ = [
    "Event",
    "Host",
    "OutputRow",
    "Problem",
    "Settings",
    "Severity",
    "Status",
    "Trigger",
    "TriggerItem",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
