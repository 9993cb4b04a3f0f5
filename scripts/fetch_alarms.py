#!/usr/bin/env python3
"""Print the alarm table once, without starting a server.

The request is treated as coming from localhost, and the API token is read
from ``--token`` or the ``TOKEN`` environment variable.

Usage::

    TOKEN=abc123 python scripts/fetch_alarms.py
    python scripts/fetch_alarms.py --config config/settings.yaml --token abc123
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

import structlog

from zbxcsv.alarms.pipeline import AlarmPipeline
from zbxcsv.core.config import load_settings
from zbxcsv.core.logging import setup_logging
from zbxcsv.zabbix.client import ZabbixClient

logger = structlog.get_logger(__name__)

LOCAL_ORIGIN = "127.0.0.1"


async def fetch(args: argparse.Namespace) -> int:
    """Run the pipeline once and write the table to stdout."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    token = args.token or os.environ.get("TOKEN") or None

    async with ZabbixClient(settings.zabbix) as client:
        table = await AlarmPipeline(client, token=token).render(LOCAL_ORIGIN)

    sys.stdout.write(table.body)
    sys.stdout.flush()
    return 0 if table.ok else 1


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Fetch the Zabbix alarm table once and print it.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Zabbix API token (default: $TOKEN, then zabbix.api_token)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(fetch(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
