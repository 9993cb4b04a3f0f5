#!/usr/bin/env python3
"""Server entrypoint — serves the alarm CSV table until interrupted.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Override log level
    python scripts/run.py --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from zbxcsv.core.config import load_settings
from zbxcsv.core.logging import setup_logging
from zbxcsv.server.web import start_web_server
from zbxcsv.zabbix.client import ZabbixClient

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start the client and HTTP server and run until interrupted."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    if args.port is not None:
        settings.server.port = args.port

    logger.info("server_starting", zabbix_url=settings.zabbix.url)

    client = ZabbixClient(settings.zabbix)
    await client.connect()
    runner = await start_web_server(client, config=settings.server, auth=settings.auth)

    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    try:
        await stop_event.wait()
    finally:
        logger.info("server_shutting_down")
        await runner.cleanup()
        await client.close()
    logger.info("server_stopped")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Serve Zabbix disaster problems as a semicolon-separated table.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listen port override",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
