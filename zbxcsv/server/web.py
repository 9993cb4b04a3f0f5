"""HTTP front end — serves the alarm table over ``aiohttp``.

Exposes a single route (``/api_csv.php`` by default):
- ``GET``        → the alarm table, or the error table, as ``text/csv``
- anything else  → ``405`` with an empty body

The whole body is built before the response starts so that
``Content-Length`` is always sent; the display cannot read chunked replies.
"""

from __future__ import annotations

import hmac

import structlog
from aiohttp import web

from zbxcsv.alarms.pipeline import AlarmPipeline, AlarmTable
from zbxcsv.core.config import AuthConfig, ServerConfig
from zbxcsv.zabbix.client import ZabbixClient

logger = structlog.stdlib.get_logger()

CSV_CONTENT_TYPE = "text/csv"
CSV_CHARSET = "utf-8"

CLIENT_KEY = web.AppKey("zabbix_client", ZabbixClient)
AUTH_KEY = web.AppKey("auth_config", AuthConfig)


def _bearer_token(request: web.Request) -> str | None:
    """Extract the token from an ``Authorization: Bearer ...`` header."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def resolve_upstream_token(
    bearer: str | None,
    origin: str,
    auth: AuthConfig,
) -> str | None:
    """Pick the API token to present to Zabbix for this caller.

    An override rule wins when both its bearer and its address allow-list
    match. Otherwise the caller's bearer is forwarded if allowed. ``None``
    means the client falls back to its configured token.
    """
    if bearer is not None:
        for rule in auth.overrides:
            if origin not in rule.allowed_addresses:
                continue
            expected = rule.bearer.get_secret_value()
            if hmac.compare_digest(bearer.encode(), expected.encode()):
                return rule.api_token.get_secret_value()
        if auth.forward_bearer:
            return bearer
    return None


def _csv_response(table: AlarmTable) -> web.Response:
    return web.Response(
        body=table.content,
        content_type=CSV_CONTENT_TYPE,
        charset=CSV_CHARSET,
    )


async def _handle_alarms(request: web.Request) -> web.Response:
    origin = request.remote or ""
    with structlog.contextvars.bound_contextvars(origin=origin, method=request.method):
        if request.method != "GET":
            logger.info("csv_request_rejected")
            return web.Response(status=405)

        token = resolve_upstream_token(_bearer_token(request), origin, request.app[AUTH_KEY])
        pipeline = AlarmPipeline(request.app[CLIENT_KEY], token=token)
        table = await pipeline.render(origin)
        response = _csv_response(table)
        logger.info(
            "csv_response_sent",
            ok=table.ok,
            rows=table.row_count,
            content_length=len(table.content),
        )
        return response


def create_web_app(
    client: ZabbixClient,
    auth: AuthConfig | None = None,
    path: str = "/api_csv.php",
) -> web.Application:
    """Create the aiohttp web application around a connected client."""
    app = web.Application()
    app[CLIENT_KEY] = client
    app[AUTH_KEY] = auth or AuthConfig()
    app.router.add_route("*", path, _handle_alarms)
    return app


async def start_web_server(
    client: ZabbixClient,
    config: ServerConfig | None = None,
    auth: AuthConfig | None = None,
) -> web.AppRunner:
    """Start the CSV server. Returns the runner for cleanup."""
    cfg = config or ServerConfig()
    app = create_web_app(client, auth=auth, path=cfg.path)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, cfg.host, cfg.port)
    await site.start()
    logger.info("csv_server_started", host=cfg.host, port=cfg.port, path=cfg.path)
    return runner
