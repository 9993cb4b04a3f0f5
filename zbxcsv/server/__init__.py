"""HTTP transport for the alarm table."""

from zbxcsv.server.web import create_web_app, resolve_upstream_token, start_web_server

__all__ = [
    "create_web_app",
    "resolve_upstream_token",
    "start_web_server",
]
