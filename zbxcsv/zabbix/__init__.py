"""Zabbix JSON-RPC client."""

from zbxcsv.zabbix.client import ZabbixClient, encode_request
from zbxcsv.zabbix.exceptions import (
    ZabbixApiError,
    ZabbixConnectionError,
    ZabbixError,
    ZabbixParseError,
    extract_request_id,
)

__all__ = [
    "ZabbixApiError",
    "ZabbixClient",
    "ZabbixConnectionError",
    "ZabbixError",
    "ZabbixParseError",
    "encode_request",
    "extract_request_id",
]
