"""Zabbix active-alarm CSV bridge for constrained display clients."""

__version__ = "0.1.0"
