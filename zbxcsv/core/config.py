"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, SecretStr

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class ZabbixConfig(BaseModel):
    """Upstream Zabbix JSON-RPC endpoint."""

    url: str = "http://localhost/zabbix/api_jsonrpc.php"
    api_token: SecretStr = SecretStr("")
    timeout_secs: float = 30.0
    verify_tls: bool = True


class ServerConfig(BaseModel):
    """HTTP listener serving the CSV table."""

    host: str = "0.0.0.0"
    port: int = 8080
    path: str = "/api_csv.php"


class TokenOverride(BaseModel):
    """Swap a caller's bearer for a real API token when the caller is allow-listed."""

    bearer: SecretStr
    allowed_addresses: list[str] = []
    api_token: SecretStr


class AuthConfig(BaseModel):
    """How the upstream API token is chosen per request."""

    forward_bearer: bool = True
    overrides: list[TokenOverride] = []


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    zabbix: ZabbixConfig = ZabbixConfig()
    server: ServerConfig = ServerConfig()
    auth: AuthConfig = AuthConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    raw: Any = None
    if config_path.is_file():
        raw = yaml.safe_load(config_path.read_text())

    _settings = Settings.model_validate(raw if isinstance(raw, dict) else {})
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
