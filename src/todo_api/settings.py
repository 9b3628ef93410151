from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

DEFAULT_BIND_ADDR = "0.0.0.0:3000"
DEFAULT_DATABASE_URL = "sqlite:db.sqlite"
DEFAULT_LOG_LEVEL = "info,sqlalchemy.engine=warning,uvicorn.access=debug"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - BIND_ADDR: host:port the HTTP server listens on. Default '0.0.0.0:3000'
    - DATABASE_URL: sqlite URL of the store. Default 'sqlite:db.sqlite'
    - LOG_LEVEL: comma-separated logging filter, e.g. 'info,sqlalchemy.engine=info'
    - DB_POOL_SIZE: maximum number of pooled connections (default: 5)
    - DB_POOL_TIMEOUT: seconds to wait for a free connection (default: 30)
    """

    bind_addr: str = DEFAULT_BIND_ADDR
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = DEFAULT_LOG_LEVEL
    db_pool_size: int = 5
    db_pool_timeout: float = 30.0


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _parse_int(value: str, default: int, minimum: int = 1) -> int:
    try:
        parsed = int(value)
    except ValueError:
        return default
    return max(parsed, minimum)


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


# PUBLIC_INTERFACE
def parse_bind_addr(bind_addr: str) -> Tuple[str, int]:
    """
    Split a 'host:port' bind address into its parts.

    IPv6 hosts may be given in brackets, e.g. '[::]:3000'.
    Raises ValueError when the port is missing or not a number.
    """
    host, sep, port = bind_addr.strip().rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid bind address {bind_addr!r}; expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host or "0.0.0.0", int(port)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        bind_addr=_get_env("BIND_ADDR", DEFAULT_BIND_ADDR),
        database_url=_get_env("DATABASE_URL", DEFAULT_DATABASE_URL),
        log_level=_get_env("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        db_pool_size=_parse_int(_get_env("DB_POOL_SIZE", "5"), 5),
        db_pool_timeout=_parse_float(_get_env("DB_POOL_TIMEOUT", "30"), 30.0),
    )
