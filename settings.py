from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_TABLE_NAME_ENV = "TRAFFIC_TABLE_NAME"
_TABLE_PATH_ENV = "TRAFFIC_PERSISTENCE_PATH"
_AUTH_SECRET_ENV = "TRAFFIC_AUTH_SECRET"
_AUTH_ISSUER_ENV = "TRAFFIC_AUTH_ISSUER"
_AUTH_AUDIENCE_ENV = "TRAFFIC_AUTH_AUDIENCE"
_CORS_ORIGINS_ENV = "CORS_ALLOW_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    table_name: str
    table_persistence_path: Optional[str]
    auth_secret: Optional[str]
    auth_issuer: Optional[str]
    auth_audience: Optional[str]
    cors_origins: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        table_name=_read_str_env(_TABLE_NAME_ENV, "trafficStats"),
        table_persistence_path=_read_optional_env(_TABLE_PATH_ENV, "./tmp/traffic_db.json"),
        auth_secret=_read_optional_env(_AUTH_SECRET_ENV, None),
        auth_issuer=_read_optional_env(_AUTH_ISSUER_ENV, None),
        auth_audience=_read_optional_env(_AUTH_AUDIENCE_ENV, None),
        cors_origins=_read_origins(("*",)),
        log_level=_read_log_level("INFO"),
    )
