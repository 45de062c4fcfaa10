from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_API_URL_ENV = "OBSERVATION_API_URL"
_API_KEY_ENV = "OBSERVATION_API_KEY"
_API_TIMEOUT_ENV = "OBSERVATION_API_TIMEOUT"
_FETCH_LIMIT_ENV = "OBSERVATION_FETCH_LIMIT"
_UNIT_SYSTEM_ENV = "DEFAULT_UNIT_SYSTEM"
_ELEVATION_ENV = "SITE_ELEVATION_M"
_AIR_TEMPERATURE_ENV = "REFERENCE_AIR_TEMPERATURE_C"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_UNIT_SYSTEMS = {"SI", "US"}


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    api_key: Optional[str]
    api_timeout: float
    fetch_limit: int
    default_unit_system: str
    site_elevation: float
    reference_air_temperature: float
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


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float(name: str, default: float, positive: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if positive and parsed <= 0:
        return default
    return parsed


def _read_unit_system(default: str) -> str:
    candidate = _read_str_env(_UNIT_SYSTEM_ENV, default).upper()
    return candidate if candidate in _UNIT_SYSTEMS else default


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
        api_base_url=_read_str_env(_API_URL_ENV, "http://localhost:5000/api").rstrip("/"),
        api_key=_read_optional_env(_API_KEY_ENV, None),
        api_timeout=_read_float(_API_TIMEOUT_ENV, 30.0, positive=True),
        fetch_limit=_read_positive_int(_FETCH_LIMIT_ENV, 10000),
        default_unit_system=_read_unit_system("US"),
        site_elevation=_read_float(_ELEVATION_ENV, 626.0),
        reference_air_temperature=_read_float(_AIR_TEMPERATURE_ENV, 10.0),
        log_level=_read_log_level("INFO"),
    )
