"""Runtime settings resolved from ``SQUADPLAN_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

_ENV_PREFIX = "SQUADPLAN_"

STORE_BACKENDS = ("memory", "file", "sqlite", "rest")

MAX_ENTRIES_DEFAULT = 10_000
DEFAULT_MAX_DISTANCE = 5.0
MIN_DISTANCE_FILTER = 1.0
MAX_DISTANCE_FILTER = 30.0
SAVE_QUIET_PERIOD_DEFAULT = 0.6
REST_TIMEOUT_DEFAULT = 10.0


def _env(name: str) -> Optional[str]:
    raw = os.getenv(_ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s%s: %s; using default %.2f", _ENV_PREFIX, name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s%s: %s; using default %d", _ENV_PREFIX, name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_path(name: str) -> Optional[Path]:
    raw = _env(name)
    return Path(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    store: str = "sqlite"
    db_path: Path = Path("data") / "availability.db"
    data_path: Path = Path("data") / "availability.json"
    rest_url: Optional[str] = None
    rest_key: Optional[str] = None
    rest_timeout: float = REST_TIMEOUT_DEFAULT
    cache_path: Optional[Path] = None
    catalog_path: Optional[Path] = None
    max_entries: int = MAX_ENTRIES_DEFAULT
    default_max_distance: float = DEFAULT_MAX_DISTANCE
    save_quiet_period: float = SAVE_QUIET_PERIOD_DEFAULT

    @classmethod
    def from_env(cls) -> "Settings":
        store = (_env("STORE") or cls.store).lower()
        if store not in STORE_BACKENDS:
            logger.warning("Unknown store backend %r; using %s", store, cls.store)
            store = cls.store
        return cls(
            store=store,
            db_path=_env_path("DB_PATH") or cls.db_path,
            data_path=_env_path("DATA_PATH") or cls.data_path,
            rest_url=_env("REST_URL"),
            rest_key=_env("REST_KEY"),
            rest_timeout=_env_float("REST_TIMEOUT", REST_TIMEOUT_DEFAULT, clamp_min=0.1),
            cache_path=_env_path("CACHE_PATH"),
            catalog_path=_env_path("CATALOG_PATH"),
            max_entries=_env_int("MAX_ENTRIES", MAX_ENTRIES_DEFAULT, min_value=1),
            default_max_distance=_env_float(
                "DEFAULT_MAX_DISTANCE",
                DEFAULT_MAX_DISTANCE,
                clamp_min=MIN_DISTANCE_FILTER,
                clamp_max=MAX_DISTANCE_FILTER,
            ),
            save_quiet_period=_env_float("SAVE_QUIET_PERIOD", SAVE_QUIET_PERIOD_DEFAULT, clamp_min=0.0),
        )
