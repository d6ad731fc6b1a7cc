"""Configuration helpers for planning catalogs and runtime settings."""

from .catalog import (
    DAYS,
    SLOTS,
    CatalogFile,
    PlanningCatalog,
    build_session_events,
    default_catalog,
    load_catalog,
)
from .settings import (
    DEFAULT_MAX_DISTANCE,
    MAX_DISTANCE_FILTER,
    MAX_ENTRIES_DEFAULT,
    MIN_DISTANCE_FILTER,
    Settings,
)

__all__ = [
    "CatalogFile",
    "DAYS",
    "DEFAULT_MAX_DISTANCE",
    "MAX_DISTANCE_FILTER",
    "MAX_ENTRIES_DEFAULT",
    "MIN_DISTANCE_FILTER",
    "PlanningCatalog",
    "SLOTS",
    "Settings",
    "build_session_events",
    "default_catalog",
    "load_catalog",
]
