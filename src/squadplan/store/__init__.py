"""Fact store backends and the helpers layered on top of them."""

from __future__ import annotations

from squadplan.config import Settings

from .base import FactStore, ReplaceResult
from .cache import CachedFactStore
from .file import JsonFileFactStore
from .memory import MemoryFactStore
from .rest import RestFactStore
from .sqlite import SqliteFactStore
from .writer import CoalescingWriter


def create_store(settings: Settings) -> CachedFactStore:
    """Build the backend selected by ``settings`` behind the read cache."""

    backend: FactStore
    if settings.store == "memory":
        backend = MemoryFactStore()
    elif settings.store == "file":
        backend = JsonFileFactStore(settings.data_path)
    elif settings.store == "rest":
        backend = RestFactStore(settings.rest_url, settings.rest_key, timeout=settings.rest_timeout)
    elif settings.store == "sqlite":
        backend = SqliteFactStore(settings.db_path)
    else:
        raise ValueError(f"Unknown store backend {settings.store!r}")
    return CachedFactStore(backend, settings.cache_path)


__all__ = [
    "CachedFactStore",
    "CoalescingWriter",
    "FactStore",
    "JsonFileFactStore",
    "MemoryFactStore",
    "ReplaceResult",
    "RestFactStore",
    "SqliteFactStore",
    "create_store",
]
