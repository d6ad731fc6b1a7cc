"""Last-known-good fallback for reads when the backing store is down."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, Optional

from squadplan.errors import StorageUnavailable
from squadplan.models import AvailabilityFact

from .base import FactStore, ReplaceResult
from .file import JsonFileFactStore


logger = logging.getLogger(__name__)


class CachedFactStore:
    """Wraps a store and mirrors every successful read and write.

    When the backend raises :class:`StorageUnavailable` on read, the last
    mirrored snapshot is returned and ``stale`` is set. Writes always go to
    the backend; the cache is never the source of truth.
    """

    def __init__(self, backend: FactStore, cache_path: Optional[Path | str] = None):
        self.backend = backend
        self.name = backend.name
        self.stale = False
        self._snapshot: Optional[frozenset[AvailabilityFact]] = None
        self._cache_file = JsonFileFactStore(cache_path) if cache_path else None

    def read_all(self) -> frozenset[AvailabilityFact]:
        try:
            facts = self.backend.read_all()
        except StorageUnavailable as exc:
            cached = self._cached()
            if cached is None:
                raise
            logger.warning("%s store unavailable (%s); serving %d cached facts", self.name, exc, len(cached))
            self.stale = True
            return cached
        self.stale = False
        self._remember(facts)
        return facts

    def replace_all(self, facts: AbstractSet[AvailabilityFact]) -> ReplaceResult:
        result = self.backend.replace_all(facts)
        self.stale = False
        self._remember(frozenset(facts))
        return result

    def _remember(self, facts: frozenset[AvailabilityFact]) -> None:
        self._snapshot = facts
        if self._cache_file is None:
            return
        try:
            self._cache_file.replace_all(facts)
        except StorageUnavailable as exc:
            logger.warning("Could not update local availability cache: %s", exc)

    def _cached(self) -> Optional[frozenset[AvailabilityFact]]:
        if self._snapshot is not None:
            return self._snapshot
        if self._cache_file is None or not self._cache_file.path.exists():
            return None
        try:
            return self._cache_file.read_all()
        except StorageUnavailable as exc:
            logger.warning("Local availability cache unreadable: %s", exc)
            return None
