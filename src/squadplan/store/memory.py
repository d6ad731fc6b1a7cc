from __future__ import annotations

import threading
from typing import AbstractSet, Iterable

from squadplan.models import AvailabilityFact

from .base import ReplaceResult


class MemoryFactStore:
    """In-process store; contents are lost on restart."""

    name = "memory"

    def __init__(self, facts: Iterable[AvailabilityFact] = ()):
        self._lock = threading.Lock()
        self._facts = frozenset(facts)

    def read_all(self) -> frozenset[AvailabilityFact]:
        with self._lock:
            return self._facts

    def replace_all(self, facts: AbstractSet[AvailabilityFact]) -> ReplaceResult:
        snapshot = frozenset(facts)
        with self._lock:
            self._facts = snapshot
        return ReplaceResult(count=len(snapshot), source=self.name)
