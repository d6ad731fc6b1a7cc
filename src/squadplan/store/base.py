"""Fact store contract shared by every persistence backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Protocol, runtime_checkable

from squadplan.models import AvailabilityFact


@dataclass(frozen=True)
class ReplaceResult:
    count: int
    source: str


@runtime_checkable
class FactStore(Protocol):
    """Holds the current availability facts.

    ``replace_all`` swaps the whole fact set at once: readers see either the
    old set or the new one. Backends that cannot guarantee that must raise
    :class:`~squadplan.errors.PartialReplaceFailure` when a replace fails
    midway.
    """

    name: str

    def read_all(self) -> frozenset[AvailabilityFact]: ...

    def replace_all(self, facts: AbstractSet[AvailabilityFact]) -> ReplaceResult: ...
