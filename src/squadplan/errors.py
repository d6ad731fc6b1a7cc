"""Exception hierarchy shared by the mutator, stores and API layer."""

from __future__ import annotations


class SquadplanError(Exception):
    """Base class for all squadplan failures."""


class FactValidationError(SquadplanError, ValueError):
    """Availability input was rejected before reaching a store."""


class PayloadTooLarge(FactValidationError):
    def __init__(self, count: int, limit: int):
        super().__init__(f"Too many entries in one request ({count} > {limit})")
        self.count = count
        self.limit = limit


class UnknownReferenceError(FactValidationError):
    def __init__(self, *, player_ids: tuple[int, ...] = (), event_ids: tuple[int, ...] = ()):
        parts = []
        if player_ids:
            parts.append("unknown player ids: " + ", ".join(str(pid) for pid in player_ids))
        if event_ids:
            parts.append("unknown game ids: " + ", ".join(str(eid) for eid in event_ids))
        super().__init__("; ".join(parts) or "unknown reference")
        self.player_ids = player_ids
        self.event_ids = event_ids


class StorageError(SquadplanError):
    """A fact store could not complete an operation."""


class StorageUnavailable(StorageError):
    """Backend unreachable or misconfigured. Safe to retry."""


class PartialReplaceFailure(StorageError):
    """A non-atomic replace failed after the previous facts were cleared.

    The store may now hold fewer facts than either the old or the new
    snapshot; callers should re-read and reconcile.
    """
