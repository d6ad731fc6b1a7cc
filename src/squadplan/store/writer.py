"""Debounced saving: coalesce bursts of edits into one write."""

from __future__ import annotations

import logging
import threading
from typing import AbstractSet, Optional

from squadplan.errors import StorageError
from squadplan.models import AvailabilityFact

from .base import FactStore, ReplaceResult


logger = logging.getLogger(__name__)


class CoalescingWriter:
    """Writes the latest submitted snapshot once edits go quiet.

    Each ``submit`` replaces the pending snapshot and restarts a
    ``quiet_period`` timer; when it fires, only the most recent snapshot
    is written. A failed write keeps the snapshot pending and records the
    error in ``last_error`` so the next ``flush`` retries it.
    """

    def __init__(self, store: FactStore, quiet_period: float = 0.6):
        if quiet_period < 0:
            raise ValueError("quiet_period must be >= 0")
        self.store = store
        self.quiet_period = quiet_period
        self.last_error: Optional[StorageError] = None
        self.last_result: Optional[ReplaceResult] = None
        self._pending: Optional[frozenset[AvailabilityFact]] = None
        self._in_flight: Optional[frozenset[AvailabilityFact]] = None
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._closed = False

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    @property
    def unsaved(self) -> Optional[frozenset[AvailabilityFact]]:
        """The newest submitted snapshot that is not yet in the store, if any."""

        with self._lock:
            return self._pending if self._pending is not None else self._in_flight

    def submit(self, facts: AbstractSet[AvailabilityFact]) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("CoalescingWriter is closed")
            self._pending = frozenset(facts)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.quiet_period, self._on_timer)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> Optional[ReplaceResult]:
        """Write the pending snapshot now. Returns None if nothing was pending."""

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        return self._write_pending(raise_errors=True)

    def replace(self, facts: AbstractSet[AvailabilityFact]) -> ReplaceResult:
        """Discard any pending snapshot and write ``facts`` now.

        Waits for a write already in progress, so ``facts`` always lands last.
        Errors propagate and nothing is kept for retry.
        """

        snapshot = frozenset(facts)
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None
        with self._write_lock:
            result = self.store.replace_all(snapshot)
        self.last_error = None
        self.last_result = result
        return result

    def close(self) -> None:
        try:
            self.flush()
        finally:
            with self._lock:
                self._closed = True

    def _on_timer(self) -> None:
        self._write_pending(raise_errors=False)

    def _write_pending(self, *, raise_errors: bool) -> Optional[ReplaceResult]:
        with self._write_lock:
            with self._lock:
                snapshot = self._pending
                self._pending = None
                self._in_flight = snapshot
            if snapshot is None:
                return None
            try:
                result = self.store.replace_all(snapshot)
            except StorageError as exc:
                logger.error("Saving %d availability facts failed: %s", len(snapshot), exc)
                with self._lock:
                    # a newer submit wins over the failed snapshot
                    if self._pending is None:
                        self._pending = snapshot
                    self._in_flight = None
                    self.last_error = exc
                if raise_errors:
                    raise
                return None
            with self._lock:
                self._in_flight = None
            self.last_error = None
            self.last_result = result
            return result
