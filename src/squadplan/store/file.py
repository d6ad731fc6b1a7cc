"""Flat JSON file backend."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import AbstractSet

from squadplan.engine.mutation import coerce_positive_int
from squadplan.errors import StorageUnavailable
from squadplan.models import AvailabilityFact, facts_to_entries

from .base import ReplaceResult


def _entries_to_facts(entries: object, path: Path) -> frozenset[AvailabilityFact]:
    if not isinstance(entries, list):
        raise StorageUnavailable(f"Availability file {path} has no entries list")
    facts: set[AvailabilityFact] = set()
    for entry in entries:
        player_id = event_id = None
        if isinstance(entry, dict):
            player_id = coerce_positive_int(entry.get("playerId"))
            event_id = coerce_positive_int(entry.get("gameId"))
        if player_id is None or event_id is None:
            raise StorageUnavailable(f"Availability file {path} has a malformed entry: {entry!r}")
        facts.add(AvailabilityFact(player_id=player_id, event_id=event_id))
    return frozenset(facts)


class JsonFileFactStore:
    """Stores ``{"entries": [...]}`` in a single JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never observe a half-written file.
    """

    name = "file"

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def read_all(self) -> frozenset[AvailabilityFact]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return frozenset()
        except OSError as exc:
            raise StorageUnavailable(f"Cannot read availability file {self.path}: {exc}") from exc
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise StorageUnavailable(f"Availability file {self.path} is not valid JSON: {exc}") from exc
        entries = data.get("entries") if isinstance(data, dict) else None
        return _entries_to_facts(entries, self.path)

    def replace_all(self, facts: AbstractSet[AvailabilityFact]) -> ReplaceResult:
        payload = {
            "entries": facts_to_entries(facts),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            except OSError as exc:
                raise StorageUnavailable(f"Cannot write availability file {self.path}: {exc}") from exc
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle, indent=2)
                os.replace(tmp_name, self.path)
            except OSError as exc:
                Path(tmp_name).unlink(missing_ok=True)
                raise StorageUnavailable(f"Cannot write availability file {self.path}: {exc}") from exc
        return ReplaceResult(count=len(payload["entries"]), source=self.name)
