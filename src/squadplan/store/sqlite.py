"""SQLite-backed fact store."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AbstractSet, Iterator

from squadplan.errors import StorageUnavailable
from squadplan.models import AvailabilityFact, sort_facts

from .base import ReplaceResult


logger = logging.getLogger(__name__)


class SqliteFactStore:
    """Availability facts in a single ``availability`` table keyed by the pair.

    ``updated_at`` is kept for diagnostics only.
    """

    name = "sqlite"

    def __init__(self, db_path: Path | str):
        self._use_uri = isinstance(db_path, str) and db_path.startswith("file:")
        self.db_path: Path | str = db_path if self._use_uri else Path(db_path)
        self._write_lock = threading.Lock()
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailable(f"Cannot open availability database {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        try:
            if isinstance(self.db_path, Path):
                conn.execute("PRAGMA journal_mode = WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS availability (
                    player_id INTEGER NOT NULL,
                    game_id INTEGER NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (player_id, game_id)
                )
                """
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot initialise availability database {self.db_path}: {exc}") from exc

    def read_all(self) -> frozenset[AvailabilityFact]:
        with self._connect() as conn:
            try:
                rows = conn.execute(
                    """
                    SELECT player_id, game_id
                    FROM availability
                    ORDER BY player_id, game_id
                    """
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageUnavailable(f"Cannot read availability database {self.db_path}: {exc}") from exc
        return frozenset(self._row_to_fact(row) for row in rows)

    def replace_all(self, facts: AbstractSet[AvailabilityFact]) -> ReplaceResult:
        ordered = sort_facts(facts)
        now = datetime.now(timezone.utc).isoformat()
        with self._write_lock, self._connect() as conn:
            try:
                with conn:
                    conn.execute("DELETE FROM availability")
                    conn.executemany(
                        """
                        INSERT INTO availability (player_id, game_id, updated_at)
                        VALUES (?, ?, ?)
                        ON CONFLICT(player_id, game_id)
                        DO UPDATE SET updated_at = excluded.updated_at
                        """,
                        [(fact.player_id, fact.event_id, now) for fact in ordered],
                    )
            except sqlite3.Error as exc:
                logger.warning("Availability replace rolled back: %s", exc)
                raise StorageUnavailable(f"Cannot write availability database {self.db_path}: {exc}") from exc
        return ReplaceResult(count=len(ordered), source=self.name)

    def last_updated(self) -> datetime | None:
        with self._connect() as conn:
            row = conn.execute("SELECT MAX(updated_at) AS latest FROM availability").fetchone()
        if row is None or row["latest"] is None:
            return None
        return datetime.fromisoformat(row["latest"])

    def _row_to_fact(self, row: sqlite3.Row) -> AvailabilityFact:
        return AvailabilityFact(player_id=int(row["player_id"]), event_id=int(row["game_id"]))
