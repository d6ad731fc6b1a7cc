"""Hosted relational backend reached through a PostgREST-style REST API.

The remote side exposes no transaction across requests, so a replace is a
``DELETE`` followed by a bulk ``POST``. If the insert fails after the
delete went through, the table may be left empty or partially filled and
:class:`PartialReplaceFailure` is raised instead of a plain storage error.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Optional

import httpx

from squadplan.errors import PartialReplaceFailure, StorageUnavailable
from squadplan.models import AvailabilityFact, sort_facts

from .base import ReplaceResult


logger = logging.getLogger(__name__)

DEFAULT_TABLE = "availability_entries"


class RestFactStore:
    name = "rest"

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        *,
        table: str = DEFAULT_TABLE,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key or ""
        self.table = table
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _client(self) -> httpx.Client:
        if not self.configured:
            raise StorageUnavailable("REST store URL or key is missing")
        return httpx.Client(
            base_url=f"{self.base_url}/rest/v1",
            headers={"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            transport=self._transport,
        )

    def read_all(self) -> frozenset[AvailabilityFact]:
        with self._client() as client:
            try:
                resp = client.get(
                    f"/{self.table}",
                    params={"select": "player_id,game_id", "order": "player_id.asc,game_id.asc"},
                )
            except httpx.HTTPError as exc:
                raise StorageUnavailable(f"REST load failed: {exc}") from exc
        if resp.is_error:
            raise StorageUnavailable(f"REST load failed ({resp.status_code})")
        try:
            rows = resp.json()
            return frozenset(
                AvailabilityFact(player_id=int(row["player_id"]), event_id=int(row["game_id"]))
                for row in rows
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise StorageUnavailable(f"REST load returned an unexpected payload: {exc}") from exc

    def replace_all(self, facts: AbstractSet[AvailabilityFact]) -> ReplaceResult:
        ordered = sort_facts(facts)
        with self._client() as client:
            try:
                resp = client.delete(f"/{self.table}", params={"player_id": "gte.0"})
            except httpx.HTTPError as exc:
                raise StorageUnavailable(f"REST clear failed: {exc}") from exc
            if resp.is_error:
                raise StorageUnavailable(f"REST clear failed ({resp.status_code})")

            if not ordered:
                return ReplaceResult(count=0, source=self.name)

            body = [{"player_id": fact.player_id, "game_id": fact.event_id} for fact in ordered]
            try:
                resp = client.post(
                    f"/{self.table}",
                    json=body,
                    headers={"Prefer": "resolution=merge-duplicates"},
                )
            except httpx.HTTPError as exc:
                logger.error("REST insert failed after clearing %s: %s", self.table, exc)
                raise PartialReplaceFailure(
                    f"REST save failed after existing entries were cleared: {exc}"
                ) from exc
            if resp.is_error:
                logger.error("REST insert failed after clearing %s (%s)", self.table, resp.status_code)
                raise PartialReplaceFailure(
                    f"REST save failed after existing entries were cleared ({resp.status_code})"
                )
        return ReplaceResult(count=len(ordered), source=self.name)
