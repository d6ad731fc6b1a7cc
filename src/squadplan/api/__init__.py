"""REST API for reading, editing and aggregating squad availability."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import ValidationError

from squadplan.api.schemas import (
    AvailabilityEntry,
    AvailabilityResponse,
    CatalogResponse,
    EventResponse,
    EventSummaryResponse,
    PlayerResponse,
    RecommendationDetail,
    RecommendationResponse,
    ReplaceResponse,
    SummaryResponse,
    ToggleRequest,
    ToggleResponse,
    VenueResponse,
)
from squadplan.config import (
    MAX_DISTANCE_FILTER,
    MIN_DISTANCE_FILTER,
    PlanningCatalog,
    Settings,
    default_catalog,
    load_catalog,
)
from squadplan.engine import (
    DistanceFilter,
    EligibilityFilter,
    EventSummary,
    NoFilter,
    eligible_events,
    flip,
    normalize,
    rank_events,
    recommend,
    summarize,
    toggle,
    unresponsive_players,
)
from squadplan.errors import FactValidationError, PartialReplaceFailure, StorageError, StorageUnavailable
from squadplan.models import AvailabilityFact, sort_facts
from squadplan.store import CoalescingWriter, FactStore, create_store


logger = logging.getLogger("uvicorn.error")

RUNNERS_UP_LIMIT = 3


def _entries(facts: frozenset[AvailabilityFact]) -> list[AvailabilityEntry]:
    return [AvailabilityEntry.from_fact(fact) for fact in sort_facts(facts)]


def _summary_to_response(summary: EventSummary) -> EventSummaryResponse:
    return EventSummaryResponse(
        event=EventResponse.from_event(summary.event),
        count=summary.count,
        players=[PlayerResponse.from_player(player) for player in summary.players],
    )


def _storage_http_error(exc: StorageError) -> HTTPException:
    if isinstance(exc, PartialReplaceFailure):
        return HTTPException(
            status_code=500,
            detail=f"{exc}. Stored availability may be incomplete; reload before saving again.",
        )
    if isinstance(exc, StorageUnavailable):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body:
        return {}
    try:
        return json.loads(body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid JSON body: {exc}") from exc


def _eligibility(max_distance: Optional[float]) -> EligibilityFilter:
    return NoFilter() if max_distance is None else DistanceFilter(max_distance)


def create_app(
    settings: Settings | None = None,
    *,
    store: FactStore | None = None,
    catalog: PlanningCatalog | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    if catalog is None:
        catalog = load_catalog(settings.catalog_path) if settings.catalog_path else default_catalog()
    if store is None:
        store = create_store(settings)

    writer = CoalescingWriter(store, settings.save_quiet_period)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            writer.close()
        except StorageError as exc:
            logger.error("Unsaved availability was not written on shutdown: %s", exc)

    app = FastAPI(title="squadplan availability", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.writer = writer
    app.state.catalog = catalog
    logger.info(
        "Serving catalog %s (%d players, %d events) from %s store",
        catalog.version,
        len(catalog.players),
        len(catalog.events),
        store.name,
    )

    def read_facts() -> frozenset[AvailabilityFact]:
        try:
            return store.read_all()
        except StorageError as exc:
            logger.warning("Reading availability from %s failed: %s", store.name, exc)
            raise _storage_http_error(exc) from exc

    def current_facts() -> frozenset[AvailabilityFact]:
        unsaved = writer.unsaved
        return unsaved if unsaved is not None else read_facts()

    def replace_facts(facts: frozenset[AvailabilityFact]) -> str:
        try:
            result = writer.replace(facts)
        except StorageError as exc:
            logger.error("Saving availability to %s failed: %s", store.name, exc)
            raise _storage_http_error(exc) from exc
        return result.source

    def is_stale() -> bool:
        return bool(getattr(store, "stale", False))

    # the default distance only applies when every event has a known distance
    distance_known = bool(catalog.events) and all(event.distance_km is not None for event in catalog.events)

    def resolve_distance(max_distance: Optional[float]) -> Optional[float]:
        if max_distance is None and distance_known:
            return settings.default_max_distance
        return max_distance

    @app.get("/health")
    @app.get("/api/health")
    async def health() -> dict[str, Any]:
        return {
            "ok": True,
            "storage": store.name,
            "catalog_version": catalog.version,
            "pending_save": writer.pending,
            "last_save_error": str(writer.last_error) if writer.last_error else None,
        }

    @app.get("/api/catalog", response_model=CatalogResponse)
    async def get_catalog() -> CatalogResponse:
        return CatalogResponse(
            version=catalog.version,
            players=[PlayerResponse.from_player(player) for player in catalog.players],
            venues=[VenueResponse.from_venue(venue) for venue in catalog.venues],
            events=[EventResponse.from_event(event) for event in catalog.events],
        )

    @app.get("/api/availability", response_model=AvailabilityResponse)
    async def get_availability() -> AvailabilityResponse:
        facts = current_facts()
        return AvailabilityResponse(entries=_entries(facts), source=store.name, stale=is_stale())

    @app.put("/api/availability", response_model=ReplaceResponse)
    async def put_availability(request: Request) -> ReplaceResponse:
        payload = await _read_json(request)
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Request body must be a JSON object")
        try:
            facts = normalize(payload.get("entries"), catalog=catalog, max_entries=settings.max_entries)
        except FactValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        source = replace_facts(facts)
        return ReplaceResponse(count=len(facts), entries=_entries(facts), source=source)

    @app.post("/api/availability/toggle", response_model=ToggleResponse)
    async def toggle_availability(request: Request) -> ToggleResponse:
        payload = await _read_json(request)
        try:
            toggle_request = ToggleRequest.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid toggle request: {exc}") from exc

        current = current_facts()
        try:
            if toggle_request.available is None:
                updated, available = flip(
                    current, toggle_request.player_id, toggle_request.game_id, catalog=catalog
                )
            else:
                available = toggle_request.available
                updated = toggle(
                    current, toggle_request.player_id, toggle_request.game_id, available, catalog=catalog
                )
        except FactValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        source = store.name
        if updated != current:
            if settings.save_quiet_period > 0:
                writer.submit(updated)
            else:
                source = replace_facts(updated)
        return ToggleResponse(
            count=len(updated),
            entries=_entries(updated),
            source=source,
            available=available,
        )

    @app.get("/api/summary", response_model=SummaryResponse)
    async def get_summary(
        max_distance: float | None = Query(None, ge=MIN_DISTANCE_FILTER, le=MAX_DISTANCE_FILTER),
    ) -> SummaryResponse:
        max_distance = resolve_distance(max_distance)
        facts = current_facts()
        events = eligible_events(catalog.events, _eligibility(max_distance))
        summaries = summarize(catalog.players, events, facts)
        return SummaryResponse(
            catalog_version=catalog.version,
            max_distance=max_distance,
            eligible_events=len(events),
            summaries=[_summary_to_response(summary) for summary in summaries.values()],
            unresponsive=[
                PlayerResponse.from_player(player)
                for player in unresponsive_players(catalog.players, catalog.events, facts)
            ],
            stale=is_stale(),
        )

    @app.get("/api/recommendation", response_model=RecommendationResponse)
    async def get_recommendation(
        max_distance: float | None = Query(None, ge=MIN_DISTANCE_FILTER, le=MAX_DISTANCE_FILTER),
    ) -> RecommendationResponse:
        max_distance = resolve_distance(max_distance)
        facts = current_facts()
        eligibility = _eligibility(max_distance)
        best = recommend(catalog.players, catalog.events, facts, eligibility)
        ranked = rank_events(catalog.players, catalog.events, facts, eligibility)
        detail = None
        if best is not None:
            detail = RecommendationDetail(
                event=EventResponse.from_event(best.event),
                attendee_count=best.attendee_count,
                attendees=[PlayerResponse.from_player(player) for player in best.attendees],
            )
            ranked = [summary for summary in ranked if summary.event.event_id != best.event.event_id]
        return RecommendationResponse(
            catalog_version=catalog.version,
            max_distance=max_distance,
            recommendation=detail,
            runners_up=[_summary_to_response(summary) for summary in ranked[:RUNNERS_UP_LIMIT]],
            stale=is_stale(),
        )

    return app
