"""
HTTP route handlers for administering the web map settings.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, validator

from services.storage.errors import SerializationError, SettingsError
from services.storage.settings_store import SettingsStore
from services.webapp.dependencies import get_settings_store

logger = logging.getLogger(__name__)

router = APIRouter()


class MapEnabledPayload(BaseModel):
    """Request payload for toggling map visibility."""

    enabled: bool = Field(..., description="Whether the map is listed in the web front-end.")


class MapOrdinalPayload(BaseModel):
    """Request payload for the map sort position."""

    ordinal: int = Field(..., description="Sort key used when listing maps.")


class MapNamePayload(BaseModel):
    name: Optional[str] = Field(None, max_length=200, description="Display name; null removes it.")

    @validator("name")
    def _strip_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class MapSummary(BaseModel):
    map_id: str
    name: Optional[str] = None
    enabled: bool = False
    ordinal: int = 0


def _summarize(store: SettingsStore, map_id: str) -> MapSummary:
    return MapSummary(
        map_id=map_id,
        name=store.get_name(map_id),
        enabled=store.is_map_enabled(map_id),
        ordinal=store.get_ordinal(map_id),
    )


def _require_map(store: SettingsStore, map_id: str) -> None:
    if map_id not in store.list_map_ids():
        raise HTTPException(status_code=404, detail="Map not found")


@router.get("/health", summary="Service health probe")
def health_check() -> dict:
    """Return a static payload for uptime checks."""
    return {"status": "ok"}


@router.get(
    "/api/maps",
    response_model=List[MapSummary],
    summary="List maps known to the web settings",
)
def list_maps(store: SettingsStore = Depends(get_settings_store)) -> List[MapSummary]:
    summaries = [_summarize(store, map_id) for map_id in store.list_map_ids()]
    return sorted(summaries, key=lambda item: (item.ordinal, item.map_id))


@router.post(
    "/api/maps/enabled",
    response_model=List[MapSummary],
    summary="Enable or disable every map",
)
def set_all_maps_enabled(
    payload: MapEnabledPayload,
    store: SettingsStore = Depends(get_settings_store),
) -> List[MapSummary]:
    store.set_all_maps_enabled(payload.enabled)
    return list_maps(store)


@router.post(
    "/api/maps/{map_id}/enabled",
    response_model=MapSummary,
    summary="Enable or disable a single map",
)
def set_map_enabled(
    map_id: str,
    payload: MapEnabledPayload,
    store: SettingsStore = Depends(get_settings_store),
) -> MapSummary:
    store.set_map_enabled(payload.enabled, map_id)
    return _summarize(store, map_id)


@router.post(
    "/api/maps/{map_id}/ordinal",
    response_model=MapSummary,
    summary="Change the sort position of a map",
)
def set_map_ordinal(
    map_id: str,
    payload: MapOrdinalPayload,
    store: SettingsStore = Depends(get_settings_store),
) -> MapSummary:
    _require_map(store, map_id)
    try:
        store.set_ordinal(payload.ordinal, map_id)
    except SerializationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _summarize(store, map_id)


@router.post(
    "/api/maps/{map_id}/name",
    response_model=MapSummary,
    summary="Rename a map",
)
def set_map_name(
    map_id: str,
    payload: MapNamePayload,
    store: SettingsStore = Depends(get_settings_store),
) -> MapSummary:
    _require_map(store, map_id)
    store.set_name(payload.name, map_id)
    return _summarize(store, map_id)


@router.post("/api/settings/save", summary="Persist the web settings to disk")
def save_settings(store: SettingsStore = Depends(get_settings_store)) -> dict:
    outcome = store.try_save()
    if not outcome.ok:
        raise HTTPException(status_code=500, detail=f"Failed to save settings: {outcome.message}")
    return {"status": "saved", "path": str(store.path)}


@router.post("/api/settings/reload", summary="Reload the web settings from disk")
def reload_settings(store: SettingsStore = Depends(get_settings_store)) -> dict:
    try:
        store.load()
    except SettingsError as exc:
        logger.error("Failed to reload settings from %s: %s", store.path, exc)
        raise HTTPException(status_code=500, detail=f"Failed to reload settings: {exc}")
    return {"status": "reloaded", "maps": sorted(store.list_map_ids())}
