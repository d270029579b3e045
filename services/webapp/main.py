"""
Entrypoint for the map web front-end service.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI

from maps.schemas import MapGeometry
from services.jobs.scheduler import shutdown_scheduler, start_scheduler
from services.storage.settings_store import SettingsStore
from services.webapp import routes
from services.webapp.dependencies import WebConfig, get_settings_store, get_web_config
from services.webapp.responders import JsonDataResponder

logger = logging.getLogger(__name__)

SETTINGS_ROUTE = "/settings.json"

StoreProvider = Callable[[], SettingsStore]


def apply_map_defaults(store: SettingsStore, config: WebConfig) -> None:
    """
    Write the configured maps into the settings document.

    An invalid map is skipped and its previous settings node is left as it was.
    """
    for ordinal, (map_id, map_config) in enumerate(config.maps.items()):
        spawn_pos = map_config.start_pos or (0, 0)
        previous = store.get("maps", map_id)
        try:
            geometry = MapGeometry.from_config(map_id, map_config, spawn_pos=spawn_pos)
            store.import_from_config(map_config, map_id)
            store.import_from_map(geometry)
        except (ValueError, TypeError) as exc:
            _restore_map(store, map_id, previous)
            logger.error("Skipping invalid map configuration %s: %s", map_id, exc)
            continue
        if store.get("maps", map_id, "enabled") is None:
            store.set_map_enabled(True, map_id)
        store.set_ordinal(ordinal, map_id)


def _restore_map(store: SettingsStore, map_id: str, previous) -> None:
    if previous is None:
        store.remove("maps", map_id)
    else:
        store.set_value(previous, "maps", map_id)


def create_app(
    config: Optional[WebConfig] = None,
    store_provider: StoreProvider = get_settings_store,
) -> FastAPI:
    config = config or get_web_config()
    app = FastAPI(
        title=config.product_name,
        description="Web front-end settings for rendered maps",
        version=config.product_version,
    )
    app.include_router(routes.router)
    if store_provider is not get_settings_store:
        app.dependency_overrides[get_settings_store] = store_provider

    responder = JsonDataResponder(
        lambda: store_provider().to_json(),
        product=config.product_name,
        version=config.product_version,
    )
    responder.mount(app, SETTINGS_ROUTE)

    @app.on_event("startup")
    async def _startup() -> None:
        # A load failure propagates and aborts startup.
        store = store_provider()
        apply_map_defaults(store, config)
        outcome = store.try_save()
        if not outcome.ok:
            logger.warning("Initial settings save failed: %s", outcome.message)
        start_scheduler(store, config.autosave_interval)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        shutdown_scheduler()
        outcome = store_provider().try_save()
        if outcome.ok:
            logger.info("Web settings flushed on shutdown.")
        else:
            logger.error("Web settings were not flushed on shutdown: %s", outcome.message)

    return app


app = create_app()
