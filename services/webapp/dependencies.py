"""
Application-wide dependency providers for the web service.

The functions declared here are meant to be used with FastAPI's dependency
injection framework while keeping instantiation logic in one place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping

from maps.schemas import MapConfig
from services.storage.settings_store import SettingsStore

logger = logging.getLogger(__name__)

try:
    from config import (
        AUTOSAVE_INTERVAL,
        MAP_DEFAULTS,
        PRODUCT_NAME,
        PRODUCT_VERSION,
        SETTINGS_FILE,
    )
except ImportError:  # pragma: no cover - fallback for test envs
    PRODUCT_NAME = "mapweb"
    PRODUCT_VERSION = "0.1.0"
    SETTINGS_FILE = "data/web/settings.json"
    AUTOSAVE_INTERVAL = 300
    MAP_DEFAULTS = {}


@dataclass(slots=True)
class WebConfig:
    """Settings-related configuration resolved from ``config.py``."""

    product_name: str
    product_version: str
    settings_file: Path
    autosave_interval: int
    maps: Dict[str, MapConfig] = field(default_factory=dict)


def build_web_config(
    *,
    product_name: str = PRODUCT_NAME,
    product_version: str = PRODUCT_VERSION,
    settings_file: Path | str = SETTINGS_FILE,
    autosave_interval: int = AUTOSAVE_INTERVAL,
    map_defaults: Mapping[str, Mapping[str, Any]] = MAP_DEFAULTS,
) -> WebConfig:
    return WebConfig(
        product_name=str(product_name),
        product_version=str(product_version),
        settings_file=Path(settings_file),
        autosave_interval=int(autosave_interval),
        maps={
            map_id: MapConfig.from_dict(payload)
            for map_id, payload in (map_defaults or {}).items()
        },
    )


@lru_cache(maxsize=1)
def get_web_config() -> WebConfig:
    """Return the process-wide configuration."""
    return build_web_config()


@lru_cache(maxsize=1)
def get_settings_store() -> SettingsStore:
    """
    Return the process-wide settings store.

    Raises the store's load error when the file is unreadable or malformed, so
    the service refuses to start instead of discarding existing settings.
    """
    config = get_web_config()
    store = SettingsStore(config.settings_file)
    logger.info("Web settings loaded from %s", store.path)
    return store
