"""
JSON-backed settings document for the web map front-end.

The whole document is held in memory and persisted as one unit through
:mod:`services.storage.atomic_file`, so request handlers reading the file
never observe a partial write.
"""

from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Lock, RLock
from typing import Any, Dict, Optional, Set

import numpy as np

from maps.colors import parse_color
from maps.schemas import MapConfig, RenderedMapView, Vector2i
from services.storage import document
from services.storage.atomic_file import discard_part, publish_bytes
from services.storage.document import Node, Segment
from services.storage.errors import (
    ErrorKind,
    SettingsError,
    SettingsIOError,
    SettingsParseError,
)

logger = logging.getLogger(__name__)

MAPS_KEY = "maps"

_INT32 = np.iinfo(np.int32)
_INT64 = np.iinfo(np.int64)


@dataclass(slots=True)
class SaveOutcome:
    """Result of :meth:`SettingsStore.try_save`."""

    ok: bool
    kind: Optional[ErrorKind] = None
    message: str = ""


def _truncating_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _coerce_integer(value: Any, bounds: np.iinfo) -> int:
    if isinstance(value, bool):
        result = int(value)
    elif isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not np.isfinite(value):
            return 0
        result = int(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            result = int(text, 10)
        except ValueError:
            try:
                parsed = float(text)
            except ValueError:
                return 0
            if not np.isfinite(parsed):
                return 0
            result = int(parsed)
    else:
        return 0
    if result < bounds.min or result > bounds.max:
        return 0
    return result


def _coerce_float(value: Any) -> float:
    if isinstance(value, (bool, int, float)):
        try:
            return float(value)
        except OverflowError:
            return 0.0
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0.0
    return 0.0


class SettingsStore:
    """
    Hierarchical settings document persisted atomically to a JSON file.

    All document access goes through one re-entrant lock. ``save`` encodes the
    document under that lock and performs the disk write outside of it, so
    readers are never blocked on I/O. Nothing guards the file against other
    processes writing the same path.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = RLock()
        self._publish_lock = Lock()
        self._generations = itertools.count(1)
        self._published_generation = 0
        self._root: Dict[str, Node] = {}

        try:
            if not self._path.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.touch()
                logger.info("Created empty settings file %s", self._path)
        except OSError as exc:
            raise SettingsIOError(
                f"Unable to create settings file {self._path}: {exc}", path=self._path
            ) from exc
        discard_part(self._path)
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    # === PERSISTENCE ===

    def load(self) -> None:
        """
        Replace the in-memory document with the file content.

        Raises:
            SettingsIOError: if the file cannot be read.
            SettingsParseError: if the content is not a JSON object. The
                previous in-memory document is kept.
        """
        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            raise SettingsIOError(
                f"Unable to read settings file {self._path}: {exc}", path=self._path
            ) from exc
        root = self._decode(raw)
        with self._lock:
            self._root = root
        logger.debug("Loaded settings from %s (%d top-level keys)", self._path, len(root))

    def save(self) -> None:
        """
        Persist the current document.

        Raises:
            SettingsIOError: if publishing fails; the file on disk keeps its
                previous content.
        """
        with self._lock:
            payload = self._encode()
            generation = next(self._generations)

        with self._publish_lock:
            if generation < self._published_generation:
                logger.debug("Skipping stale save of generation %d", generation)
                return
            try:
                publish_bytes(self._path, payload)
            except SettingsError:
                raise
            except OSError as exc:
                raise SettingsIOError(
                    f"Unable to write settings file {self._path}: {exc}", path=self._path
                ) from exc
            self._published_generation = generation
        logger.debug("Saved settings to %s (%d bytes)", self._path, len(payload))

    def try_save(self) -> SaveOutcome:
        """Persist the document, reporting failure as a value instead of raising."""
        try:
            self.save()
        except SettingsError as exc:
            logger.error("Failed to save settings to %s: %s", self._path, exc)
            return SaveOutcome(ok=False, kind=exc.kind, message=str(exc))
        return SaveOutcome(ok=True)

    def to_json(self) -> str:
        """Serialize the current document as JSON text."""
        with self._lock:
            return json.dumps(self._root, ensure_ascii=False, indent=2)

    def _encode(self) -> bytes:
        return self.to_json().encode("utf-8")

    def _decode(self, raw: bytes) -> Dict[str, Node]:
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise SettingsParseError(
                f"Settings file {self._path} is not valid UTF-8: {exc}", path=self._path
            ) from exc
        if not text.strip():
            return {}
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SettingsParseError(
                f"Settings file {self._path} is malformed: {exc}", path=self._path
            ) from exc
        if not isinstance(payload, dict):
            raise SettingsParseError(
                f"Settings file {self._path} must contain a JSON object, "
                f"found {type(payload).__name__}",
                path=self._path,
            )
        return payload

    # === GENERIC ACCESS ===

    def set_value(self, value: Any, *path: Segment) -> None:
        """
        Write ``value`` at ``path``, creating intermediate nodes.

        Raises:
            SerializationError: if the value cannot be stored; the document
                is left unchanged.
        """
        with self._lock:
            document.assign(self._root, path, value)

    def remove(self, *path: Segment) -> bool:
        """Delete the node at ``path``; returns whether it existed."""
        if not path:
            return False
        with self._lock:
            parent = document.resolve(self._root, path[:-1])
            key = path[-1]
            if isinstance(parent, dict) and isinstance(key, str) and key in parent:
                del parent[key]
                return True
            if isinstance(parent, list) and isinstance(key, int) and 0 <= key < len(parent):
                del parent[key]
                return True
            return False

    def get(self, *path: Segment) -> Any:
        """Return a detached copy of the node at ``path`` or ``None``."""
        with self._lock:
            return document.snapshot(document.resolve(self._root, path))

    def get_string(self, *path: Segment) -> Optional[str]:
        with self._lock:
            value = document.resolve(self._root, path)
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return None

    def get_int(self, *path: Segment) -> int:
        with self._lock:
            value = document.resolve(self._root, path)
        return _coerce_integer(value, _INT32)

    def get_long(self, *path: Segment) -> int:
        with self._lock:
            value = document.resolve(self._root, path)
        return _coerce_integer(value, _INT64)

    def get_float(self, *path: Segment) -> float:
        """Return the value rounded to single precision."""
        with self._lock:
            value = document.resolve(self._root, path)
        with np.errstate(over="ignore"):
            return float(np.float32(_coerce_float(value)))

    def get_double(self, *path: Segment) -> float:
        with self._lock:
            value = document.resolve(self._root, path)
        return _coerce_float(value)

    # === MAPS ===

    def list_map_ids(self) -> Set[str]:
        with self._lock:
            return set(document.children(self._root, [MAPS_KEY]))

    def set_all_maps_enabled(self, enabled: bool) -> None:
        """Set ``enabled`` on every existing map entry; call :meth:`save` to persist."""
        with self._lock:
            for map_id, entry in list(document.children(self._root, [MAPS_KEY]).items()):
                if isinstance(entry, dict):
                    entry["enabled"] = bool(enabled)
                else:
                    self.set_value(bool(enabled), MAPS_KEY, map_id, "enabled")

    def set_map_enabled(self, enabled: bool, map_id: str) -> None:
        self.set_value(bool(enabled), MAPS_KEY, map_id, "enabled")

    def is_map_enabled(self, map_id: str) -> bool:
        with self._lock:
            return document.resolve(self._root, [MAPS_KEY, map_id, "enabled"]) is True

    def import_from_map(self, view: RenderedMapView) -> None:
        """
        Store the tile geometry of a rendered map.

        The lowres point size is the hires tile size divided by the number of
        lowres points per hires tile, truncated toward zero.
        """
        hires_size = _vector(view.hires_tile_size)
        grid_offset = _vector(view.hires_grid_offset)
        lowres_points = _vector(view.lowres_tile_size)
        points_per_hires = _vector(view.lowres_points_per_hires_tile)
        spawn = _vector(view.spawn_pos)
        if 0 in points_per_hires:
            raise ValueError(
                f"Map {view.map_id!r} reports zero lowres points per hires tile"
            )

        point_size = (
            _truncating_div(hires_size[0], points_per_hires[0]),
            _truncating_div(hires_size[1], points_per_hires[1]),
        )
        lowres_size = (point_size[0] * lowres_points[0], point_size[1] * lowres_points[1])
        lowres_translate = (_truncating_div(point_size[0], 2), _truncating_div(point_size[1], 2))

        map_id = view.map_id
        with self._lock:
            self._set_vector(hires_size, map_id, "hires", "tileSize")
            self._set_vector((1, 1), map_id, "hires", "scale")
            self._set_vector(grid_offset, map_id, "hires", "translate")
            self._set_vector(lowres_size, map_id, "lowres", "tileSize")
            self._set_vector(point_size, map_id, "lowres", "scale")
            self._set_vector(lowres_translate, map_id, "lowres", "translate")
            self._set_vector(spawn, map_id, "startPos")
            self.set_value(str(view.world_id), MAPS_KEY, map_id, "world")
        logger.debug(
            "Imported geometry for map %s: hires=%s lowres=%s point=%s",
            map_id,
            hires_size,
            lowres_size,
            point_size,
        )

    def import_from_config(self, config: MapConfig, map_id: str) -> None:
        """
        Copy display settings of a map config.

        Raises:
            ValueError: if the sky colour cannot be parsed; nothing is written.
        """
        sky = parse_color(config.sky_color)
        ambient_light = float(config.ambient_light)
        start_pos = _vector(config.start_pos) if config.start_pos is not None else None

        with self._lock:
            if start_pos is not None:
                self._set_vector(start_pos, map_id, "startPos")
            self.set_value(sky.r, MAPS_KEY, map_id, "skyColor", "r")
            self.set_value(sky.g, MAPS_KEY, map_id, "skyColor", "g")
            self.set_value(sky.b, MAPS_KEY, map_id, "skyColor", "b")
            self.set_value(ambient_light, MAPS_KEY, map_id, "ambientLight")
            self.set_name(config.name, map_id)

    def set_ordinal(self, ordinal: int, map_id: str) -> None:
        self.set_value(int(ordinal), MAPS_KEY, map_id, "ordinal")

    def get_ordinal(self, map_id: str) -> int:
        return self.get_int(MAPS_KEY, map_id, "ordinal")

    def set_name(self, name: Optional[str], map_id: str) -> None:
        """Set the display name of a map; ``None`` removes it."""
        if name is None:
            self.remove(MAPS_KEY, map_id, "name")
        else:
            self.set_value(str(name), MAPS_KEY, map_id, "name")

    def get_name(self, map_id: str) -> Optional[str]:
        return self.get_string(MAPS_KEY, map_id, "name")

    def _set_vector(self, vector: Vector2i, map_id: str, *path: str) -> None:
        self.set_value(vector[0], MAPS_KEY, map_id, *path, "x")
        self.set_value(vector[1], MAPS_KEY, map_id, *path, "z")


def _vector(value: Any) -> Vector2i:
    x, z = value
    return int(x), int(z)
