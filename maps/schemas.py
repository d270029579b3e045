"""
Map descriptions consumed by the web settings store.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, runtime_checkable

Vector2i = Tuple[int, int]


@runtime_checkable
class RenderedMapView(Protocol):
    """Read-only view of the geometry a rendered map exposes to the web front-end."""

    map_id: str
    world_id: str
    hires_tile_size: Vector2i
    hires_grid_offset: Vector2i
    lowres_tile_size: Vector2i
    lowres_points_per_hires_tile: Vector2i
    spawn_pos: Vector2i


@dataclass(slots=True)
class MapConfig:
    """User-facing configuration of a single map."""

    name: Optional[str] = None
    world: str = "world"
    start_pos: Optional[Vector2i] = None
    sky_color: str = "#7dabff"
    ambient_light: float = 0.0
    world_sky_light: int = 15
    remove_caves_below_y: int = 55
    cave_detection_uses_block_light: bool = False
    render_edges: bool = True
    storage: str = "file"
    ignore_missing_light_data: bool = False

    # hidden config fields
    hires_tile_size: int = 32
    lowres_points_per_hires_tile: int = 4
    lowres_points_per_lowres_tile: int = 50

    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MapConfig":
        """Build a config from a mapping using either camelCase or snake_case keys."""
        known = {f.name for f in fields(cls) if f.name != "extra"}
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in payload.items():
            name = _snake_case(key)
            if name in known:
                values[name] = value
            else:
                extra[key] = value
        start_pos = values.get("start_pos")
        if isinstance(start_pos, Mapping):
            values["start_pos"] = (int(start_pos["x"]), int(start_pos["z"]))
        elif start_pos is not None:
            x, z = start_pos
            values["start_pos"] = (int(x), int(z))
        return cls(**values, extra=extra)


@dataclass(frozen=True, slots=True)
class MapGeometry:
    """Plain value implementation of :class:`RenderedMapView`."""

    map_id: str
    world_id: str
    hires_tile_size: Vector2i
    hires_grid_offset: Vector2i
    lowres_tile_size: Vector2i
    lowres_points_per_hires_tile: Vector2i
    spawn_pos: Vector2i = (0, 0)

    @classmethod
    def from_config(
        cls,
        map_id: str,
        config: MapConfig,
        *,
        world_id: Optional[str] = None,
        spawn_pos: Vector2i = (0, 0),
        hires_grid_offset: Vector2i = (0, 0),
    ) -> "MapGeometry":
        """Derive the tile geometry implied by the hidden sizing fields of a map config."""
        hires = config.hires_tile_size
        per_hires = config.lowres_points_per_hires_tile
        per_lowres = config.lowres_points_per_lowres_tile
        if per_hires == 0:
            raise ValueError(f"Map {map_id!r} has zero lowres points per hires tile")
        return cls(
            map_id=map_id,
            world_id=world_id if world_id is not None else config.world,
            hires_tile_size=(hires, hires),
            hires_grid_offset=hires_grid_offset,
            lowres_tile_size=(per_lowres, per_lowres),
            lowres_points_per_hires_tile=(per_hires, per_hires),
            spawn_pos=spawn_pos,
        )


def _snake_case(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out).lstrip("_")
