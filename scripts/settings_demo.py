"""
Demonstrates importing map geometry into a settings file and reading it back.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from maps.schemas import MapConfig, MapGeometry
from services.storage.settings_store import SettingsStore


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", nargs="?", default="data/demo/settings.json")
    parser.add_argument("--map-id", default="overworld")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s | %(message)s")

    store = SettingsStore(Path(args.path))
    config = MapConfig(name="Overworld", sky_color="#7dabff", ambient_light=0.1)
    store.import_from_map(
        MapGeometry(
            map_id=args.map_id,
            world_id="world",
            hires_tile_size=(32, 32),
            hires_grid_offset=(2, 2),
            lowres_tile_size=(50, 50),
            lowres_points_per_hires_tile=(4, 4),
            spawn_pos=(120, -48),
        )
    )
    store.import_from_config(config, args.map_id)
    store.set_map_enabled(True, args.map_id)
    store.set_ordinal(0, args.map_id)
    store.save()

    print(store.to_json())
    print(f"maps: {sorted(store.list_map_ids())}")


if __name__ == "__main__":
    main()
