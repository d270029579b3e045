import pytest

from maps.schemas import MapConfig, MapGeometry, RenderedMapView


def test_map_config_defaults():
    config = MapConfig()

    assert config.name is None
    assert config.world == "world"
    assert config.sky_color == "#7dabff"
    assert config.ambient_light == 0.0
    assert config.hires_tile_size == 32
    assert config.lowres_points_per_hires_tile == 4
    assert config.lowres_points_per_lowres_tile == 50


def test_map_config_from_dict_accepts_camel_case_and_keeps_unknown_keys():
    config = MapConfig.from_dict(
        {
            "name": "Nether",
            "skyColor": "#290000",
            "ambientLight": 0.6,
            "startPos": {"x": 4, "z": -8},
            "removeCavesBelowY": -100,
            "markerSets": {"portals": []},
        }
    )

    assert config.name == "Nether"
    assert config.sky_color == "#290000"
    assert config.ambient_light == 0.6
    assert config.start_pos == (4, -8)
    assert config.remove_caves_below_y == -100
    assert config.extra == {"markerSets": {"portals": []}}


def test_map_config_from_dict_accepts_start_pos_pair():
    config = MapConfig.from_dict({"start_pos": [1, 2]})

    assert config.start_pos == (1, 2)


def test_map_geometry_from_config_uses_hidden_sizing_fields():
    config = MapConfig(world="world_nether", hires_tile_size=30, lowres_points_per_hires_tile=4)

    geometry = MapGeometry.from_config("nether", config, spawn_pos=(3, 4))

    assert geometry.hires_tile_size == (30, 30)
    assert geometry.lowres_points_per_hires_tile == (4, 4)
    assert geometry.lowres_tile_size == (50, 50)
    assert geometry.world_id == "world_nether"
    assert geometry.spawn_pos == (3, 4)


def test_map_geometry_satisfies_rendered_map_view():
    geometry = MapGeometry.from_config("overworld", MapConfig())

    assert isinstance(geometry, RenderedMapView)


def test_map_geometry_from_config_rejects_zero_points_per_hires_tile():
    with pytest.raises(ValueError, match="zero lowres points"):
        MapGeometry.from_config("flat", MapConfig(lowres_points_per_hires_tile=0))
