import json

import pytest

from design_surface.core import SurfaceConfig, DEFAULT_CONFIG, save_config, load_config


def test_defaults():
    assert DEFAULT_CONFIG.canvas_size == 400
    assert DEFAULT_CONFIG.max_bleed == 50
    assert DEFAULT_CONFIG.default_bleed == 3
    assert (DEFAULT_CONFIG.zoom_min, DEFAULT_CONFIG.zoom_max) == (0.25, 4.0)


@pytest.mark.parametrize("kwargs", [
    {"canvas_size": 0},
    {"display_size": -1},
    {"max_bleed": -1},
    {"zoom_min": 5},
    {"min_scale": 0},
    {"min_scale": 3, "max_scale": 2},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        SurfaceConfig(**kwargs)


def test_round_trip(tmp_path):
    path = tmp_path / "surface_config.json"
    config = SurfaceConfig(canvas_size=500, max_bleed=20, api_base_url="http://api.local")
    save_config(config, path)
    assert load_config(path) == config


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "nope.json") == SurfaceConfig()


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_unusable_file_gives_defaults(tmp_path, content):
    path = tmp_path / "surface_config.json"
    path.write_text(content)
    assert load_config(path) == SurfaceConfig()


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "surface_config.json"
    path.write_text(json.dumps({"max_bleed": 10, "theme": "dark"}))
    config = load_config(path)
    assert config.max_bleed == 10
    assert config.canvas_size == 400


def test_bad_range_in_file_raises(tmp_path):
    path = tmp_path / "surface_config.json"
    path.write_text(json.dumps({"zoom_min": 8}))
    with pytest.raises(ValueError):
        load_config(path)
