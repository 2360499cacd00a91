import pytest

from design_surface.canvas.viewport import Viewport


def test_default_is_one_to_one(viewport):
    assert viewport.zoom == 1.0
    assert viewport.pan == (0.0, 0.0)
    assert viewport.screen_delta_to_logical(12, -7) == (12, -7)


def test_delta_divides_by_zoom():
    vp = Viewport(zoom=2)
    assert vp.screen_delta_to_logical(10, -20) == (5, -10)


def test_delta_includes_display_scale():
    vp = Viewport(zoom=2, display_scale=2)
    assert vp.screen_delta_to_logical(40, 40) == (10, 10)


def test_pan_does_not_affect_deltas():
    vp = Viewport(zoom=0.5)
    vp.pan_by(100, -40)
    assert vp.pan == (100, -40)
    assert vp.screen_delta_to_logical(10, 10) == (20, 20)


@pytest.mark.parametrize("requested, expected", [(10, 4.0), (0.1, 0.25), (1.5, 1.5)])
def test_zoom_is_clamped(requested, expected):
    vp = Viewport()
    assert vp.set_zoom(requested) == expected
    assert Viewport(zoom=requested).zoom == expected


def test_zoom_step_doubles_and_halves():
    vp = Viewport()
    assert vp.zoom_step(1) is True
    assert vp.zoom == 2
    assert vp.zoom_step(1) is True
    assert vp.zoom == 4
    assert vp.zoom_step(1) is False
    assert vp.zoom == 4
    for expected in (2, 1, 0.5, 0.25):
        vp.zoom_step(-1)
        assert vp.zoom == expected
    assert vp.zoom_step(-1) is False


def test_logical_to_screen_scales_about_center():
    vp = Viewport(zoom=2)
    assert vp.logical_to_screen(200, 200) == (200, 200)
    assert vp.logical_to_screen(300, 200) == (400, 200)
    vp.pan_by(10, -5)
    assert vp.logical_to_screen(300, 200) == (410, 195)


def test_screen_to_logical_inverts():
    vp = Viewport(zoom=1.5, pan=(13, -21), display_scale=1.25)
    sx, sy = vp.logical_to_screen(87.5, 312)
    x, y = vp.screen_to_logical(sx, sy)
    assert x == pytest.approx(87.5)
    assert y == pytest.approx(312)


def test_reset():
    vp = Viewport(zoom=3, pan=(5, 5))
    vp.reset()
    assert vp.zoom == 1
    assert vp.pan == (0, 0)


def test_record_round_trip():
    vp = Viewport(zoom=2, pan=(5, 6))
    assert vp.to_record() == {"zoom": 2, "pan": {"x": 5, "y": 6}}
    restored = Viewport.from_record(vp.to_record())
    assert (restored.zoom, restored.pan) == (2, (5, 6))


def test_from_record_tolerates_bad_input():
    assert Viewport.from_record(None).zoom == 1
    vp = Viewport.from_record({"zoom": "big", "pan": None})
    assert (vp.zoom, vp.pan) == (1, (0, 0))
    assert Viewport.from_record({"zoom": 50}).zoom == 4


@pytest.mark.parametrize("kwargs", [
    {"zoom_min": 0},
    {"zoom_min": 3, "zoom_max": 2},
    {"display_scale": 0},
    {"canvas_size": -400},
])
def test_invalid_construction(kwargs):
    with pytest.raises(ValueError):
        Viewport(**kwargs)


def test_zoom_step_zero_is_noop():
    vp = Viewport(zoom=2)
    assert vp.zoom_step(0) is False
    assert vp.zoom == 2
