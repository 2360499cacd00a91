import pytest

from design_surface.core import CropMask, ImageContent, ImageElement
from design_surface.canvas.crop import CropMaskController, fit_mask
from design_surface.canvas.viewport import Viewport


def _element(mask=None, rotation=0.0):
    return ImageElement(id="img", x=200.0, y=200.0, width=100.0, height=100.0, rotation=rotation, mask=mask)


def _drag(ctl, handle, dx, dy, start=(500.0, 500.0)):
    ctl.pointer_down(handle, *start)
    mask = ctl.pointer_move(start[0] + dx, start[1] + dy)
    ctl.pointer_up()
    return mask


class TestResize:
    def test_corner_resize_is_clamped_to_element(self, image_element):
        ctl = CropMaskController(image_element)
        mask = _drag(ctl, "se", 40, 40)
        assert mask.width <= 100 and mask.height <= 100
        assert mask.fits(100, 100)
        assert mask == CropMask(50, 50, 100, 100)

    def test_resize_keeps_center(self, image_element):
        ctl = CropMaskController(image_element)
        mask = _drag(ctl, "e", 5, 0)
        assert (mask.x, mask.y, mask.width, mask.height) == (50, 50, 90, 80)

    def test_west_handle_moving_inward_shrinks(self, image_element):
        ctl = CropMaskController(image_element)
        assert _drag(ctl, "w", 10, 0).width == 60

    def test_north_handle_moving_outward_grows(self, image_element):
        ctl = CropMaskController(image_element)
        mask = _drag(ctl, "n", 0, -5)
        assert (mask.width, mask.height) == (80, 90)

    def test_minimum_size(self, image_element):
        ctl = CropMaskController(image_element, min_size=20)
        mask = _drag(ctl, "sw", 200, -200)
        assert (mask.width, mask.height) == (20, 20)

    def test_off_center_mask_limited_by_nearest_edge(self):
        ctl = CropMaskController(_element(CropMask(30, 50, 40, 40)))
        mask = _drag(ctl, "e", 50, 0)
        assert mask.width == 60
        assert mask.fits(100, 100)

    def test_pointer_delta_is_zoom_corrected(self, image_element):
        ctl = CropMaskController(image_element, viewport=Viewport(zoom=2))
        assert _drag(ctl, "e", 10, 0).width == 90

    def test_deltas_are_measured_from_pointer_down(self, image_element):
        ctl = CropMaskController(image_element)
        ctl.pointer_down("e", 0, 0)
        ctl.pointer_move(3, 0)
        mask = ctl.pointer_move(5, 0)
        assert mask.width == 90


class TestMoveHandle:
    def test_element_moves_opposite_and_mask_stays_on_screen(self):
        ctl = CropMaskController(_element(CropMask(50, 50, 60, 60)))
        before = ctl.element.x - ctl.element.width / 2 + ctl.mask.x
        mask = _drag(ctl, "move", 10, 5)
        assert (mask.x, mask.y) == (60, 55)
        assert (ctl.element.x, ctl.element.y) == (190, 195)
        after = ctl.element.x - ctl.element.width / 2 + mask.x
        assert after == before

    def test_move_is_clipped_not_rejected(self):
        ctl = CropMaskController(_element(CropMask(50, 50, 60, 60)))
        mask = _drag(ctl, "move", 50, 0)
        assert mask.x == 70
        assert ctl.element.x == 180
        assert mask.fits(100, 100)

    def test_move_clipped_in_negative_direction(self):
        ctl = CropMaskController(_element(CropMask(50, 50, 60, 60)))
        mask = _drag(ctl, "move", -100, -100)
        assert (mask.x, mask.y) == (30, 30)
        assert (ctl.element.x, ctl.element.y) == (220, 220)

    def test_full_size_mask_cannot_move(self):
        ctl = CropMaskController(_element())
        mask = _drag(ctl, "move", 25, -25)
        assert mask == CropMask(50, 50, 100, 100)
        assert (ctl.element.x, ctl.element.y) == (200, 200)

    def test_move_on_rotated_element(self):
        ctl = CropMaskController(_element(CropMask(50, 50, 60, 60), rotation=90))
        mask = _drag(ctl, "move", 10, 0)
        assert mask.x == pytest.approx(50)
        assert mask.y == pytest.approx(40)
        assert ctl.element.x == pytest.approx(190)
        assert ctl.element.y == pytest.approx(200)

    def test_move_is_zoom_corrected(self):
        ctl = CropMaskController(_element(CropMask(50, 50, 60, 60)), viewport=Viewport(zoom=4))
        mask = _drag(ctl, "move", 20, 0)
        assert mask.x == 55
        assert ctl.element.x == 195


class TestSession:
    def test_states(self, image_element):
        ctl = CropMaskController(image_element)
        assert ctl.state == "idle"
        ctl.pointer_down("ne", 0, 0)
        assert ctl.state == "dragging"
        assert ctl.handle == "ne"
        ctl.pointer_up()
        assert ctl.state == "idle"

    def test_move_while_idle_is_ignored(self, image_element):
        ctl = CropMaskController(image_element)
        assert ctl.pointer_move(100, 100) == image_element.mask

    def test_unknown_handle(self, image_element):
        with pytest.raises(ValueError):
            CropMaskController(image_element).pointer_down("rotate", 0, 0)

    def test_apply_commits_mask_and_translation(self):
        ctl = CropMaskController(_element(CropMask(50, 50, 60, 60)))
        _drag(ctl, "move", 10, 0)
        committed = ctl.apply()
        assert committed.mask == CropMask(60, 50, 60, 60)
        assert committed.x == 190
        assert committed.has_mask
        assert committed.to_record()["hasMask"] is True

    def test_cancel_restores_element(self):
        original = _element(CropMask(50, 50, 60, 60))
        ctl = CropMaskController(original)
        _drag(ctl, "move", 10, 10)
        _drag(ctl, "se", 5, 5)
        restored = ctl.cancel()
        assert restored == original

    def test_input_element_is_not_mutated(self):
        original = _element(CropMask(50, 50, 60, 60))
        ctl = CropMaskController(original)
        _drag(ctl, "move", 10, 10)
        ctl.apply()
        assert (original.x, original.y, original.mask) == (200, 200, CropMask(50, 50, 60, 60))

    def test_finished_session_rejects_input(self, image_element):
        ctl = CropMaskController(image_element)
        ctl.cancel()
        with pytest.raises(RuntimeError):
            ctl.pointer_down("move", 0, 0)
        with pytest.raises(RuntimeError):
            ctl.apply()

    def test_element_without_mask_starts_with_full_mask(self):
        assert CropMaskController(_element()).mask == CropMask(50, 50, 100, 100)

    def test_element_without_area(self):
        with pytest.raises(ValueError):
            CropMaskController(ImageElement(id="x", x=0, y=0, width=0, height=10))


def test_fit_mask_shrinks_and_shifts():
    assert fit_mask(CropMask(50, 50, 150, 30), 100, 100) == CropMask(50, 50, 100, 30)
    assert fit_mask(CropMask(95, 5, 20, 20), 100, 100) == CropMask(90, 10, 20, 20)


def test_image_content_clamp():
    assert ImageContent(scale=12, offset_x=3, offset_y=-4).clamped() == ImageContent(5, 3, -4)
    assert ImageContent(scale=0.01).clamped().scale == 0.1
    assert ImageContent(scale=2).clamped() == ImageContent(2, 0, 0)


def test_element_record_round_trip(image_element):
    record = image_element.to_record()
    assert record["mask"] == {"x": 50, "y": 50, "width": 80, "height": 80}
    assert record["imageContent"] == {"scale": 1.0, "offsetX": 0.0, "offsetY": 0.0}
    assert ImageElement.from_record(record) == image_element


def test_element_record_reads_shape_clip():
    element = ImageElement.from_record({"id": 7, "x": 10, "y": 10, "width": 40, "height": 40,
                                        "shapeClip": {"x": 20, "y": 20, "width": 30, "height": 30}})
    assert element.id == "7"
    assert element.mask == CropMask(20, 20, 30, 30)


class TestCommitRounding:
    def test_fractional_resize_is_stored_in_whole_units(self):
        ctl = CropMaskController(_element(CropMask(50, 50, 60, 60)), viewport=Viewport(zoom=3))
        assert _drag(ctl, "e", 10, 0).width == pytest.approx(60 + 20 / 3)
        committed = ctl.apply()
        assert committed.mask == CropMask(50, 50, 67, 60)
        assert committed.mask.fits(100, 100)

    def test_fractional_move_is_stored_in_whole_units(self):
        ctl = CropMaskController(_element(CropMask(50, 50, 60, 60)), viewport=Viewport(zoom=3))
        _drag(ctl, "move", 10, 0)
        committed = ctl.apply()
        assert committed.mask == CropMask(53, 50, 60, 60)
        assert committed.x == pytest.approx(200 - 10 / 3)

    def test_rounding_never_leaves_fractional_element(self):
        el = ImageElement(id="img", x=200, y=200, width=99.6, height=99.6)
        committed = CropMaskController(el).apply()
        assert committed.mask.fits(99.6, 99.6)


class TestReset:
    def test_reset_removes_mask(self, image_element):
        ctl = CropMaskController(image_element)
        _drag(ctl, "move", 5, 5)
        el = ctl.reset()
        assert el.mask is None
        assert el.has_mask is False
        assert el.to_record()["hasMask"] is False
        assert (el.x, el.y) == (image_element.x, image_element.y)
        assert image_element.mask == CropMask(50, 50, 80, 80)

    def test_reset_ends_session(self, image_element):
        ctl = CropMaskController(image_element)
        ctl.reset()
        assert ctl.closed
        with pytest.raises(RuntimeError):
            ctl.pointer_down("e", 0, 0)
        with pytest.raises(RuntimeError):
            ctl.reset()
