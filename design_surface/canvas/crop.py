from __future__ import annotations

import math
import logging
from dataclasses import replace
from typing import Optional, Tuple

from design_surface.core import MIN_MASK_SIZE, CropMask, ImageElement, clamp, round_half_up
from .viewport import Viewport

logger = logging.getLogger(__name__)

HANDLES = ("move", "n", "s", "e", "w", "ne", "nw", "se", "sw")

# Outward direction of each resize handle in element-local axes
_HANDLE_DIRS = {
    "n": (0, -1),
    "s": (0, 1),
    "e": (1, 0),
    "w": (-1, 0),
    "ne": (1, -1),
    "nw": (-1, -1),
    "se": (1, 1),
    "sw": (-1, 1),
}


def _rotate(dx: float, dy: float, angle_deg: float) -> Tuple[float, float]:
    if not angle_deg:
        return dx, dy
    a = math.radians(angle_deg)
    ca, sa = math.cos(a), math.sin(a)
    return dx * ca - dy * sa, dx * sa + dy * ca


def _extent_limits(center: float, outer: float, min_size: float) -> Tuple[float, float]:
    """Allowed (min, max) mask extent along one axis for a fixed center."""
    hi = max(0.0, 2 * min(center, outer - center))
    return min(min_size, hi), hi


def fit_mask(mask: CropMask, width: float, height: float, min_size: float = MIN_MASK_SIZE) -> CropMask:
    """Shrink and shift mask until it lies inside a width x height element."""
    w = clamp(mask.width, min(min_size, width), width)
    h = clamp(mask.height, min(min_size, height), height)
    x = clamp(mask.x, w / 2, width - w / 2)
    y = clamp(mask.y, h / 2, height - h / 2)
    return CropMask(x, y, w, h)


class CropMaskController:
    """Crop-mode session for one image element.

    States are ``idle`` and ``dragging`` (with the active handle). Resize
    handles grow or shrink the mask symmetrically about its center, bounded
    by the element and by min_size. The ``move`` handle pans the photo behind
    a fixed window: the element is translated opposite to the pointer while
    the mask's local center follows the pointer, so on screen the mask does
    not move.

    Nothing is committed until apply(), which stores the mask in whole units.
    cancel() restores the element as it was when crop mode was entered and
    reset() drops the mask entirely.
    """

    def __init__(self, element: ImageElement, viewport: Optional[Viewport] = None, min_size: float = MIN_MASK_SIZE) -> None:
        if element.width <= 0 or element.height <= 0:
            raise ValueError(f"image element {element.id!r} has no area")
        self.viewport = viewport or Viewport()
        self.min_size = float(min_size)
        self._original = replace(element)
        self.element = replace(element)
        start = element.mask or CropMask.full(element.width, element.height)
        self.mask = fit_mask(start, element.width, element.height, self.min_size)
        self.handle: Optional[str] = None
        self.closed = False
        self._start_pointer: Tuple[float, float] = (0.0, 0.0)
        self._start_mask: CropMask = self.mask
        self._start_element: ImageElement = self.element

    @property
    def state(self) -> str:
        return "dragging" if self.handle else "idle"

    def _ensure_open(self) -> None:
        if self.closed:
            raise RuntimeError("crop session already finished")

    def pointer_down(self, handle: str, sx: float, sy: float) -> None:
        self._ensure_open()
        if handle not in HANDLES:
            raise ValueError(f"unknown crop handle {handle!r}")
        self.handle = handle
        self._start_pointer = (float(sx), float(sy))
        self._start_mask = self.mask
        self._start_element = replace(self.element)

    def pointer_move(self, sx: float, sy: float) -> CropMask:
        """Apply the pointer position to the mask; returns the current mask."""
        self._ensure_open()
        if not self.handle:
            return self.mask
        dx, dy = self.viewport.screen_delta_to_logical(sx - self._start_pointer[0], sy - self._start_pointer[1])
        # pointer deltas arrive in canvas axes; the mask lives in element axes
        dx, dy = _rotate(dx, dy, -self._start_element.rotation)
        if self.handle == "move":
            self._move(dx, dy)
        else:
            self._resize(dx, dy)
        return self.mask

    def pointer_up(self) -> None:
        self.handle = None

    def _resize(self, dx: float, dy: float) -> None:
        m = self._start_mask
        el = self._start_element
        ux, uy = _HANDLE_DIRS[self.handle]
        w, h = m.width, m.height
        if ux:
            lo, hi = _extent_limits(m.x, el.width, self.min_size)
            w = clamp(m.width + 2 * ux * dx, lo, hi)
        if uy:
            lo, hi = _extent_limits(m.y, el.height, self.min_size)
            h = clamp(m.height + 2 * uy * dy, lo, hi)
        self.mask = CropMask(m.x, m.y, w, h)

    def _move(self, dx: float, dy: float) -> None:
        m = self._start_mask
        el = self._start_element
        # clip so the mask center stays within [w/2, W - w/2] on each axis
        dx = clamp(dx, m.width / 2 - m.x, el.width - m.width / 2 - m.x)
        dy = clamp(dy, m.height / 2 - m.y, el.height - m.height / 2 - m.y)
        ex, ey = _rotate(dx, dy, el.rotation)
        self.mask = CropMask(m.x + dx, m.y + dy, m.width, m.height)
        self.element = replace(el, x=el.x - ex, y=el.y - ey)

    def apply(self) -> ImageElement:
        """Commit the mask and any element translation; ends the session."""
        self._ensure_open()
        self.pointer_up()
        self.closed = True
        m = self.mask
        rounded = CropMask(*(round_half_up(v) for v in (m.x, m.y, m.width, m.height)))
        # whole units may still poke out of a fractional-size element
        self.mask = fit_mask(rounded, self.element.width, self.element.height, self.min_size)
        committed = replace(self.element, mask=self.mask)
        logger.info(f"Applied crop mask {self.mask} to element {committed.id!r}")
        return committed

    def cancel(self) -> ImageElement:
        """Discard every change of this session; returns the original element."""
        self._ensure_open()
        self.pointer_up()
        self.closed = True
        self.element = replace(self._original)
        return self.element

    def reset(self) -> ImageElement:
        """Remove the mask altogether; the element returns to its pre-session position."""
        self._ensure_open()
        self.pointer_up()
        self.closed = True
        self.mask = None
        self.element = replace(self._original, mask=None)
        logger.info(f"Removed crop mask from element {self.element.id!r}")
        return self.element
