from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Tuple

from design_surface.core import Rect, clamp
from .viewport import Viewport

if TYPE_CHECKING:
    from .surface import DesignSurface, SurfaceFrame

logger = logging.getLogger(__name__)

PRINT_AREA_HANDLES = ("move", "resize")


def move_print_area(rect: Rect, dx: float, dy: float, canvas_size: float, precision: Optional[int] = 1) -> Rect:
    """Translate rect by (dx, dy) while keeping it on the canvas."""
    max_x = max(0.0, canvas_size - rect.width)
    max_y = max(0.0, canvas_size - rect.height)
    x = clamp(rect.x + dx, 0.0, max_x)
    y = clamp(rect.y + dy, 0.0, max_y)
    if precision is not None:
        x, y = min(round(x, precision), max_x), min(round(y, precision), max_y)
    return Rect(x, y, rect.width, rect.height)


def resize_print_area(rect: Rect, dx: float, dy: float, canvas_size: float, min_size: float, precision: Optional[int] = 1) -> Rect:
    """Drag the bottom-right corner by (dx, dy).

    Width and height stay within [min_size, canvas_size - x|y]. When the rect
    sits too close to the far edge to honour both, the canvas edge wins so the
    rect never leaves the canvas.
    """
    max_w = max(0.0, canvas_size - rect.x)
    max_h = max(0.0, canvas_size - rect.y)
    w = clamp(rect.width + dx, min(min_size, max_w), max_w)
    h = clamp(rect.height + dy, min(min_size, max_h), max_h)
    if precision is not None:
        w, h = min(round(w, precision), max_w), min(round(h, precision), max_h)
    return Rect(rect.x, rect.y, w, h)


class PrintAreaDragSession:
    """Pointer-driven move/resize of a surface's print area.

    idle -> pointer_down(handle) -> dragging(handle) -> pointer_up -> idle.
    Pointer positions are screen pixels; deltas are measured from the
    pointer-down position and converted to logical units through the
    viewport, then applied to the rect captured at pointer-down. Every move
    returns a fresh frame so bleed and background outlines follow the drag.
    """

    def __init__(self, surface: DesignSurface, viewport: Optional[Viewport] = None, min_size: Optional[float] = None, precision: Optional[int] = 1) -> None:
        self.surface = surface
        self.viewport = viewport or Viewport(canvas_size=surface.config.canvas_size)
        self.min_size = float(surface.config.min_print_area_size if min_size is None else min_size)
        self.precision = precision
        self.handle: Optional[str] = None
        self._start_pointer: Tuple[float, float] = (0.0, 0.0)
        self._start_rect: Rect = surface.print_area

    @property
    def state(self) -> str:
        return "dragging" if self.handle else "idle"

    def pointer_down(self, handle: str, sx: float, sy: float) -> None:
        if handle not in PRINT_AREA_HANDLES:
            raise ValueError(f"unknown print area handle {handle!r}")
        self.handle = handle
        self._start_pointer = (float(sx), float(sy))
        self._start_rect = self.surface.print_area

    def pointer_move(self, sx: float, sy: float) -> SurfaceFrame:
        if not self.handle:
            return self.surface.frame()
        dx, dy = self.viewport.screen_delta_to_logical(sx - self._start_pointer[0], sy - self._start_pointer[1])
        size = self.surface.config.canvas_size
        if self.handle == "move":
            rect = move_print_area(self._start_rect, dx, dy, size, self.precision)
        else:
            rect = resize_print_area(self._start_rect, dx, dy, size, self.min_size, self.precision)
        self.surface.set_print_area(rect)
        return self.surface.frame()

    def pointer_up(self) -> SurfaceFrame:
        if self.handle:
            logger.debug(f"Print area {self.handle} finished at {self.surface.print_area}")
        self.handle = None
        return self.surface.frame()

    def cancel(self) -> SurfaceFrame:
        """Abort an in-progress drag and put the print area back."""
        if self.handle:
            self.surface.set_print_area(self._start_rect)
        self.handle = None
        return self.surface.frame()
