from __future__ import annotations

import logging
from typing import Optional, Tuple

from design_surface.core import CANVAS_SIZE, ZOOM_MIN, ZOOM_MAX, clamp, to_float

logger = logging.getLogger(__name__)


class Viewport:
    """Zoom and pan applied to the whole editing canvas.

    The view is scaled about the canvas center and then panned, so a logical
    point p appears on screen at ``(p - c) * zoom * display_scale + c' + pan``
    where c is the logical center and c' its on-screen position at zoom 1.
    display_scale is the number of screen pixels per logical unit at 100%
    zoom (1.0 when the canvas is drawn at its logical size).

    Every drag handler converts pointer deltas through screen_delta_to_logical
    so that geometry stays correct at any zoom level.
    """

    def __init__(
        self,
        zoom: float = 1.0,
        pan: Tuple[float, float] = (0.0, 0.0),
        zoom_min: float = ZOOM_MIN,
        zoom_max: float = ZOOM_MAX,
        display_scale: float = 1.0,
        canvas_size: float = CANVAS_SIZE,
    ) -> None:
        if not 0 < zoom_min <= zoom_max:
            raise ValueError(f"invalid zoom range [{zoom_min}, {zoom_max}]")
        if display_scale <= 0:
            raise ValueError(f"display_scale must be positive, got {display_scale!r}")
        if canvas_size <= 0:
            raise ValueError(f"canvas_size must be positive, got {canvas_size!r}")
        self.zoom_min = float(zoom_min)
        self.zoom_max = float(zoom_max)
        self.display_scale = float(display_scale)
        self.canvas_size = float(canvas_size)
        self._zoom = clamp(float(zoom), self.zoom_min, self.zoom_max)
        self.pan_x = float(pan[0])
        self.pan_y = float(pan[1])

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def pan(self) -> Tuple[float, float]:
        return self.pan_x, self.pan_y

    def set_zoom(self, zoom: float) -> float:
        self._zoom = clamp(float(zoom), self.zoom_min, self.zoom_max)
        return self._zoom

    def zoom_step(self, direction: int) -> bool:
        # direction: +1 zoom in, -1 zoom out, 0 leaves zoom alone
        if not direction:
            return False
        old_zoom = self._zoom
        if direction > 0:
            self._zoom = min(self.zoom_max, self._zoom * 2)
        else:
            self._zoom = max(self.zoom_min, self._zoom / 2)
        changed = abs(self._zoom - old_zoom) >= 1e-6
        if changed:
            logger.debug(f"Zoom {old_zoom:g} -> {self._zoom:g}")
        return changed

    def pan_by(self, dx_screen: float, dy_screen: float) -> None:
        # pan is kept in screen pixels; no zoom correction applies
        self.pan_x += dx_screen
        self.pan_y += dy_screen

    def reset(self) -> None:
        self._zoom = clamp(1.0, self.zoom_min, self.zoom_max)
        self.pan_x = 0.0
        self.pan_y = 0.0

    @property
    def pixels_per_unit(self) -> float:
        return self._zoom * self.display_scale

    def screen_delta_to_logical(self, dx_screen: float, dy_screen: float) -> Tuple[float, float]:
        k = self.pixels_per_unit
        return dx_screen / k, dy_screen / k

    def logical_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        c = self.canvas_size / 2
        cs = c * self.display_scale
        return (
            (x - c) * self.pixels_per_unit + cs + self.pan_x,
            (y - c) * self.pixels_per_unit + cs + self.pan_y,
        )

    def screen_to_logical(self, sx: float, sy: float) -> Tuple[float, float]:
        c = self.canvas_size / 2
        cs = c * self.display_scale
        k = self.pixels_per_unit
        return (
            (sx - self.pan_x - cs) / k + c,
            (sy - self.pan_y - cs) / k + c,
        )

    # ---- Persistence of the product's default viewport ----

    def to_record(self) -> dict:
        return {"zoom": self._zoom, "pan": {"x": self.pan_x, "y": self.pan_y}}

    @classmethod
    def from_record(cls, data: Optional[dict], **kwargs) -> Viewport:
        if not isinstance(data, dict):
            return cls(**kwargs)
        pan = data.get("pan") if isinstance(data.get("pan"), dict) else {}
        return cls(
            zoom=to_float(data.get("zoom"), 1.0),
            pan=(to_float(pan.get("x"), 0.0), to_float(pan.get("y"), 0.0)),
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"Viewport(zoom={self._zoom:g}, pan=({self.pan_x:g}, {self.pan_y:g}))"
