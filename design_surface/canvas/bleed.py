from __future__ import annotations

import logging
from typing import Optional

from design_surface.core import (
    CANVAS_SIZE, DEFAULT_BLEED, MAX_BLEED, SIDES,
    Margins, Rect, ValidationResult, BleedArea, UniformBleed, SeparateBleed, round_half_up, to_float,
)

logger = logging.getLogger(__name__)

# float noise allowed at canvas edges
_EPS = 1e-9


def bleed_margins(bleed_area: Optional[BleedArea]) -> Margins:
    """Per-side margins of a bleed setting; all zero when bleed is disabled."""
    if bleed_area is None:
        return Margins()
    return bleed_area.margins()


def calculate_bleed_bounds(print_area: Rect, bleed_area: Optional[BleedArea]) -> Rect:
    """Grow the print area by the bleed margins.

    Without bleed the print area itself is returned. The result is not
    clamped to the canvas; run validate_bleed_area before acting on it.
    """
    if bleed_area is None:
        return print_area
    m = bleed_area.margins()
    return Rect(
        x=print_area.x - m.left,
        y=print_area.y - m.top,
        width=print_area.width + m.left + m.right,
        height=print_area.height + m.top + m.bottom,
    )


def _fmt(value: float) -> str:
    return f"{value:g}"


def edge_overflows(bounds: Rect, limit: float) -> list[tuple[str, float]]:
    """Return (side, overflow) pairs for every edge of bounds outside [0, limit]."""
    out = []
    if bounds.y < -_EPS:
        out.append(("top", -bounds.y))
    if bounds.right > limit + _EPS:
        out.append(("right", bounds.right - limit))
    if bounds.bottom > limit + _EPS:
        out.append(("bottom", bounds.bottom - limit))
    if bounds.x < -_EPS:
        out.append(("left", -bounds.x))
    return out


def validate_bleed_area(
    bleed_area: Optional[BleedArea],
    print_area: Rect,
    canvas_size: float = CANVAS_SIZE,
    max_bleed: float = MAX_BLEED,
) -> ValidationResult:
    """Check bleed margins and the resulting bleed rectangle against the canvas.

    Every canvas overflow is reported with its magnitude in logical units,
    e.g. ``"left side exceeds canvas boundary by 12.5 units"``.
    """
    if canvas_size <= 0:
        raise ValueError(f"canvas_size must be positive, got {canvas_size!r}")
    result = ValidationResult()
    if bleed_area is None:
        return result

    if isinstance(bleed_area, UniformBleed):
        values = [("value", bleed_area.value)]
    else:
        values = bleed_area.margins().items()
    for name, value in values:
        if value < 0:
            result.errors.append(f"{name} must not be negative")
        elif value > max_bleed:
            result.errors.append(f"{name} must not exceed {_fmt(max_bleed)}")

    bounds = calculate_bleed_bounds(print_area, bleed_area)
    for side, overflow in edge_overflows(bounds, canvas_size):
        result.errors.append(f"{side} side exceeds canvas boundary by {_fmt(overflow)} units")
    if result.errors:
        logger.debug(f"Bleed validation failed: {result.errors}")
    return result


def validate_print_area(print_area: Optional[Rect], canvas_size: float = CANVAS_SIZE) -> ValidationResult:
    if canvas_size <= 0:
        raise ValueError(f"canvas_size must be positive, got {canvas_size!r}")
    result = ValidationResult()
    if print_area is None:
        result.errors.append("print area is missing")
        return result
    if print_area.width <= 0:
        result.errors.append("width must be positive")
    if print_area.height <= 0:
        result.errors.append("height must be positive")
    for side, overflow in edge_overflows(print_area, canvas_size):
        result.errors.append(f"{side} side exceeds canvas boundary by {_fmt(overflow)} units")
    return result


# ---- Bleed lifecycle ----

def enable_bleed(default_value: float = DEFAULT_BLEED) -> UniformBleed:
    return UniformBleed(default_value)


def set_bleed_mode(bleed_area: BleedArea, mode: str, default_value: float = DEFAULT_BLEED) -> BleedArea:
    """Switch between uniform and separate margins.

    uniform -> separate copies the value to every side, using default_value
    when the uniform margin is 0. separate -> uniform takes the average of
    the four sides, rounded to a whole unit.
    """
    if mode == bleed_area.mode:
        return bleed_area
    if mode == "separate":
        value = to_float(bleed_area.value) or default_value
        return SeparateBleed(value, value, value, value)
    if mode == "uniform":
        total = sum(to_float(v, 0.0) for _, v in bleed_area.margins().items())
        return UniformBleed(round_half_up(total / 4))
    raise ValueError(f"unknown bleed mode {mode!r}")


def set_bleed_value(bleed_area: BleedArea, value: float, side: Optional[str] = None) -> BleedArea:
    """Return a copy of bleed_area with one margin (or the uniform value) changed."""
    if isinstance(bleed_area, UniformBleed):
        if side is not None:
            raise ValueError("uniform bleed has no per-side values")
        return UniformBleed(value)
    if side not in SIDES:
        raise ValueError(f"unknown side {side!r}")
    m = bleed_area.margins()
    values = {s: v for s, v in m.items()}
    values[side] = value
    return SeparateBleed(**values)
