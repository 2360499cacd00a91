from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

SIDES = ("top", "right", "bottom", "left")


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value into [lo, hi]; lo wins when the range is empty."""
    return max(lo, min(value, hi))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (-2.5 -> -2, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def to_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Return value as a finite float, or default when it is not numeric.

    Booleans are rejected even though they are ints in Python, since a JSON
    ``true`` in a geometry field is malformed input.
    """
    if isinstance(value, bool) or value is None:
        return default
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(f) or math.isinf(f):
        return default
    return f


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle; (x, y) is the top-left corner."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def is_zero(self) -> bool:
        return self.x == 0 and self.y == 0 and self.width == 0 and self.height == 0

    def contains(self, other: Rect) -> bool:
        return (
            self.x <= other.x
            and self.y <= other.y
            and self.right >= other.right
            and self.bottom >= other.bottom
        )

    def to_record(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_record(cls, data: Any) -> Optional[Rect]:
        """Build a Rect from a JSON-shaped dict; None if any field is not numeric."""
        if not isinstance(data, dict):
            return None
        values = [to_float(data.get(k)) for k in ("x", "y", "width", "height")]
        if any(v is None for v in values):
            return None
        return cls(*values)


ZERO_RECT = Rect(0, 0, 0, 0)


@dataclass(frozen=True)
class Margins:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @classmethod
    def uniform(cls, value: float) -> Margins:
        return cls(value, value, value, value)

    def items(self):
        return [(side, getattr(self, side)) for side in SIDES]
