import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, asdict

logger = logging.getLogger(__name__)

APP_TITLE = "Design Surface 1.0"

CANVAS_SIZE = 400  # logical units, square canvas
DISPLAY_SIZE = 400  # rendered background size in px
MAX_BLEED = 50
DEFAULT_BLEED = 3
MIN_MASK_SIZE = 20
MIN_PRINT_AREA_SIZE = 50
ZOOM_MIN = 0.25
ZOOM_MAX = 4.0
MIN_SCALE = 0.1
MAX_SCALE = 5.0

API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:3002")


@dataclass
class SurfaceConfig:
    """Geometry limits shared by every component of one editing session.

    Attributes:
        canvas_size: Side of the square logical canvas.
        display_size: Side of the rendered background image, in px.
        max_bleed: Largest allowed bleed margin on any side.
        default_bleed: Margin used when bleed is first enabled.
        min_mask_size: Smallest crop mask extent.
        min_print_area_size: Smallest print area extent while resizing.
        zoom_min: Lower viewport zoom bound.
        zoom_max: Upper viewport zoom bound.
        min_scale: Lower background mapping scale bound.
        max_scale: Upper background mapping scale bound.
        api_base_url: Prefix used to repair relative background image URLs.
    """
    canvas_size: float = CANVAS_SIZE
    display_size: float = DISPLAY_SIZE
    max_bleed: float = MAX_BLEED
    default_bleed: float = DEFAULT_BLEED
    min_mask_size: float = MIN_MASK_SIZE
    min_print_area_size: float = MIN_PRINT_AREA_SIZE
    zoom_min: float = ZOOM_MIN
    zoom_max: float = ZOOM_MAX
    min_scale: float = MIN_SCALE
    max_scale: float = MAX_SCALE
    api_base_url: str = API_BASE_URL

    def __post_init__(self):
        for name in ("canvas_size", "display_size"):
            if float(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        for name in ("max_bleed", "default_bleed", "min_mask_size", "min_print_area_size"):
            if float(getattr(self, name)) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)!r}")
        if not 0 < self.zoom_min <= self.zoom_max:
            raise ValueError(f"invalid zoom range [{self.zoom_min}, {self.zoom_max}]")
        if not 0 < self.min_scale <= self.max_scale:
            raise ValueError(f"invalid scale range [{self.min_scale}, {self.max_scale}]")


DEFAULT_CONFIG = SurfaceConfig()


def save_config(config: SurfaceConfig, path: str | Path) -> None:
    p = Path(path)
    with p.open("w", encoding="utf-8") as f:
        json.dump(asdict(config), f, ensure_ascii=False, indent=2)


def load_config(path: str | Path) -> SurfaceConfig:
    """Read a config file, falling back to defaults for unknown or missing keys.

    A missing or unreadable file yields the default configuration. Values that
    fail range checks still raise ValueError since they indicate a broken
    deployment rather than user input.
    """
    p = Path(path)
    if not p.exists():
        return SurfaceConfig()
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.exception(f"Failed to read config file {p}")
        return SurfaceConfig()
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {p}: expected an object")
        return SurfaceConfig()
    known = set(SurfaceConfig.__dataclass_fields__)
    return SurfaceConfig(**{k: v for k, v in data.items() if k in known})
