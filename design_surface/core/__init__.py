from .state import (
    APP_TITLE, CANVAS_SIZE, DISPLAY_SIZE, MAX_BLEED, DEFAULT_BLEED, MIN_MASK_SIZE,
    MIN_PRINT_AREA_SIZE, ZOOM_MIN, ZOOM_MAX, MIN_SCALE, MAX_SCALE, API_BASE_URL,
    SurfaceConfig, DEFAULT_CONFIG, save_config, load_config,
)
from .geometry import Rect, Margins, ZERO_RECT, SIDES, clamp, round_half_up, to_float
from .objects import (
    ValidationResult, UniformBleed, SeparateBleed, BleedArea, bleed_from_record, bleed_to_record,
    BackgroundMapping, FileInfo, ProductBackgroundImage, CropMask, ImageContent, ImageElement,
    utc_now_iso,
)
