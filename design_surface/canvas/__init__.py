from .bleed import (
    bleed_margins, calculate_bleed_bounds, validate_bleed_area, validate_print_area,
    enable_bleed, set_bleed_mode, set_bleed_value,
)
from .background import (
    default_mapping, constrain_mapping, validate_mapping, map_to_background, validate_mapping_bounds,
    validate_background_image_url, validate_background_image, validate_background_config,
    normalize_image_url, merge_background_config, BackgroundConfigReport,
)
from .viewport import Viewport
from .crop import CropMaskController, HANDLES as CROP_HANDLES, fit_mask
from .images import read_image_size, cover_fit, fit_print_area_to_image
from .print_area import PrintAreaDragSession, move_print_area, resize_print_area
from .surface import DesignSurface, SurfaceFrame
