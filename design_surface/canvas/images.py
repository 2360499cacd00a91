from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Tuple

from design_surface.core import CANVAS_SIZE, CropMask, ImageElement, Rect, round_half_up

logger = logging.getLogger(__name__)


def read_image_size(path: str | Path) -> Optional[Tuple[int, int]]:
    """Return (width, height) of an image file, or None if it cannot be read.

    Pillow only parses the header here; pixel data is never decoded.
    """
    from PIL import Image, UnidentifiedImageError

    try:
        with Image.open(path) as im:
            return int(im.width), int(im.height)
    except (OSError, UnidentifiedImageError):
        logger.exception(f"Failed to read image size from {path}")
        return None


def cover_fit(element: ImageElement, image_width: float, image_height: float, url: Optional[str] = None) -> ImageElement:
    """Resize an image element so a new picture covers its current box.

    The element keeps its center; when the picture's aspect ratio differs from
    the box, the element grows along one axis and a centered mask the size of
    the old box hides the overflow. An element that already has a mask only
    takes the new url.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"invalid image size {image_width}x{image_height}")
    if element.mask is not None:
        return replace(element, url=url if url is not None else element.url)

    box_w, box_h = element.width, element.height
    image_ratio = image_width / image_height
    box_ratio = box_w / box_h
    if image_ratio == box_ratio:
        new_w, new_h = box_w, box_h
    elif image_ratio > box_ratio:
        # wider picture: match heights
        new_h = box_h
        new_w = box_h * image_ratio
    else:
        new_w = box_w
        new_h = box_w / image_ratio
    new_w, new_h = round_half_up(new_w), round_half_up(new_h)

    mask = None
    if image_ratio != box_ratio:
        mask = CropMask(new_w / 2, new_h / 2, min(box_w, new_w), min(box_h, new_h))
    return replace(
        element,
        url=url if url is not None else element.url,
        width=new_w,
        height=new_h,
        mask=mask,
    )


def fit_print_area_to_image(image_width: float, image_height: float, canvas_size: float = CANVAS_SIZE) -> Rect:
    """Largest print area with the image's aspect ratio, centered on the canvas."""
    if canvas_size <= 0:
        raise ValueError(f"canvas_size must be positive, got {canvas_size!r}")
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"invalid image size {image_width}x{image_height}")
    ratio = image_width / image_height
    if ratio > 1:
        width = canvas_size
        height = width / ratio
    else:
        height = canvas_size
        width = height * ratio
    width = min(max(1, round_half_up(width)), canvas_size)
    height = min(max(1, round_half_up(height)), canvas_size)
    area = Rect(max(0.0, (canvas_size - width) / 2), max(0.0, (canvas_size - height) / 2), width, height)
    logger.debug(f"Print area fitted to {image_width}x{image_height} image: {area}")
    return area
