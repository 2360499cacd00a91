"""Placement of the bleed area on a merchant background photo.

Mapping records carry a center (percent of the background display space) and
a scale applied about the display center. The functions here keep those
records valid, project bleed rectangles into background pixels, and check
background image records coming from external callers.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Union
from urllib.parse import urlsplit

import requests

from design_surface.core import (
    API_BASE_URL, DISPLAY_SIZE, MIN_SCALE, MAX_SCALE,
    Rect, ZERO_RECT, ValidationResult, BleedArea, BackgroundMapping, ProductBackgroundImage,
    bleed_from_record, clamp, round_half_up, to_float, utc_now_iso,
)
from .bleed import calculate_bleed_bounds, edge_overflows

logger = logging.getLogger(__name__)

MappingLike = Union[BackgroundMapping, dict, None]


def default_mapping() -> BackgroundMapping:
    return BackgroundMapping()


def _raw_fields(mapping: MappingLike) -> dict:
    """Expose a mapping as its wire-named fields without any repair."""
    if isinstance(mapping, BackgroundMapping):
        return mapping.to_record()
    if isinstance(mapping, dict):
        return mapping
    return {}


def constrain_mapping(
    mapping: MappingLike,
    min_scale: float = MIN_SCALE,
    max_scale: float = MAX_SCALE,
) -> BackgroundMapping:
    """Return a valid mapping built from whatever the caller supplied.

    Missing or non-numeric fields fall back to the defaults (center 50/50,
    scale 1.0, enabled, version 1); centers are clamped into [0, 100] and
    scale into [min_scale, max_scale]. Never raises, and applying it twice
    gives the same record as applying it once.
    """
    if mapping is None:
        return default_mapping()
    raw = _raw_fields(mapping)
    version = to_float(raw.get("version"))
    if version is None or version < 1:
        version = 1
    applied_at = raw.get("appliedAt")
    if not isinstance(applied_at, str) or not applied_at:
        applied_at = utc_now_iso()
    return BackgroundMapping(
        enabled=raw.get("enabled") is not False,
        center_x=clamp(to_float(raw.get("centerX"), 50.0), 0.0, 100.0),
        center_y=clamp(to_float(raw.get("centerY"), 50.0), 0.0, 100.0),
        scale=clamp(to_float(raw.get("scale"), 1.0), min_scale, max_scale),
        applied_at=applied_at,
        version=int(version),
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and to_float(value) is not None


def validate_mapping(mapping: MappingLike) -> ValidationResult:
    """Type and range checks on a raw mapping, before any constraining."""
    result = ValidationResult()
    if mapping is None:
        return result
    raw = _raw_fields(mapping)
    for key in ("centerX", "centerY"):
        value = raw.get(key)
        if not _is_number(value):
            result.errors.append(f"{key} must be a number")
        elif not 0 <= value <= 100:
            result.errors.append(f"{key} must be between 0 and 100")
    scale = raw.get("scale")
    if not _is_number(scale):
        result.errors.append("scale must be a number")
    elif scale <= 0:
        result.errors.append("scale must be greater than 0")
    elif scale > MAX_SCALE:
        result.errors.append(f"scale must not exceed {MAX_SCALE:g}")
    return result


def map_to_background(
    bleed_area: Optional[BleedArea],
    print_area: Optional[Rect],
    mapping: MappingLike,
    display_size: float = DISPLAY_SIZE,
) -> Rect:
    """Project the bleed rectangle into background-image pixels.

    The bleed bounds are normalized by display_size, scaled about (0.5, 0.5),
    shifted by the mapping center offset and converted back to whole pixels.
    When the projection cannot be computed (no print area, no mapping, bad
    numbers) the zero rectangle is returned; treat it as "unmappable", not as
    a rectangle at the origin.
    """
    if display_size <= 0:
        raise ValueError(f"display_size must be positive, got {display_size!r}")
    try:
        if print_area is None:
            raise ValueError("print area is required to map the bleed area")
        raw = _raw_fields(mapping)
        if not raw:
            raise ValueError("mapping is required to map the bleed area")
        scale = float(raw["scale"])
        target_cx = float(raw["centerX"]) / 100
        target_cy = float(raw["centerY"]) / 100

        bounds = calculate_bleed_bounds(print_area, bleed_area)
        norm_x = bounds.x / display_size
        norm_y = bounds.y / display_size
        norm_w = bounds.width / display_size
        norm_h = bounds.height / display_size

        scaled_x = (norm_x - 0.5) * scale + 0.5
        scaled_y = (norm_y - 0.5) * scale + 0.5
        scaled_w = norm_w * scale
        scaled_h = norm_h * scale

        final_x = scaled_x + (target_cx - 0.5)
        final_y = scaled_y + (target_cy - 0.5)
        return Rect(
            x=round_half_up(final_x * display_size),
            y=round_half_up(final_y * display_size),
            width=round_half_up(scaled_w * display_size),
            height=round_half_up(scaled_h * display_size),
        )
    except (KeyError, TypeError, ValueError, OverflowError):
        logger.exception("Failed to map bleed area onto background")
        return ZERO_RECT


def check_mapped_bounds(mapped: Rect, display_size: float = DISPLAY_SIZE) -> ValidationResult:
    result = ValidationResult()
    if mapped.is_zero():
        result.errors.append("bleed area could not be mapped onto the background")
        return result
    for side, overflow in edge_overflows(mapped, display_size):
        result.errors.append(f"bleed area {side} side exceeds background by {overflow:g} px")
    return result


def validate_mapping_bounds(mapping: MappingLike, product: Optional[dict], display_size: float = DISPLAY_SIZE) -> ValidationResult:
    """Check that a mapping keeps the bleed area inside the background photo.

    product is a persisted product record carrying ``printArea`` and an
    optional ``bleedArea``. Each overflowing edge is reported with its size
    in pixels.
    """
    if mapping is None:
        return ValidationResult()
    product = product or {}
    print_area = Rect.from_record(product.get("printArea"))
    bleed_area = bleed_from_record(product.get("bleedArea"))
    mapped = map_to_background(bleed_area, print_area, mapping, display_size)
    return check_mapped_bounds(mapped, display_size)


# ---- Background image records ----

def validate_background_image_url(url: Any) -> ValidationResult:
    """Accept only absolute http(s) URLs.

    Relative paths are rejected here; the internal merge path repairs them
    with normalize_image_url instead.
    """
    result = ValidationResult()
    if not url:
        result.errors.append("background image URL must not be empty")
        return result
    if not isinstance(url, str):
        result.errors.append("background image URL must be a string")
        return result
    if not url.startswith(("http://", "https://")):
        result.errors.append(f"background image URL must be absolute (http:// or https://): {url}")
        return result
    try:
        requests.PreparedRequest().prepare_url(url, None)
    except requests.exceptions.RequestException:
        result.errors.append(f"background image URL is malformed: {url}")
        return result
    netloc = urlsplit(url).netloc
    if not netloc or any(c.isspace() for c in netloc):
        result.errors.append(f"background image URL is malformed: {url}")
    return result


def _parse_iso(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None


def validate_background_image(record: Union[ProductBackgroundImage, dict, None]) -> ValidationResult:
    result = ValidationResult()
    if record is None:
        return result
    if isinstance(record, ProductBackgroundImage):
        record = record.to_record()
    result.extend(validate_background_image_url(record.get("url")))
    info = record.get("fileInfo")
    if isinstance(info, dict):
        if not info.get("filename"):
            result.errors.append("background image filename must not be empty")
        size = info.get("size")
        if size is not None and (not _is_number(size) or size <= 0):
            result.errors.append("background image size must be greater than 0")
    uploaded_at = record.get("uploadedAt")
    if uploaded_at and _parse_iso(uploaded_at) is None:
        result.errors.append(f"uploadedAt is not a valid ISO 8601 timestamp: {uploaded_at}")
    return result


@dataclass
class BackgroundConfigReport:
    background_image_errors: List[str] = field(default_factory=list)
    mapping_errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.background_image_errors and not self.mapping_errors

    def to_record(self) -> dict:
        return {
            "valid": self.valid,
            "backgroundImageErrors": list(self.background_image_errors),
            "mappingErrors": list(self.mapping_errors),
        }


def validate_background_config(product: Optional[dict], display_size: float = DISPLAY_SIZE) -> BackgroundConfigReport:
    """Validate the background image and its mapping on a product record."""
    report = BackgroundConfigReport()
    if not product:
        return report
    image = product.get("productBackgroundImage")
    if image:
        report.background_image_errors.extend(validate_background_image(image).errors)
    mapping = product.get("bleedAreaMapping")
    if mapping:
        report.mapping_errors.extend(validate_mapping(mapping).errors)
        report.mapping_errors.extend(validate_mapping_bounds(mapping, product, display_size).errors)
    return report


def normalize_image_url(url: Optional[str], base_url: str = API_BASE_URL) -> Optional[str]:
    """Turn a server-relative path into an absolute URL; other values pass through."""
    if not url:
        return None
    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("/"):
        return f"{base_url.rstrip('/')}{url}"
    return url


_MISSING = object()


def merge_background_config(current: Optional[dict], update: dict, base_url: str = API_BASE_URL) -> dict:
    """Apply a partial background update to a product record.

    ``None`` for a key removes it; a dict is merged over the existing value.
    Image URLs are repaired with normalize_image_url. Mappings are
    constrained, stamped with the current time, and get version = previous
    version + 1.
    """
    merged = copy.deepcopy(current) if current else {}
    current = current or {}

    image = update.get("productBackgroundImage", _MISSING)
    if image is None:
        merged.pop("productBackgroundImage", None)
    elif image is not _MISSING:
        new_image = {**(current.get("productBackgroundImage") or {}), **image}
        new_image["uploadedAt"] = image.get("uploadedAt") or utc_now_iso()
        if new_image.get("url"):
            new_image["url"] = normalize_image_url(new_image["url"], base_url)
        merged["productBackgroundImage"] = new_image

    mapping = update.get("bleedAreaMapping", _MISSING)
    if mapping is None:
        merged.pop("bleedAreaMapping", None)
    elif mapping is not _MISSING:
        previous = current.get("bleedAreaMapping") or {}
        combined = constrain_mapping({**previous, **mapping}).to_record()
        combined["appliedAt"] = utc_now_iso()
        prev_version = previous.get("version")
        combined["version"] = (int(prev_version) if _is_number(prev_version) and prev_version >= 1 else 0) + 1
        merged["bleedAreaMapping"] = combined
        logger.info(f"Background mapping updated to version {combined['version']}")
    return merged
