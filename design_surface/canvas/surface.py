from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from design_surface.core import (
    DEFAULT_CONFIG, SurfaceConfig, Rect, ValidationResult,
    BleedArea, BackgroundMapping, ProductBackgroundImage,
    bleed_from_record, bleed_to_record, utc_now_iso,
)
from . import bleed as bleed_ops
from .background import constrain_mapping, map_to_background, check_mapped_bounds, validate_background_image
from .print_area import PrintAreaDragSession
from .viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurfaceFrame:
    """Outlines to draw for the current state of a surface."""

    print_area: Rect
    bleed_bounds: Rect
    mapped_bounds: Optional[Rect] = None

    def to_record(self) -> dict:
        return {
            "printArea": self.print_area.to_record(),
            "bleedBounds": self.bleed_bounds.to_record(),
            "mappedBounds": self.mapped_bounds.to_record() if self.mapped_bounds else None,
        }


class DesignSurface:
    """Print area, bleed and background mapping of one product being edited.

    The surface owns the geometry for a single editing session. Derived
    rectangles are recomputed on demand by frame(), so they never lag the
    print area. Nothing is persisted here; save_payload() produces the
    record for the persistence collaborator.
    """

    def __init__(
        self,
        print_area: Rect,
        bleed_area: Optional[BleedArea] = None,
        mapping: Optional[BackgroundMapping] = None,
        background_image: Optional[ProductBackgroundImage] = None,
        config: SurfaceConfig = DEFAULT_CONFIG,
    ) -> None:
        self.config = config
        self.print_area = print_area
        self.bleed_area = bleed_area
        self.mapping = self._constrain(mapping) if mapping is not None else None
        self.background_image = background_image

    def _constrain(self, mapping) -> BackgroundMapping:
        return constrain_mapping(mapping, self.config.min_scale, self.config.max_scale)

    # ---- Mutations ----

    def set_print_area(self, rect: Rect) -> None:
        self.print_area = rect

    def enable_bleed(self) -> BleedArea:
        if self.bleed_area is None:
            self.bleed_area = bleed_ops.enable_bleed(self.config.default_bleed)
        return self.bleed_area

    def disable_bleed(self) -> None:
        self.bleed_area = None

    def set_bleed_mode(self, mode: str) -> BleedArea:
        self.bleed_area = bleed_ops.set_bleed_mode(self.enable_bleed(), mode, self.config.default_bleed)
        return self.bleed_area

    def set_bleed_value(self, value: float, side: Optional[str] = None) -> BleedArea:
        self.bleed_area = bleed_ops.set_bleed_value(self.enable_bleed(), value, side)
        return self.bleed_area

    def set_mapping(self, mapping: Union[BackgroundMapping, dict, None]) -> BackgroundMapping:
        """Store mapping after constraining it; the raw input is never kept."""
        self.mapping = self._constrain(mapping)
        return self.mapping

    def clear_mapping(self) -> None:
        self.mapping = None

    def start_drag(self, handle: str, sx: float, sy: float, viewport: Optional[Viewport] = None) -> PrintAreaDragSession:
        session = PrintAreaDragSession(self, viewport)
        session.pointer_down(handle, sx, sy)
        return session

    # ---- Queries ----

    def bleed_bounds(self) -> Rect:
        return bleed_ops.calculate_bleed_bounds(self.print_area, self.bleed_area)

    def mapped_bounds(self) -> Optional[Rect]:
        if self.mapping is None or not self.mapping.enabled:
            return None
        return map_to_background(self.bleed_area, self.print_area, self.mapping, self.config.display_size)

    def frame(self) -> SurfaceFrame:
        return SurfaceFrame(self.print_area, self.bleed_bounds(), self.mapped_bounds())

    def validate(self) -> ValidationResult:
        cfg = self.config
        result = bleed_ops.validate_print_area(self.print_area, cfg.canvas_size)
        result.extend(bleed_ops.validate_bleed_area(self.bleed_area, self.print_area, cfg.canvas_size, cfg.max_bleed))
        mapped = self.mapped_bounds()
        if mapped is not None:
            result.extend(check_mapped_bounds(mapped, cfg.display_size))
        if self.background_image is not None:
            result.extend(validate_background_image(self.background_image))
        return result

    # ---- Wire records ----

    def to_record(self) -> dict:
        return {
            "printArea": self.print_area.to_record(),
            "bleedArea": bleed_to_record(self.bleed_area),
            "bleedAreaMapping": self.mapping.to_record() if self.mapping else None,
            "productBackgroundImage": self.background_image.to_record() if self.background_image else None,
        }

    @classmethod
    def from_record(cls, product: dict, config: SurfaceConfig = DEFAULT_CONFIG) -> DesignSurface:
        """Build a surface from a persisted product record.

        A missing or malformed printArea falls back to the full canvas.
        """
        print_area = Rect.from_record(product.get("printArea"))
        if print_area is None:
            logger.warning(f"Product {product.get('id', '?')} has no usable printArea, using the full canvas")
            print_area = Rect(0, 0, config.canvas_size, config.canvas_size)
        mapping = product.get("bleedAreaMapping")
        return cls(
            print_area=print_area,
            bleed_area=bleed_from_record(product.get("bleedArea")),
            mapping=mapping if mapping else None,
            background_image=ProductBackgroundImage.from_record(product.get("productBackgroundImage")),
            config=config,
        )

    def save_payload(self) -> Tuple[ValidationResult, Optional[dict]]:
        """Validate and build the partial product update to persist.

        Returns (result, payload); payload is None when validation fails.
        On success the mapping version is bumped so a stale copy can be told
        apart by the persistence layer.
        """
        result = self.validate()
        if not result.valid:
            logger.warning(f"Refusing to save invalid design surface: {result.errors}")
            return result, None
        if self.mapping is not None:
            self.mapping = replace(self.mapping, version=self.mapping.version + 1, applied_at=utc_now_iso())
        payload = {
            "printArea": self.print_area.to_record(),
            "bleedArea": bleed_to_record(self.bleed_area),
            "bleedAreaMapping": self.mapping.to_record() if self.mapping else None,
        }
        return result, payload
