from __future__ import annotations

import logging
from datetime import datetime, timezone
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Union

from .geometry import Margins, SIDES, to_float

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class ValidationResult:
    """Outcome of a validation query. Errors are data, never raised."""

    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def extend(self, other: ValidationResult) -> ValidationResult:
        self.errors.extend(other.errors)
        return self

    def to_record(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors)}


# ---- Bleed area ----

@dataclass(frozen=True)
class UniformBleed:
    value: float = 0.0

    mode = "uniform"

    def margins(self) -> Margins:
        return Margins.uniform(self.value)

    def to_record(self) -> dict:
        return {"mode": self.mode, "value": self.value}


@dataclass(frozen=True)
class SeparateBleed:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    mode = "separate"

    def margins(self) -> Margins:
        return Margins(self.top, self.right, self.bottom, self.left)

    def to_record(self) -> dict:
        return {"mode": self.mode, "top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


BleedArea = Union[UniformBleed, SeparateBleed]


def bleed_from_record(data: Any) -> Optional[BleedArea]:
    """Parse a persisted bleedArea record.

    Missing or non-numeric values become 0. Negative or oversized values are
    kept as-is so the validator can report them. An unknown mode is treated
    as no bleed at all.
    """
    if not isinstance(data, dict):
        return None
    mode = data.get("mode")
    if mode == "uniform":
        return UniformBleed(to_float(data.get("value"), 0.0))
    if mode == "separate":
        return SeparateBleed(*(to_float(data.get(side), 0.0) for side in SIDES))
    logger.debug(f"Ignoring bleed record with unknown mode {mode!r}")
    return None


def bleed_to_record(bleed: Optional[BleedArea]) -> Optional[dict]:
    return bleed.to_record() if bleed is not None else None


# ---- Background image and mapping ----

@dataclass
class BackgroundMapping:
    """Placement of the bleed rectangle on the background photo.

    center_x / center_y are percentages of the background display space;
    scale is applied about the display center.
    """

    enabled: bool = True
    center_x: float = 50.0
    center_y: float = 50.0
    scale: float = 1.0
    applied_at: str = field(default_factory=utc_now_iso)
    version: int = 1

    def to_record(self) -> dict:
        return {
            "enabled": self.enabled,
            "centerX": self.center_x,
            "centerY": self.center_y,
            "scale": self.scale,
            "appliedAt": self.applied_at,
            "version": self.version,
        }


@dataclass
class FileInfo:
    filename: str = ""
    size: int = 0
    original_name: Optional[str] = None
    size_mb: Optional[str] = None

    def to_record(self) -> dict:
        rec = {"filename": self.filename, "size": self.size}
        if self.original_name is not None:
            rec["originalName"] = self.original_name
        if self.size_mb is not None:
            rec["sizeMB"] = self.size_mb
        return rec


@dataclass
class ProductBackgroundImage:
    url: str = ""
    uploaded_at: str = field(default_factory=utc_now_iso)
    file_info: Optional[FileInfo] = None

    def to_record(self) -> dict:
        rec = {"url": self.url, "uploadedAt": self.uploaded_at}
        if self.file_info is not None:
            rec["fileInfo"] = self.file_info.to_record()
        return rec

    @classmethod
    def from_record(cls, data: Any) -> Optional[ProductBackgroundImage]:
        if not isinstance(data, dict):
            return None
        info = data.get("fileInfo")
        file_info = None
        if isinstance(info, dict):
            file_info = FileInfo(
                filename=str(info.get("filename") or ""),
                size=int(to_float(info.get("size"), 0.0)),
                original_name=info.get("originalName"),
                size_mb=info.get("sizeMB"),
            )
        return cls(
            url=data.get("url") or "",
            uploaded_at=data.get("uploadedAt") or utc_now_iso(),
            file_info=file_info,
        )


# ---- Image elements and crop state ----

@dataclass(frozen=True)
class CropMask:
    """Crop window local to one image element; (x, y) is the mask center."""

    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2

    def fits(self, width: float, height: float, eps: float = 1e-9) -> bool:
        """Return True when the mask lies within a width x height element."""
        return (
            self.left >= -eps
            and self.top >= -eps
            and self.right <= width + eps
            and self.bottom <= height + eps
        )

    def to_record(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def full(cls, width: float, height: float) -> CropMask:
        return cls(width / 2, height / 2, width, height)


@dataclass(frozen=True)
class ImageContent:
    """Pan/zoom of the picture inside its element, used when no mask is set."""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def clamped(self, min_scale: float = 0.1, max_scale: float = 5.0) -> ImageContent:
        scale = to_float(self.scale, 1.0)
        return replace(
            self,
            scale=max(min_scale, min(scale, max_scale)),
            offset_x=to_float(self.offset_x, 0.0),
            offset_y=to_float(self.offset_y, 0.0),
        )

    def to_record(self) -> dict:
        return {"scale": self.scale, "offsetX": self.offset_x, "offsetY": self.offset_y}


@dataclass
class ImageElement:
    """Image-type design element. (x, y) is the element center in canvas units."""

    id: str
    x: float
    y: float
    width: float
    height: float
    url: str = ""
    rotation: float = 0.0
    mask: Optional[CropMask] = None
    image_content: ImageContent = field(default_factory=ImageContent)

    @property
    def has_mask(self) -> bool:
        return self.mask is not None

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "type": "image",
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "url": self.url,
            "rotation": self.rotation,
            "hasMask": self.has_mask,
            "mask": self.mask.to_record() if self.mask else None,
            "imageContent": self.image_content.to_record(),
        }

    @classmethod
    def from_record(cls, data: dict) -> ImageElement:
        mask_data = data.get("mask") or data.get("shapeClip")
        mask = None
        if isinstance(mask_data, dict) and data.get("hasMask", True):
            vals = [to_float(mask_data.get(k)) for k in ("x", "y", "width", "height")]
            if all(v is not None for v in vals):
                mask = CropMask(*vals)
        content = data.get("imageContent") or {}
        return cls(
            id=str(data.get("id", "")),
            x=to_float(data.get("x"), 0.0),
            y=to_float(data.get("y"), 0.0),
            width=to_float(data.get("width"), 0.0),
            height=to_float(data.get("height"), 0.0),
            url=str(data.get("url") or ""),
            rotation=to_float(data.get("rotation"), 0.0),
            mask=mask,
            image_content=ImageContent(
                scale=to_float(content.get("scale"), 1.0),
                offset_x=to_float(content.get("offsetX"), 0.0),
                offset_y=to_float(content.get("offsetY"), 0.0),
            ),
        )
