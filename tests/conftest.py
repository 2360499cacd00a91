import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from design_surface.core import Rect, UniformBleed, BackgroundMapping, ImageElement, CropMask
from design_surface.canvas import DesignSurface, Viewport


@pytest.fixture
def print_area():
    return Rect(50, 50, 200, 150)


@pytest.fixture
def full_canvas():
    return Rect(0, 0, 400, 400)


@pytest.fixture
def surface(print_area):
    return DesignSurface(print_area, bleed_area=UniformBleed(3))


@pytest.fixture
def mapped_surface(print_area):
    mapping = BackgroundMapping(center_x=50, center_y=50, scale=1.0, applied_at="2026-01-01T00:00:00.000Z", version=1)
    return DesignSurface(print_area, bleed_area=UniformBleed(3), mapping=mapping)


@pytest.fixture
def viewport():
    return Viewport()


@pytest.fixture
def image_element():
    return ImageElement(id="img-1", x=200.0, y=200.0, width=100.0, height=100.0, url="http://example.com/a.png",
                        mask=CropMask(50, 50, 80, 80))


@pytest.fixture
def product_record():
    return {
        "id": "mug-1",
        "printArea": {"x": 50, "y": 50, "width": 200, "height": 150},
        "bleedArea": {"mode": "uniform", "value": 3},
        "productBackgroundImage": {
            "url": "https://cdn.example.com/bg/mug.jpg",
            "uploadedAt": "2026-01-01T10:00:00.000Z",
            "fileInfo": {"filename": "mug.jpg", "originalName": "Mug Photo.jpg", "size": 204800, "sizeMB": "0.20"},
        },
        "bleedAreaMapping": {
            "enabled": True, "centerX": 50, "centerY": 50, "scale": 1.0,
            "appliedAt": "2026-01-01T10:05:00.000Z", "version": 3,
        },
    }
