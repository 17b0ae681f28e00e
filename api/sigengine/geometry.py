"""Coordinate transforms between the editor surface and the PDF page.

Three spaces are involved:

* pixel space: the editor's on-screen surface, origin top-left, size depends on
  the viewport (``scale = display_width / page_width``);
* percent space: 0-100 of the page's width/height, origin top-left. This is the
  stored form of a field's placement;
* point space: PDF user units, origin bottom-left.

``pixel <-> percent`` is a pure scaling. Only ``percent <-> points`` flips the
vertical axis.
"""
import math
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class PageDimensions:
    width: float
    height: float
    # lower-left corner of the MediaBox; almost always (0, 0)
    left: float = 0.0
    bottom: float = 0.0

    def __post_init__(self):
        validate_page(self)


@dataclass(frozen=True)
class FieldPlacement:
    id: str
    x: float
    y: float
    width: float
    height: float

    def is_in_range(self, tolerance: float = 1e-6) -> bool:
        return (
            self.x >= -tolerance
            and self.y >= -tolerance
            and self.width > 0
            and self.height > 0
            and self.x + self.width <= 100 + tolerance
            and self.y + self.height <= 100 + tolerance
        )


@dataclass(frozen=True)
class PointRect:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self):
        return self.x + self.width / 2, self.y + self.height / 2


@dataclass(frozen=True)
class PixelRect:
    x: float
    y: float
    width: float
    height: float


def validate_page(page: PageDimensions) -> None:
    for name, value in (("width", page.width), ("height", page.height)):
        if not math.isfinite(value) or value <= 0:
            raise ConfigurationError(f"page {name} must be a positive number, got {value!r}")


def validate_scale(scale: float) -> None:
    if not math.isfinite(scale) or scale <= 0:
        raise ConfigurationError(f"display scale must be a positive number, got {scale!r}")


def percent_to_points(placement: FieldPlacement, page: PageDimensions) -> PointRect:
    validate_page(page)
    x_pts = (placement.x / 100) * page.width
    y_from_top = (placement.y / 100) * page.height
    w_pts = (placement.width / 100) * page.width
    h_pts = (placement.height / 100) * page.height
    # the box's own height has to come off too, or every box lands one height too high
    y_from_bottom = page.height - y_from_top - h_pts
    if placement.is_in_range():
        # tolerance-accepted input may overshoot an edge by float noise
        w_pts = min(w_pts, page.width)
        h_pts = min(h_pts, page.height)
        x_pts = min(max(x_pts, 0.0), page.width - w_pts)
        y_from_bottom = min(max(y_from_bottom, 0.0), page.height - h_pts)
    return PointRect(x=x_pts, y=y_from_bottom, width=w_pts, height=h_pts)


def points_to_percent(rect: PointRect, page: PageDimensions, field_id: Optional[str] = None) -> FieldPlacement:
    validate_page(page)
    y_from_top = page.height - rect.y - rect.height
    return FieldPlacement(
        id=field_id,
        x=rect.x / page.width * 100,
        y=y_from_top / page.height * 100,
        width=rect.width / page.width * 100,
        height=rect.height / page.height * 100,
    )


def display_scale(display_width: float, page_width: float) -> float:
    if not math.isfinite(page_width) or page_width <= 0:
        raise ConfigurationError(f"page width must be a positive number, got {page_width!r}")
    scale = display_width / page_width
    validate_scale(scale)
    return scale


def pixels_to_percent(
    rect: PixelRect,
    scale: float,
    page: PageDimensions,
    field_id: Optional[str] = None,
) -> FieldPlacement:
    validate_scale(scale)
    validate_page(page)
    return FieldPlacement(
        id=field_id,
        x=rect.x / scale / page.width * 100,
        y=rect.y / scale / page.height * 100,
        width=rect.width / scale / page.width * 100,
        height=rect.height / scale / page.height * 100,
    )


def percent_to_pixels(placement: FieldPlacement, scale: float, page: PageDimensions) -> PixelRect:
    validate_scale(scale)
    validate_page(page)
    return PixelRect(
        x=placement.x / 100 * page.width * scale,
        y=placement.y / 100 * page.height * scale,
        width=placement.width / 100 * page.width * scale,
        height=placement.height / 100 * page.height * scale,
    )
