from dataclasses import dataclass

from .errors import ConfigurationError, ImageDecodeError


@dataclass(frozen=True)
class Fit:
    width: float
    height: float
    offset_x: float
    offset_y: float


def aspect_fit(box_width: float, box_height: float, content_width: float, content_height: float) -> Fit:
    """Scale content uniformly so it fits inside the box, centred on the slack axis."""
    if box_width <= 0 or box_height <= 0:
        raise ConfigurationError(f"target box must have a positive size, got {box_width}x{box_height}")
    if content_width <= 0 or content_height <= 0:
        raise ImageDecodeError(f"image has no usable size ({content_width}x{content_height})")

    box_ratio = box_width / box_height
    content_ratio = content_width / content_height

    if content_ratio > box_ratio:
        # relatively wider than the box: fill the width
        width = box_width
        height = box_width / content_ratio
        return Fit(width=width, height=height, offset_x=0.0, offset_y=(box_height - height) / 2)

    # taller, or an exact match: fill the height
    height = box_height
    width = box_height * content_ratio
    return Fit(width=width, height=height, offset_x=(box_width - width) / 2, offset_y=0.0)
