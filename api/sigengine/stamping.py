"""Field rendering.

Fields are painted onto a one-page reportlab overlay the size of the target
page, which is then merged onto the page with pypdf.
"""
import logging
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image
from pypdf import PdfReader, Transformation
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from . import config
from .errors import ImageDecodeError, RenderError, Stage
from .fields import (
    DateContent,
    Field,
    ImageContent,
    MarkerContent,
    SignatureContent,
    TextContent,
)
from .fitting import aspect_fit
from .geometry import PageDimensions, PointRect

logger = logging.getLogger(__name__)

FONT_NAME = "Helvetica"
MAX_FONT_SIZE = 12.0
FONT_HEIGHT_RATIO = 0.6
TEXT_INSET = 5.0
MARKER_RADIUS_RATIO = 1 / 3

Today = Callable[[], date]


@dataclass(frozen=True)
class FieldWarning:
    field_id: str
    message: str
    # False when the field was still drawn, only imperfectly
    skipped: bool = True


def font_size_for(rect: PointRect) -> float:
    return min(rect.height * FONT_HEIGHT_RATIO, MAX_FONT_SIZE)


def format_date(today: Today = date.today, fmt: Optional[str] = None) -> str:
    d = today()
    fmt = fmt or config.DATE_FORMAT
    if fmt:
        return d.strftime(fmt)
    # en-US short date, M/D/YYYY without zero padding
    return f"{d.month}/{d.day}/{d.year}"


def _encodes(ch: str, font) -> bool:
    try:
        ch.encode(font.encName)
    except UnicodeEncodeError:
        return False
    return True


def unencodable_chars(text: str) -> str:
    """Characters neither the text font nor its substitution fonts have a glyph for.

    reportlab draws these as the notdef box.
    """
    font = pdfmetrics.getFont(FONT_NAME)
    chain = [font] + list(font.substitutionFonts)
    missing = []
    for ch in text:
        if ch not in missing and not any(_encodes(ch, f) for f in chain):
            missing.append(ch)
    return "".join(missing)


def decode_image(content) -> Image.Image:
    if not content.image:
        raise ImageDecodeError("no image data")
    try:
        img = Image.open(BytesIO(content.image))
        # force a full decode so truncated data fails here, not inside reportlab
        img.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"cannot decode image: {exc}") from exc
    if img.format != content.format.value:
        raise ImageDecodeError(f"declared {content.format.value} but data is {img.format or 'unknown'}")
    return img


def _draw_text(c, text: str, rect: PointRect) -> List[str]:
    c.setFillColorRGB(0, 0, 0)
    c.setFont(FONT_NAME, font_size_for(rect))
    c.drawString(rect.x + TEXT_INSET, rect.y + rect.height / 2, text)
    missing = unencodable_chars(text)
    if missing:
        return [f"font cannot encode {missing!r}; drawn as blank boxes"]
    return []


def _draw_image(c, content, rect: PointRect):
    img = decode_image(content)
    img_w, img_h = img.size
    fit = aspect_fit(rect.width, rect.height, img_w, img_h)
    c.drawImage(
        ImageReader(img),
        rect.x + fit.offset_x,
        rect.y + fit.offset_y,
        width=fit.width,
        height=fit.height,
        mask="auto",
    )


def _draw_marker(c, rect: PointRect):
    cx, cy = rect.center
    c.setFillColorRGB(0, 0, 0)
    c.circle(cx, cy, min(rect.width, rect.height) * MARKER_RADIUS_RATIO, stroke=0, fill=1)


def render_field(c, field: Field, rect: PointRect, today: Today = date.today) -> List[str]:
    """Draw one field onto canvas ``c`` inside ``rect`` (points, bottom-left origin).

    Returns messages for problems that did not stop the field from being drawn.
    Raises ImageDecodeError for unusable signature/image data and RenderError for
    content of an unknown kind.
    """
    content = field.content
    if isinstance(content, TextContent):
        if content.value:
            return _draw_text(c, content.value, rect)
    elif isinstance(content, DateContent):
        return _draw_text(c, content.value or format_date(today), rect)
    elif isinstance(content, (SignatureContent, ImageContent)):
        _draw_image(c, content, rect)
    elif isinstance(content, MarkerContent):
        if content.checked:
            _draw_marker(c, rect)
    else:
        raise RenderError(
            f"no renderer for field content {type(content).__name__}",
            stage=Stage.RENDER.value,
            field_id=field.id,
        )
    return []


def render_overlay(
    page: PageDimensions,
    placed: Sequence[Tuple[Field, PointRect]],
    today: Today = date.today,
) -> Tuple[bytes, List[FieldWarning]]:
    buf = BytesIO()
    # invariant: no timestamps or random ids in the overlay, so output is repeatable
    c = canvas.Canvas(buf, pagesize=(page.width, page.height), invariant=1)
    warnings: List[FieldWarning] = []
    for field, rect in placed:
        try:
            notes = render_field(c, field, rect, today=today)
        except ImageDecodeError as exc:
            logger.warning("skipping %s field %s: %s", field.kind, field.id, exc.message)
            warnings.append(FieldWarning(field_id=field.id, message=exc.message))
        else:
            for note in notes:
                logger.warning("%s field %s: %s", field.kind, field.id, note)
                warnings.append(FieldWarning(field_id=field.id, message=note, skipped=False))
    c.showPage()
    c.save()
    return buf.getvalue(), warnings


def merge_overlay(target_page, overlay_pdf: bytes, page: PageDimensions):
    overlay_page = PdfReader(BytesIO(overlay_pdf)).pages[0]
    if page.left or page.bottom:
        target_page.merge_transformed_page(
            overlay_page, Transformation().translate(page.left, page.bottom)
        )
    else:
        target_page.merge_page(overlay_page)
