"""Field model: where a field sits on the page and what it carries.

Placement is stored in percent of the page (see ``geometry``). Content is one of
a closed set of variants; ``stamping.render_field`` handles each of them and
rejects anything else.
"""
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from pydantic import ValidationError

from .errors import ConfigurationError, Stage, StructuralError
from .geometry import FieldPlacement, PageDimensions
from .schemas import FieldPayload, SignPayload
from .utils import b64_to_bytes, split_data_url

logger = logging.getLogger(__name__)


class ImageFormat(str, enum.Enum):
    PNG = "PNG"
    JPEG = "JPEG"


@dataclass(frozen=True)
class TextContent:
    value: str


@dataclass(frozen=True)
class SignatureContent:
    image: bytes
    format: ImageFormat


@dataclass(frozen=True)
class ImageContent:
    image: bytes
    format: ImageFormat


@dataclass(frozen=True)
class DateContent:
    # None means "today" at render time
    value: Optional[str] = None


@dataclass(frozen=True)
class MarkerContent:
    checked: bool


FieldContent = Union[TextContent, SignatureContent, ImageContent, DateContent, MarkerContent]


@dataclass(frozen=True)
class Field:
    placement: FieldPlacement
    content: FieldContent

    @property
    def id(self) -> str:
        return self.placement.id

    @property
    def kind(self) -> str:
        return type(self.content).__name__.replace("Content", "").lower()


def _image_from_data_url(data_url: Optional[str]) -> Tuple[bytes, ImageFormat]:
    if not data_url:
        return b"", ImageFormat.PNG
    mime, payload = split_data_url(data_url)
    fmt = ImageFormat.PNG if mime == "image/png" else ImageFormat.JPEG
    return b64_to_bytes(payload), fmt


def content_from_payload(item: FieldPayload, field_id: str) -> FieldContent:
    t = item.type
    if t == "text":
        return TextContent(value=item.value or "")
    if t in ("signature", "image"):
        data, fmt = _image_from_data_url(item.imageData)
        if t == "signature":
            return SignatureContent(image=data, format=fmt)
        return ImageContent(image=data, format=fmt)
    if t == "date":
        return DateContent(value=item.value or None)
    if t in ("radio", "marker", "checkbox"):
        return MarkerContent(checked=bool(item.checked))
    raise StructuralError(f"unknown field type {item.type!r}", stage=Stage.PARSE.value, field_id=field_id)


def field_from_payload(item: FieldPayload, index: int) -> Field:
    field_id = str(item.id) if item.id is not None else str(index)
    c = item.coordinates
    placement = FieldPlacement(id=field_id, x=c.x, y=c.y, width=c.width, height=c.height)
    return Field(placement=placement, content=content_from_payload(item, field_id))


def parse_sign_payload(raw: Union[str, bytes]) -> Tuple[List[Field], Optional[PageDimensions]]:
    """Parse the editor's JSON submission into fields plus the (advisory) page size hint."""
    try:
        payload = SignPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise StructuralError(f"invalid field list: {exc.errors()[0]['msg']}", stage=Stage.PARSE.value) from exc

    fields = [field_from_payload(item, i) for i, item in enumerate(payload.fields)]
    seen = set()
    for f in fields:
        if f.id in seen:
            raise StructuralError(f"duplicate field id {f.id!r}", stage=Stage.PARSE.value, field_id=f.id)
        seen.add(f.id)

    hint = None
    if payload.pdfDimensions is not None:
        try:
            hint = PageDimensions(width=payload.pdfDimensions.width, height=payload.pdfDimensions.height)
        except ConfigurationError:
            hint = None
        else:
            logger.debug("editor page hint %sx%s", hint.width, hint.height)
    return fields, hint
