from datetime import date
from io import BytesIO
from unittest.mock import MagicMock

import pytest
from PIL import Image

from sigengine import config
from sigengine.errors import ImageDecodeError, RenderError
from sigengine.fields import (
    DateContent,
    Field,
    ImageContent,
    ImageFormat,
    MarkerContent,
    SignatureContent,
    TextContent,
)
from sigengine.geometry import FieldPlacement, PageDimensions, PointRect
from sigengine.stamping import (
    decode_image,
    font_size_for,
    format_date,
    render_field,
    render_overlay,
    unencodable_chars,
)

RECT = PointRect(61.2, 586.08, 153.0, 47.52)


def make_field(content, field_id="f1"):
    return Field(placement=FieldPlacement(field_id, 10, 20, 25, 6), content=content)


def test_font_size_caps_at_twelve_points():
    assert font_size_for(RECT) == 12
    assert font_size_for(PointRect(0, 0, 100, 10)) == pytest.approx(6)


def test_text_drawn_left_inset_at_mid_height():
    c = MagicMock()

    render_field(c, make_field(TextContent("Jane Roe")), RECT)

    c.setFont.assert_called_once_with("Helvetica", 12.0)
    (x, y, text), _ = c.drawString.call_args
    assert text == "Jane Roe"
    assert x == pytest.approx(66.2)
    assert y == pytest.approx(586.08 + 23.76)


def test_empty_text_draws_nothing():
    c = MagicMock()

    render_field(c, make_field(TextContent("")), RECT)

    c.drawString.assert_not_called()


def test_date_with_value_is_drawn_verbatim():
    c = MagicMock()

    render_field(c, make_field(DateContent("March 5, 2024")), RECT, today=lambda: date(1999, 1, 1))

    assert c.drawString.call_args[0][2] == "March 5, 2024"


def test_missing_date_uses_injected_clock(monkeypatch):
    monkeypatch.setattr(config, "DATE_FORMAT", "%Y-%m-%d")
    c = MagicMock()

    render_field(c, make_field(DateContent(None)), RECT, today=lambda: date(2024, 3, 5))

    assert c.drawString.call_args[0][2] == "2024-03-05"


def test_default_date_format_is_us_short_date(monkeypatch):
    monkeypatch.setattr(config, "DATE_FORMAT", None)

    assert format_date(lambda: date(2024, 3, 5)) == "3/5/2024"
    assert format_date(lambda: date(2024, 12, 25)) == "12/25/2024"


def test_text_outside_font_encoding_is_drawn_with_warning():
    c = MagicMock()

    notes = render_field(c, make_field(TextContent("Zo\u00eb \u65e5\u672c \u2713")), RECT)

    assert c.drawString.call_args[0][2] == "Zo\u00eb \u65e5\u672c \u2713"
    assert len(notes) == 1
    assert "\u65e5\u672c" in notes[0]
    assert "\u2713" not in notes[0]


def test_latin1_text_needs_no_warning():
    c = MagicMock()

    assert render_field(c, make_field(TextContent("Zo\u00eb")), RECT) == []
    assert unencodable_chars("Zo\u00eb \u20ac") == ""
    # dingbats come from the substitution fonts
    assert unencodable_chars("\u2713") == ""


def test_signature_is_aspect_fitted_and_centred(png_signature):
    c = MagicMock()

    render_field(c, make_field(SignatureContent(png_signature, ImageFormat.PNG)), RECT)

    args, kwargs = c.drawImage.call_args
    assert args[1] == pytest.approx(61.2 + 5.22)
    assert args[2] == pytest.approx(586.08)
    assert kwargs["width"] == pytest.approx(142.56)
    assert kwargs["height"] == pytest.approx(47.52)


def test_jpeg_image_field_is_drawn(image_factory):
    c = MagicMock()
    jpeg = image_factory(size=(100, 300), fmt="JPEG")

    render_field(c, make_field(ImageContent(jpeg, ImageFormat.JPEG)), RECT)

    _, kwargs = c.drawImage.call_args
    assert kwargs["height"] == pytest.approx(47.52)
    assert kwargs["width"] == pytest.approx(47.52 / 3)


def test_decode_rejects_corrupt_bytes():
    with pytest.raises(ImageDecodeError):
        decode_image(SignatureContent(b"definitely not an image", ImageFormat.PNG))


def test_decode_rejects_empty_bytes():
    with pytest.raises(ImageDecodeError):
        decode_image(SignatureContent(b"", ImageFormat.PNG))


def test_decode_rejects_truncated_png():
    buf = BytesIO()
    Image.effect_noise((300, 100), 80).save(buf, format="PNG")
    data = buf.getvalue()

    with pytest.raises(ImageDecodeError):
        decode_image(SignatureContent(data[: len(data) // 2], ImageFormat.PNG))


def test_decode_rejects_codec_mismatch(png_signature):
    with pytest.raises(ImageDecodeError):
        decode_image(ImageContent(png_signature, ImageFormat.JPEG))


def test_checked_marker_is_filled_circle():
    c = MagicMock()

    render_field(c, make_field(MarkerContent(True)), RECT)

    c.circle.assert_called_once()
    (cx, cy, radius), kwargs = c.circle.call_args
    assert cx == pytest.approx(61.2 + 76.5)
    assert cy == pytest.approx(586.08 + 23.76)
    assert radius == pytest.approx(47.52 / 3)
    assert kwargs == {"stroke": 0, "fill": 1}


def test_unchecked_marker_draws_nothing():
    c = MagicMock()

    render_field(c, make_field(MarkerContent(False)), RECT)

    c.circle.assert_not_called()


def test_unknown_content_is_fatal():
    c = MagicMock()

    with pytest.raises(RenderError) as exc:
        render_field(c, make_field(object(), field_id="odd"), RECT)

    assert exc.value.field_id == "odd"


def test_overlay_collects_warnings_for_bad_images():
    page = PageDimensions(612, 792)
    placed = [
        (make_field(SignatureContent(b"garbage", ImageFormat.PNG), "sig"), RECT),
        (make_field(TextContent("kept"), "txt"), RECT),
    ]

    overlay, warnings = render_overlay(page, placed)

    assert overlay.startswith(b"%PDF")
    assert [w.field_id for w in warnings] == ["sig"]


def test_overlay_keeps_unencodable_text_as_drawn_warning():
    page = PageDimensions(612, 792)
    placed = [(make_field(TextContent("\u65e5\u672c"), "jp"), RECT)]

    _, warnings = render_overlay(page, placed)

    assert [w.field_id for w in warnings] == ["jp"]
    assert warnings[0].skipped is False
