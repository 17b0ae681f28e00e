"""Signing pipeline: load -> validate -> transform -> render -> serialize -> digest.

Only the first page of the document receives fields. Documents with more pages
are passed through with the remaining pages untouched.
"""
import logging
from dataclasses import dataclass, field as dc_field
from datetime import date
from io import BytesIO
from typing import List, Optional, Sequence

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from .errors import ConfigurationError, SerializationError, Stage, StructuralError
from .fields import Field
from .geometry import PageDimensions, percent_to_points
from .stamping import FieldWarning, Today, merge_overlay, render_overlay
from .utils import sha256_bytes

logger = logging.getLogger(__name__)

TARGET_PAGE = 0


@dataclass
class SigningResult:
    output: bytes
    original_digest: str
    output_digest: str
    page: PageDimensions
    warnings: List[FieldWarning] = dc_field(default_factory=list)

    @property
    def skipped_ids(self) -> List[str]:
        return [w.field_id for w in self.warnings if w.skipped]


def compute_digest(data: bytes) -> str:
    return sha256_bytes(data)


def _load(source: bytes) -> PdfReader:
    try:
        reader = PdfReader(BytesIO(source))
        num_pages = len(reader.pages)
    except (PyPdfError, ValueError, KeyError, TypeError) as exc:
        raise StructuralError(f"cannot read source PDF: {exc}", stage=Stage.LOAD.value) from exc
    if num_pages == 0:
        raise StructuralError("source PDF has no pages", stage=Stage.LOAD.value)
    return reader


def page_dimensions(reader: PdfReader) -> PageDimensions:
    box = reader.pages[TARGET_PAGE].mediabox
    try:
        return PageDimensions(
            width=float(box.width),
            height=float(box.height),
            left=float(box.left),
            bottom=float(box.bottom),
        )
    except ConfigurationError as exc:
        exc.stage = Stage.VALIDATE.value
        raise


def sign_document(
    source: bytes,
    fields: Sequence[Field],
    page_hint: Optional[PageDimensions] = None,
    today: Today = date.today,
) -> SigningResult:
    """Stamp ``fields`` onto page 1 of ``source`` and fingerprint both versions.

    ``page_hint`` is whatever size the editor believed the page had. It is only
    compared against the real MediaBox for logging; placement always uses the
    document's own dimensions.
    """
    reader = _load(source)
    page = page_dimensions(reader)
    logger.info("page dimensions %.2fx%.2f pt, %d field(s)", page.width, page.height, len(fields))
    if page_hint is not None and (page_hint.width, page_hint.height) != (page.width, page.height):
        logger.warning(
            "editor page size %sx%s differs from document %sx%s; using document",
            page_hint.width, page_hint.height, page.width, page.height,
        )
    if len(reader.pages) > 1:
        logger.info("document has %d pages; fields go on page 1 only", len(reader.pages))

    for f in fields:
        if not f.placement.is_in_range():
            raise StructuralError(
                f"placement {f.placement} lies outside the page",
                stage=Stage.VALIDATE.value,
                field_id=f.id,
            )

    placed = []
    for f in fields:
        rect = percent_to_points(f.placement, page)
        logger.debug("field %s (%s): %s -> %s", f.id, f.kind, f.placement, rect)
        placed.append((f, rect))

    overlay_pdf, warnings = render_overlay(page, placed, today=today)

    writer = PdfWriter()
    try:
        for p in reader.pages:
            writer.add_page(p)
        merge_overlay(writer.pages[TARGET_PAGE], overlay_pdf, page)
        out = BytesIO()
        writer.write(out)
    except (PyPdfError, ValueError, KeyError, TypeError, OSError) as exc:
        raise SerializationError(f"cannot write signed PDF: {exc}", stage=Stage.SERIALIZE.value) from exc
    output = out.getvalue()

    original_digest = compute_digest(source)
    output_digest = compute_digest(output)
    logger.info("original sha256 %s, signed sha256 %s", original_digest, output_digest)
    return SigningResult(
        output=output,
        original_digest=original_digest,
        output_digest=output_digest,
        page=page,
        warnings=warnings,
    )
