import logging
from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from minio.error import S3Error
from sqlmodel import Session

from .. import config
from ..audit import append_record, find_by_digest, record_to_dict
from ..db import get_session
from ..fields import parse_sign_payload
from ..pipeline import sign_document
from ..schemas import VerifyHash, VerifyResult
from ..storage import archive_pdfs, document_key, get_bytes

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/sign-pdf")
def sign_pdf(
    pdf: UploadFile = File(...),
    data: str = Form(...),
    session: Session = Depends(get_session),
):
    # one byte past the limit is enough to know it is too large
    source = pdf.file.read(config.MAX_UPLOAD_BYTES + 1)
    if not source:
        raise HTTPException(400, "empty upload")
    if len(source) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(413, "file too large")

    fields, page_hint = parse_sign_payload(data)
    result = sign_document(source, fields, page_hint=page_hint)

    # archive first so a storage failure never leaves a record without its PDF
    if config.ARCHIVE_SIGNED:
        archive_pdfs(source, result.original_digest, result.output, result.output_digest)
    append_record(session, result, pdf.filename, len(fields))

    headers = {
        "Content-Disposition": "attachment; filename=signed-document.pdf",
        "X-Original-Hash": result.original_digest,
        "X-Signed-Hash": result.output_digest,
    }
    if result.skipped_ids:
        headers["X-Skipped-Fields"] = ",".join(result.skipped_ids)
    logger.info("signed %s: %d field(s), %d skipped", pdf.filename, len(fields), len(result.skipped_ids))
    return Response(content=result.output, media_type="application/pdf", headers=headers)

@router.post("/verify-hash", response_model=VerifyResult, response_model_exclude_none=True)
def verify_hash(payload: VerifyHash, session: Session = Depends(get_session)):
    record = find_by_digest(session, payload.hash)
    if not record:
        return {"found": False}
    return record_to_dict(record)

@router.get("/signatures/{digest}/pdf")
def get_archived_pdf(digest: str, session: Session = Depends(get_session)):
    if not config.ARCHIVE_SIGNED:
        raise HTTPException(404, "archive disabled")
    digest = digest.strip().lower()
    if not find_by_digest(session, digest):
        raise HTTPException(404, "not found")
    try:
        pdf_bytes = get_bytes(document_key(digest))
    except S3Error:
        raise HTTPException(404, "not found")
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={digest}.pdf"},
    )
