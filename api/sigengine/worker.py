import logging
from typing import Optional
from celery import Celery
from sqlmodel import Session

from . import db
from .audit import append_record
from .config import REDIS_URL, WORKER_QUEUE
from .fields import parse_sign_payload
from .pipeline import sign_document
from . import storage

logger = logging.getLogger(__name__)

cel = Celery("signing", broker=REDIS_URL, backend=REDIS_URL)

@cel.task(name="sign_document", queue=WORKER_QUEUE)
def sign_stored_document(source_key: str, payload_json: str, filename: Optional[str] = None):
    """Sign a PDF already sitting in object storage and archive the result next to it."""
    source = storage.get_bytes(source_key)
    fields, page_hint = parse_sign_payload(payload_json)
    result = sign_document(source, fields, page_hint=page_hint)
    key_pdf = storage.archive_pdfs(source, result.original_digest, result.output, result.output_digest)
    with Session(db.engine) as session:
        append_record(session, result, filename or source_key.rsplit("/", 1)[-1], len(fields))
    logger.info("worker signed %s -> %s", source_key, key_pdf)
    return {
        "pdf": key_pdf,
        "original_hash": result.original_digest,
        "signed_hash": result.output_digest,
        "skipped": result.skipped_ids,
    }
