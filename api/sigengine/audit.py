from datetime import timezone
from typing import Optional
from sqlalchemy import or_
from sqlmodel import Session, select

from .models import SignatureRecord
from .pipeline import SigningResult


def append_record(session: Session, result: SigningResult, filename: Optional[str], field_count: int) -> SignatureRecord:
    record = SignatureRecord(
        original_hash=result.original_digest,
        signed_hash=result.output_digest,
        original_filename=filename,
        fields_applied=field_count,
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def find_by_digest(session: Session, digest: str) -> Optional[SignatureRecord]:
    digest = (digest or "").strip().lower()
    if not digest:
        return None
    return session.exec(
        select(SignatureRecord)
        .where(or_(SignatureRecord.original_hash == digest, SignatureRecord.signed_hash == digest))
        .order_by(SignatureRecord.id.desc())
    ).first()


def record_to_dict(record: SignatureRecord) -> dict:
    timestamp = record.timestamp
    # SQLite hands back naive datetimes; stored values are always UTC
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return {
        "found": True,
        "original_hash": record.original_hash,
        "signed_hash": record.signed_hash,
        "timestamp": timestamp.isoformat(),
        "metadata": {
            "original_filename": record.original_filename,
            "fields_applied": record.fields_applied,
        },
    }
