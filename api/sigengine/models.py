from typing import Optional
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field as ORMField

class SignatureRecord(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    original_hash: str = ORMField(index=True)
    signed_hash: str = ORMField(index=True)
    timestamp: datetime = ORMField(default_factory=lambda: datetime.now(timezone.utc))
    original_filename: Optional[str] = None
    fields_applied: int = 0
