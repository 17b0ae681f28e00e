from pydantic import BaseModel, field_validator, model_validator
from typing import List, Optional, Union

# the editor keys fields by Date.now(), so ids arrive as numbers
FieldId = Union[str, int]

class Coordinates(BaseModel):
    x: float
    y: float
    width: float
    height: float

    @model_validator(mode="after")
    def check_in_page(self):
        tolerance = 1e-6
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")
        if self.x < -tolerance or self.y < -tolerance:
            raise ValueError("x and y must not be negative")
        if self.x + self.width > 100 + tolerance or self.y + self.height > 100 + tolerance:
            raise ValueError("field extends past the page edge")
        return self

class FieldPayload(BaseModel):
    id: Optional[FieldId] = None
    type: str
    coordinates: Coordinates
    value: Optional[str] = None
    imageData: Optional[str] = None
    checked: bool = False

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        return v.strip().lower()

class PageHint(BaseModel):
    width: float
    height: float

class SignPayload(BaseModel):
    fields: List[FieldPayload]
    pdfDimensions: Optional[PageHint] = None

class VerifyHash(BaseModel):
    hash: str

class SignatureMetadata(BaseModel):
    original_filename: Optional[str] = None
    fields_applied: int = 0

class VerifyResult(BaseModel):
    found: bool
    original_hash: Optional[str] = None
    signed_hash: Optional[str] = None
    timestamp: Optional[str] = None
    metadata: Optional[SignatureMetadata] = None
