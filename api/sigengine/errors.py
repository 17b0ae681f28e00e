import enum
from typing import Optional


class Stage(str, enum.Enum):
    PARSE = "parse"
    LOAD = "load"
    VALIDATE = "validate"
    TRANSFORM = "transform"
    RENDER = "render"
    SERIALIZE = "serialize"
    DIGEST = "digest"


class SigningError(Exception):
    """Fatal failure while signing a document.

    Carries the pipeline stage and, when one is involved, the id of the field
    being processed so the caller can report it without re-running anything.
    """

    def __init__(self, message: str, stage: Optional[str] = None, field_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.field_id = field_id

    def to_dict(self) -> dict:
        return {"error": self.message, "stage": self.stage, "field_id": self.field_id}

    def __str__(self) -> str:
        context = ", ".join(
            f"{name}={value}" for name, value in (("stage", self.stage), ("field", self.field_id)) if value is not None
        )
        return f"{self.message} ({context})" if context else self.message


class ConfigurationError(SigningError):
    """Invalid page dimensions, scale factor or box size."""


class StructuralError(SigningError):
    """Malformed source document or field list."""


class RenderError(SigningError):
    """A field could not be dispatched to any renderer."""


class SerializationError(SigningError):
    """The stamped document could not be written back to bytes."""


class ImageDecodeError(SigningError):
    """Embedded image bytes could not be decoded. Recoverable: the field is skipped."""
