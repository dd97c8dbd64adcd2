"""Domain layer: constants, errors and schemas."""

from .errors import ErrorCodes, GenerationError, GenerationErrorKind
from .schemas import DocumentSession, GeneratedDocument, UploadedFile

__all__ = [
    "ErrorCodes",
    "GenerationError",
    "GenerationErrorKind",
    "DocumentSession",
    "GeneratedDocument",
    "UploadedFile",
]
