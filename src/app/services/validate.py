"""
Validation Service: 업로드 템플릿 검증.

규칙:
- 확장자: .txt .md .html .pdf .docx 만 허용 (대소문자 무시)
- 크기: 상한(기본 10MB) 초과 시 거절, 정확히 상한이면 허용
- 부수효과 없음: (valid, error) 쌍만 반환
"""

from dataclasses import dataclass
from typing import Any

from src.domain.constants import (
    ALLOWED_TEMPLATE_EXTENSIONS,
    MAX_TEMPLATE_SIZE_BYTES,
    get_extension,
)
from src.domain.errors import ErrorCodes

INVALID_TYPE_MESSAGE = (
    "Invalid file type. Please upload a .txt, .md, .html, .pdf, or .docx file."
)


def _too_large_message(max_size_bytes: int) -> str:
    size_mb = max_size_bytes / (1024 * 1024)
    size_label = f"{size_mb:g}MB"
    return f"File size too large. Please upload a file smaller than {size_label}."


@dataclass
class FileValidationResult:
    """파일 검증 결과."""
    valid: bool
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "error": self.error,
            "error_code": self.error_code,
        }


def validate_file(
    filename: str,
    size: int,
    max_size_bytes: int = MAX_TEMPLATE_SIZE_BYTES,
) -> FileValidationResult:
    """
    템플릿 파일 검증.

    확장자를 먼저 검사하고, 통과한 경우에만 크기를 검사한다.

    Args:
        filename: 업로드 파일명
        size: 파일 크기 (bytes)
        max_size_bytes: 크기 상한

    Returns:
        FileValidationResult
    """
    if get_extension(filename) not in ALLOWED_TEMPLATE_EXTENSIONS:
        return FileValidationResult(
            valid=False,
            error=INVALID_TYPE_MESSAGE,
            error_code=ErrorCodes.INVALID_FILE_TYPE,
        )

    if size > max_size_bytes:
        return FileValidationResult(
            valid=False,
            error=_too_large_message(max_size_bytes),
            error_code=ErrorCodes.FILE_TOO_LARGE,
        )

    return FileValidationResult(valid=True)


class ValidationService:
    """
    config 기반 검증 서비스.

    upload.max_size_mb 설정을 반영한다.
    """

    def __init__(self, config: dict | None = None):
        upload_config = (config or {}).get("upload", {})
        max_size_mb = upload_config.get("max_size_mb")
        self.max_size_bytes = (
            int(max_size_mb * 1024 * 1024)
            if max_size_mb is not None
            else MAX_TEMPLATE_SIZE_BYTES
        )

    def validate(self, filename: str, size: int) -> FileValidationResult:
        return validate_file(filename, size, max_size_bytes=self.max_size_bytes)
