"""
test_validate.py - 템플릿 업로드 검증 테스트

규칙:
- 확장자 .txt .md .html .pdf .docx 만 허용 (대소문자 무시)
- 상한 초과만 거절 (정확히 상한이면 허용)
"""

import pytest

from src.app.services.validate import (
    INVALID_TYPE_MESSAGE,
    ValidationService,
    validate_file,
)
from src.domain.constants import MAX_TEMPLATE_SIZE_BYTES
from src.domain.errors import ErrorCodes

# =============================================================================
# 확장자 검사
# =============================================================================


class TestExtension:
    """확장자 허용 목록."""

    @pytest.mark.parametrize(
        "filename",
        ["notes.txt", "readme.md", "page.html", "report.pdf", "letter.docx"],
    )
    def test_allowed_extensions(self, filename):
        """허용 확장자는 통과."""
        result = validate_file(filename, 1024)

        assert result.valid is True
        assert result.error is None

    @pytest.mark.parametrize("filename", ["REPORT.PDF", "Notes.Md", "Letter.DOCX"])
    def test_case_insensitive(self, filename):
        """대문자 확장자도 허용."""
        assert validate_file(filename, 1024).valid is True

    @pytest.mark.parametrize(
        "filename",
        ["image.png", "sheet.xlsx", "script.exe", "archive.tar.gz", "old.doc"],
    )
    def test_rejected_extensions(self, filename):
        """허용 목록 밖 확장자는 거절."""
        result = validate_file(filename, 1024)

        assert result.valid is False
        assert result.error == INVALID_TYPE_MESSAGE
        assert result.error_code == ErrorCodes.INVALID_FILE_TYPE

    def test_no_extension_rejected(self):
        """확장자 없는 파일명은 거절."""
        result = validate_file("Makefile", 10)

        assert result.valid is False
        assert result.error_code == ErrorCodes.INVALID_FILE_TYPE

    def test_extension_checked_before_size(self):
        """잘못된 확장자 + 초과 크기 → 확장자 오류가 우선."""
        result = validate_file("big.png", MAX_TEMPLATE_SIZE_BYTES + 1)

        assert result.error_code == ErrorCodes.INVALID_FILE_TYPE


# =============================================================================
# 크기 검사
# =============================================================================


class TestSize:
    """크기 상한 (기본 10MB)."""

    def test_exactly_at_limit_accepted(self):
        """정확히 10MB는 허용."""
        assert validate_file("template.md", 10 * 1024 * 1024).valid is True

    def test_one_byte_over_limit_rejected(self):
        """10MB + 1 byte는 거절."""
        result = validate_file("template.md", 10 * 1024 * 1024 + 1)

        assert result.valid is False
        assert result.error_code == ErrorCodes.FILE_TOO_LARGE
        assert result.error == (
            "File size too large. Please upload a file smaller than 10MB."
        )

    def test_empty_file_accepted(self):
        """빈 파일도 확장자만 맞으면 허용."""
        assert validate_file("empty.txt", 0).valid is True

    def test_custom_limit(self):
        """상한 인자 지정."""
        result = validate_file("template.md", 2048, max_size_bytes=1024)

        assert result.valid is False
        assert result.error.startswith("File size too large.")
        assert result.error_code == ErrorCodes.FILE_TOO_LARGE


# =============================================================================
# ValidationService
# =============================================================================


class TestValidationService:
    """config 기반 서비스."""

    def test_default_limit(self):
        """설정이 없으면 10MB."""
        service = ValidationService({})

        assert service.max_size_bytes == MAX_TEMPLATE_SIZE_BYTES

    def test_config_limit(self):
        """upload.max_size_mb 적용."""
        service = ValidationService({"upload": {"max_size_mb": 1}})

        assert service.max_size_bytes == 1024 * 1024
        assert service.validate("a.md", 1024 * 1024).valid is True

        result = service.validate("a.md", 1024 * 1024 + 1)
        assert result.valid is False
        assert "smaller than 1MB" in result.error

    def test_to_dict(self):
        """JSON 직렬화."""
        result = validate_file("a.png", 1)

        assert result.to_dict() == {
            "valid": False,
            "error": INVALID_TYPE_MESSAGE,
            "error_code": ErrorCodes.INVALID_FILE_TYPE,
        }

    def test_zero_limit_respected(self):
        """max_size_mb: 0 → 기본값으로 되돌리지 않음."""
        service = ValidationService({"upload": {"max_size_mb": 0}})

        assert service.max_size_bytes == 0
        assert service.validate("a.md", 0).valid is True

        result = service.validate("a.md", 1)
        assert result.valid is False
        assert result.error_code == ErrorCodes.FILE_TOO_LARGE
