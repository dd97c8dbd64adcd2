"""
Error definitions for the document generator.

에러 분류는 실패가 발생한 지점에서 결정한다:
- 메시지 문자열로 종류를 역추적하지 않음
- UI는 kind만 보고 제목/안내 문구 선택
"""

from enum import Enum
from typing import Any


class GenerationErrorKind(str, Enum):
    """
    생성 실패 종류.

    configuration: API 키 누락/placeholder, 인증/권한 실패
    network: 연결 실패, 타임아웃
    generic: 그 외 (잘못된 요청, 빈 응답, 재시도 후에도 남은 레이트리밋 등)
    """
    CONFIGURATION = "configuration"
    NETWORK = "network"
    GENERIC = "generic"


class GenerationError(Exception):
    """
    문서 생성 실패.

    Usage:
        raise GenerationError(
            GenerationErrorKind.CONFIGURATION,
            ErrorCodes.API_KEY_MISSING,
            "Anthropic API 키가 설정되지 않았습니다.",
        )
    """

    def __init__(
        self,
        kind: GenerationErrorKind,
        code: str,
        message: str,
        **context: Any,
    ) -> None:
        self.kind = kind
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            **self.context,
        }


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Upload ===
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    # === Request ===
    NO_TEMPLATE = "NO_TEMPLATE"
    NO_DESCRIPTION = "NO_DESCRIPTION"
    GENERATION_IN_PROGRESS = "GENERATION_IN_PROGRESS"
    NO_DOCUMENT = "NO_DOCUMENT"

    # === Configuration ===
    API_KEY_MISSING = "API_KEY_MISSING"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"

    # === Network ===
    API_CONNECTION_FAILED = "API_CONNECTION_FAILED"
    API_TIMEOUT = "API_TIMEOUT"

    # === Completion ===
    EMPTY_COMPLETION = "EMPTY_COMPLETION"
    COMPLETION_FAILED = "COMPLETION_FAILED"

    # === Extraction (parse mode) ===
    OCR_FAILED = "OCR_FAILED"
    DOCX_PARSE_FAILED = "DOCX_PARSE_FAILED"
