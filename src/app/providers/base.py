"""
AI Provider 추상 인터페이스.

- Provider 추상화로 completion 엔드포인트 교체 가능
- model_requested + model_used 기록
- 응답 content는 문자열 또는 typed content block 목록 → flatten_content()로 단일 문자열화
"""

import hashlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def compute_hash(content: str) -> str:
    """SHA-256 해시 계산 (로그용 프롬프트 식별자)."""
    return f"sha256:{hashlib.sha256(content.encode()).hexdigest()[:16]}"


def _block_text(block: Any) -> str:
    """content block 하나에서 텍스트 추출 (텍스트가 없으면 빈 문자열)."""
    if isinstance(block, str):
        return block
    if isinstance(block, Mapping):
        text = block.get("text")
    else:
        text = getattr(block, "text", None)
    return text if isinstance(text, str) else ""


def flatten_content(content: Any) -> str:
    """
    completion 응답 content를 단일 문자열로 평탄화.

    - str → 그대로
    - block 목록 → text를 가진 block의 text를 순서대로 이어붙임
      (tool_use 등 text 없는 block은 무시)
    - None/그 외 → 빈 문자열
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        return "".join(_block_text(block) for block in content)
    return ""


# =============================================================================
# Result Data Classes
# =============================================================================

@dataclass
class CompletionResult:
    """
    completion 호출 결과.

    text는 flatten_content() 적용 후의 문자열.
    """
    text: str
    model_requested: str | None = None
    model_used: str | None = None
    provider: str | None = None
    request_id: str | None = None
    prompt_hash: str | None = None
    model_params: dict[str, Any] = field(default_factory=dict)
    completed_at: str | None = None


@dataclass
class ConnectionCheckResult:
    """연결 테스트 결과."""
    success: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message}


@dataclass
class OCRResult:
    """
    OCR 결과.

    - model_requested: config에 설정된 모델
    - model_used: 실제 호출된 모델 (fallback 시 다를 수 있음)
    """
    success: bool
    text: str | None = None
    model_requested: str | None = None
    model_used: str | None = None
    fallback_triggered: bool = False
    processed_at: str | None = None
    error_message: str | None = None
    error_code: str | None = None


# =============================================================================
# Provider Exceptions
# =============================================================================

class OCRError(Exception):
    """OCR 관련 에러."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")


# =============================================================================
# Abstract Providers
# =============================================================================

class LLMProvider(ABC):
    """
    LLM Provider 추상 인터페이스.

    실패는 GenerationError(kind=...)로 변환해서 올린다.
    """

    model: str

    @abstractmethod
    async def complete(self, prompt: str, **kwargs: Any) -> CompletionResult:
        """
        단일 user 메시지 completion.

        Args:
            prompt: 프롬프트
            **kwargs: max_tokens, temperature 오버라이드

        Returns:
            CompletionResult

        Raises:
            GenerationError
        """
        ...

    @abstractmethod
    async def check_connection(self) -> ConnectionCheckResult:
        """짧은 테스트 요청으로 API 연결 확인 (예외 대신 결과 반환)."""
        ...


class OCRProvider(ABC):
    """
    OCR Provider 추상 인터페이스.

    역할: PDF → 텍스트 추출 (parse 모드 전용)
    """

    model: str

    @abstractmethod
    async def extract_text(
        self,
        file_bytes: bytes,
        file_type: str,
    ) -> OCRResult:
        """
        파일에서 텍스트 추출.

        Args:
            file_bytes: 파일 바이트
            file_type: MIME 타입 또는 확장자

        Returns:
            OCRResult

        Raises:
            OCRError
        """
        ...
