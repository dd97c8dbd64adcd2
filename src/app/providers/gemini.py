"""
Google Gemini OCR Provider (PDF 템플릿 텍스트 추출용).

extraction.binary_mode=parse 일 때만 사용.

Fallback 예외 정책:
- FALLBACK_ERRORS: NotFound, ServiceUnavailable, ResourceExhausted → fallback 모델
- REJECT_IMMEDIATELY: InvalidArgument, PermissionDenied, Unauthenticated → 즉시 실패
"""

import asyncio
import logging
import os
from datetime import UTC, datetime
from typing import Any

import google.generativeai as genai
from google.api_core.exceptions import (
    InvalidArgument,
    NotFound,
    PermissionDenied,
    ResourceExhausted,
    ServiceUnavailable,
    Unauthenticated,
)

from src.domain.constants import MIME_TYPES
from src.domain.errors import ErrorCodes

from .base import OCRError, OCRProvider, OCRResult

logger = logging.getLogger(__name__)

FALLBACK_ERRORS: tuple[type[Exception], ...] = (
    NotFound,            # 모델명 오류/미지원
    ServiceUnavailable,  # 5xx
    ResourceExhausted,   # 429 쿼터/레이트리밋
)

REJECT_IMMEDIATELY: tuple[type[Exception], ...] = (
    InvalidArgument,   # 입력 오류
    PermissionDenied,  # 권한 오류
    Unauthenticated,   # API 키 오류
)

OCR_PROMPT = (
    "Extract all text from this document. "
    "Keep headings, lists and table structure as Markdown. "
    "Return only the extracted text without any explanation."
)


class GeminiOCRProvider(OCRProvider):
    """
    Gemini OCR Provider.

    Usage:
        provider = GeminiOCRProvider(model="gemini-2.5-pro", fallback="gemini-2.5-flash")
        result = await provider.extract_text(pdf_bytes, ".pdf")
    """

    def __init__(
        self,
        model: str = "gemini-2.5-pro",
        fallback: str | None = "gemini-2.5-flash",
        api_key: str | None = None,
    ):
        """
        Args:
            model: 기본 모델 ID (config에서 주입)
            fallback: Fallback 모델 (None이면 재시도 없이 실패)
            api_key: API 키 (환경변수 GOOGLE_API_KEY 사용 가능)
        """
        self.model = model
        self.fallback = fallback
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        self._client: Any = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> Any:
        """genai 모듈 설정 (lazy)."""
        if self._client is None:
            if not self.api_key:
                raise OCRError(
                    "GOOGLE_API_KEY_MISSING",
                    "GOOGLE_API_KEY 환경변수가 설정되지 않았습니다.",
                )
            genai.configure(api_key=self.api_key)
            self._client = genai
        return self._client

    async def extract_text(
        self,
        file_bytes: bytes,
        file_type: str,
    ) -> OCRResult:
        """
        PDF에서 텍스트 추출.

        FALLBACK_ERRORS → fallback 모델로 1회 재시도
        REJECT_IMMEDIATELY → 즉시 OCRError
        """
        model_requested = self.model

        try:
            result = await self._call_api(self.model, file_bytes, file_type)
            result.model_requested = model_requested
            result.model_used = self.model
            return result

        except FALLBACK_ERRORS as e:
            if self.fallback is None:
                raise OCRError(
                    "NO_FALLBACK",
                    f"OCR 모델 호출에 실패했습니다: {e}",
                    model=self.model,
                ) from e

            logger.warning(
                f"Primary model ({self.model}) failed with fallback error: {e}. "
                f"Trying fallback model: {self.fallback}"
            )
            try:
                result = await self._call_api(self.fallback, file_bytes, file_type)
            except Exception as fallback_error:
                logger.error(f"Fallback model also failed: {fallback_error}")
                raise OCRError(
                    "FALLBACK_FAILED",
                    "기본 모델과 대체 모델 모두 실패했습니다.",
                    primary_model=self.model,
                    fallback_model=self.fallback,
                ) from fallback_error

            result.model_requested = model_requested
            result.model_used = self.fallback
            result.fallback_triggered = True
            return result

        except REJECT_IMMEDIATELY as e:
            logger.error(f"Authentication or input error: {e}", exc_info=True)
            raise OCRError(
                "AUTH_OR_INPUT_ERROR",
                "Google API 인증 또는 입력 형식 오류입니다. GOOGLE_API_KEY와 파일을 확인해주세요.",
                model=self.model,
            ) from e

        except OCRError:
            raise

        except Exception as e:
            logger.error(f"OCR failed with unexpected error: {e}", exc_info=True)
            raise OCRError(
                ErrorCodes.OCR_FAILED,
                f"OCR 처리 중 오류가 발생했습니다: {e}",
                model=self.model,
            ) from e

    async def _call_api(
        self,
        model: str,
        file_bytes: bytes,
        file_type: str,
    ) -> OCRResult:
        """실제 Gemini API 호출 (SDK는 동기 → 스레드에서 실행)."""
        client = self._get_client()
        model_instance = client.GenerativeModel(model)
        document_part = {
            "mime_type": self._normalize_mime_type(file_type),
            "data": file_bytes,
        }

        response = await asyncio.to_thread(
            model_instance.generate_content, [OCR_PROMPT, document_part]
        )
        text = response.text or ""

        return OCRResult(
            success=bool(text.strip()),
            text=text,
            processed_at=datetime.now(UTC).isoformat(),
            error_message=None if text.strip() else "OCR 결과가 비어 있습니다.",
        )

    def _normalize_mime_type(self, file_type: str) -> str:
        """확장자/MIME 타입 정규화."""
        file_type_lower = file_type.lower()
        if "/" in file_type_lower:
            return file_type_lower
        if not file_type_lower.startswith("."):
            file_type_lower = "." + file_type_lower
        return MIME_TYPES.get(file_type_lower, "application/octet-stream")
