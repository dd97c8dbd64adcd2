"""
Anthropic (Claude) Provider.

- 단일 user 메시지 completion (model, max_tokens, temperature 고정값은 config에서 주입)
- API 키 누락/placeholder → 네트워크 호출 전에 GenerationError(configuration)
- SDK 예외 → GenerationErrorKind로 변환 (메시지 문자열 매칭 없음)
"""

import logging
import os
import time
from datetime import UTC, datetime
from typing import Any

import anthropic

from src.domain.constants import (
    API_KEY_ENV_VARS,
    API_KEY_PLACEHOLDERS,
    CONNECTION_TEST_MAX_TOKENS,
    CONNECTION_TEST_PROMPT,
    DEFAULT_LLM_MODEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
)
from src.domain.errors import ErrorCodes, GenerationError, GenerationErrorKind
from src.utils.retry import retry_with_exponential_backoff

from .base import (
    CompletionResult,
    ConnectionCheckResult,
    LLMProvider,
    compute_hash,
    flatten_content,
)

logger = logging.getLogger(__name__)

# 재시도 대상 (일시적 실패)
RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.InternalServerError,
)


def resolve_api_key(api_key: str | None = None) -> str | None:
    """
    API 키 결정: 인자 > MY_ANTHROPIC_KEY > ANTHROPIC_API_KEY.

    빈 값과 placeholder 값은 건너뛴다.

    Returns:
        사용할 키 (없으면 None)
    """
    candidates = [api_key, *(os.environ.get(name) for name in API_KEY_ENV_VARS)]
    for candidate in candidates:
        if not candidate:
            continue
        value = candidate.strip()
        if value and value not in API_KEY_PLACEHOLDERS:
            return value
    return None


def is_api_key_configured() -> bool:
    """생성 기능 활성화 여부 (환경변수 기준)."""
    return resolve_api_key() is not None


def classify_api_error(error: Exception) -> GenerationError:
    """
    Anthropic SDK 예외 → GenerationError.

    분류는 예외 타입으로만 결정한다.
    """
    if isinstance(error, GenerationError):
        return error

    if isinstance(error, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return GenerationError(
            GenerationErrorKind.CONFIGURATION,
            ErrorCodes.AUTHENTICATION_FAILED,
            "API 인증에 실패했습니다. MY_ANTHROPIC_KEY 환경변수를 확인해주세요.",
            status_code=getattr(error, "status_code", None),
        )

    # APITimeoutError는 APIConnectionError의 하위 클래스 → 먼저 검사
    if isinstance(error, anthropic.APITimeoutError):
        return GenerationError(
            GenerationErrorKind.NETWORK,
            ErrorCodes.API_TIMEOUT,
            "API 응답 시간이 초과되었습니다. 네트워크 상태를 확인하거나 잠시 후 다시 시도해주세요.",
        )

    if isinstance(error, anthropic.APIConnectionError):
        return GenerationError(
            GenerationErrorKind.NETWORK,
            ErrorCodes.API_CONNECTION_FAILED,
            "Anthropic API 서버에 연결할 수 없습니다. 인터넷 연결을 확인해주세요.",
        )

    if isinstance(error, anthropic.RateLimitError):
        return GenerationError(
            GenerationErrorKind.GENERIC,
            ErrorCodes.COMPLETION_FAILED,
            "API 사용량 한도를 초과했습니다. 잠시 후 다시 시도해주세요.",
            status_code=error.status_code,
        )

    if isinstance(error, anthropic.APIStatusError):
        return GenerationError(
            GenerationErrorKind.GENERIC,
            ErrorCodes.COMPLETION_FAILED,
            f"API 요청이 실패했습니다 (HTTP {error.status_code}).",
            status_code=error.status_code,
        )

    return GenerationError(
        GenerationErrorKind.GENERIC,
        ErrorCodes.COMPLETION_FAILED,
        f"문서 생성 중 오류가 발생했습니다: {error}",
    )


class ClaudeProvider(LLMProvider):
    """
    Claude API Provider.

    Usage:
        provider = ClaudeProvider(model="claude-opus-4-5-20251101")
        result = await provider.complete(prompt)
    """

    PROVIDER_NAME = "anthropic"

    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        api_key: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float | None = DEFAULT_TEMPERATURE,
        max_retries: int = 2,
        retry_initial_delay: float = 1.0,
    ):
        """
        Args:
            model: 모델 ID (config에서 주입)
            api_key: API 키 (없으면 MY_ANTHROPIC_KEY / ANTHROPIC_API_KEY)
            max_tokens: 최대 토큰 수
            temperature: 샘플링 온도 (None이면 API 기본값)
            max_retries: 일시적 실패 재시도 횟수
            retry_initial_delay: 첫 재시도 대기(초)

        Raises:
            GenerationError: API 키가 없을 때 (configuration, 네트워크 호출 전)
        """
        self.model = model
        self.api_key = resolve_api_key(api_key)

        # Fail-fast: 키가 없으면 요청을 만들지 않음
        if not self.api_key:
            raise GenerationError(
                GenerationErrorKind.CONFIGURATION,
                ErrorCodes.API_KEY_MISSING,
                "Anthropic API 키가 설정되지 않았습니다. "
                "MY_ANTHROPIC_KEY 또는 ANTHROPIC_API_KEY 환경변수를 설정하세요.",
            )

        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_retries = max_retries
        self.retry_initial_delay = retry_initial_delay
        self._client: Any = None

    def _get_client(self) -> Any:
        """Anthropic 클라이언트 (lazy init)."""
        if self._client is None:
            # 재시도는 retry_with_exponential_backoff가 담당
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0)
        return self._client

    def _collect_model_params(self, **overrides: Any) -> dict[str, Any]:
        """호출에 사용할 모델 파라미터."""
        params: dict[str, Any] = {
            "max_tokens": overrides.get("max_tokens") or self.max_tokens,
        }
        temperature = overrides.get("temperature", self.temperature)
        if temperature is not None:
            params["temperature"] = temperature
        return params

    async def _create_message(self, prompt: str, params: dict[str, Any]) -> Any:
        client = self._get_client()
        return await client.messages.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            **params,
        )

    async def complete(self, prompt: str, **kwargs: Any) -> CompletionResult:
        """
        단일 user 메시지 completion.

        자동 재시도:
        - RateLimitError, APIConnectionError, InternalServerError
        - max_retries회, 지수 백오프

        Raises:
            GenerationError: 분류된 실패 (빈 응답 포함)
        """
        params = self._collect_model_params(**kwargs)
        prompt_hash = compute_hash(prompt)
        started = time.monotonic()

        async def _api_call() -> Any:
            return await self._create_message(prompt, params)

        try:
            response = await retry_with_exponential_backoff(
                _api_call,
                max_retries=self.max_retries,
                initial_delay=self.retry_initial_delay,
                exceptions=RETRYABLE_ERRORS,
            )
        except Exception as e:
            error = classify_api_error(e)
            logger.error(
                f"Completion failed ({error.kind.value}/{error.code}) "
                f"model={self.model} prompt={prompt_hash}: {e}",
                exc_info=True,
            )
            raise error from e

        text = flatten_content(getattr(response, "content", None))
        if not text.strip():
            raise GenerationError(
                GenerationErrorKind.GENERIC,
                ErrorCodes.EMPTY_COMPLETION,
                "No content was generated",
                model=self.model,
            )

        model_used = getattr(response, "model", None)
        request_id = getattr(response, "id", None)
        logger.info(
            f"Completion succeeded model={model_used or self.model} "
            f"prompt={prompt_hash} chars={len(text)} "
            f"elapsed={time.monotonic() - started:.2f}s"
        )

        return CompletionResult(
            text=text,
            model_requested=self.model,
            model_used=model_used if isinstance(model_used, str) else self.model,
            provider=self.PROVIDER_NAME,
            request_id=request_id if isinstance(request_id, str) else None,
            prompt_hash=prompt_hash,
            model_params=params,
            completed_at=datetime.now(UTC).isoformat(),
        )

    async def check_connection(self) -> ConnectionCheckResult:
        """짧은 테스트 요청으로 연결 확인 (재시도 없음)."""
        try:
            response = await self._create_message(
                CONNECTION_TEST_PROMPT,
                {"max_tokens": CONNECTION_TEST_MAX_TOKENS},
            )
        except Exception as e:
            logger.warning(f"Connection check failed: {e}")
            return ConnectionCheckResult(
                success=False,
                message=f"API connection failed: {e}",
            )

        if flatten_content(getattr(response, "content", None)).strip():
            return ConnectionCheckResult(success=True, message="API connection successful")
        return ConnectionCheckResult(success=False, message="API returned empty response")
