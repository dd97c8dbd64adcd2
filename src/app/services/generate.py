"""
Generation Service: 템플릿 텍스트 + 설명 → 생성 문서.

흐름:
1. 고정 형태 프롬프트 구성 (prompts/generate_document.txt, 없으면 기본값)
2. completion 1회 호출 (일시적 실패만 provider가 재시도)
3. 응답 content block 평탄화 → GeneratedDocument

API 키가 없으면 provider 생성 단계에서 GenerationError(configuration) → 네트워크 호출 없음.
"""

import asyncio
import logging
import re
import time
from pathlib import Path

from src.app.providers.anthropic import ClaudeProvider, is_api_key_configured
from src.app.providers.base import ConnectionCheckResult, LLMProvider
from src.domain.constants import (
    DEFAULT_GENERATION_TIMEOUT,
    DEFAULT_LLM_MODEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
)
from src.domain.errors import ErrorCodes, GenerationError, GenerationErrorKind
from src.domain.schemas import GeneratedDocument

logger = logging.getLogger(__name__)

PROMPT_FILENAME = "generate_document.txt"

# 단일 패스 치환: 템플릿 본문에 들어있는 "{description}" 같은 문자열은 건드리지 않음
_PLACEHOLDER_PATTERN = re.compile(r"\{(file_name|template_content|description)\}")


DEFAULT_PROMPT = """You are a professional document generator. Based on the following template and description, generate a well-structured document.

Template File: {file_name}
Template Content: {template_content}

Description: {description}

Please generate a professional document that:
1. Follows the structure and style of the template
2. Incorporates the content described in the description
3. Is well-formatted with proper headings, sections, and formatting
4. Is comprehensive and detailed
5. Maintains professional tone and quality

Generate the document content:"""


def render_prompt(
    prompt_template: str,
    template_text: str,
    description: str,
    filename: str,
) -> str:
    """프롬프트 템플릿 변수 치환."""
    values = {
        "file_name": filename,
        "template_content": template_text,
        "description": description,
    }
    return _PLACEHOLDER_PATTERN.sub(lambda m: values[m.group(1)], prompt_template)


class DocumentGenerationService:
    """
    문서 생성 서비스.

    Usage:
        service = DocumentGenerationService(config, prompts_dir)
        document = await service.generate(template_text, description, filename)
    """

    def __init__(
        self,
        config: dict,
        prompts_dir: Path | None = None,
        provider: LLMProvider | None = None,
    ):
        """
        Args:
            config: 설정 (ai.llm, ai.generation_timeout)
            prompts_dir: 프롬프트 템플릿 디렉터리
            provider: LLM Provider (None이면 config 기반 lazy 생성)
        """
        self.config = config
        self.prompts_dir = prompts_dir
        self._provider = provider
        self._prompt_template: str | None = None

        ai_config = config.get("ai", {})
        self.llm_config: dict = ai_config.get("llm", {})
        self.timeout: float = ai_config.get(
            "generation_timeout", DEFAULT_GENERATION_TIMEOUT
        )

    @property
    def provider(self) -> LLMProvider:
        """
        LLM Provider (lazy).

        Raises:
            GenerationError: API 키 미설정 (configuration)
        """
        if self._provider is None:
            self._provider = ClaudeProvider(
                model=self.llm_config.get("model", DEFAULT_LLM_MODEL),
                max_tokens=self.llm_config.get("max_tokens", DEFAULT_MAX_TOKENS),
                temperature=self.llm_config.get("temperature", DEFAULT_TEMPERATURE),
                max_retries=self.llm_config.get("max_retries", 2),
            )
        return self._provider

    def ensure_configured(self) -> LLMProvider:
        """
        API 키 확인 (provider 생성).

        템플릿 추출(OCR 포함)보다 먼저 호출한다.

        Raises:
            GenerationError: API 키 미설정 (configuration)
        """
        return self.provider

    @property
    def prompt_template(self) -> str:
        """프롬프트 템플릿 로드 (lazy)."""
        if self._prompt_template is None:
            prompt_path = self.prompts_dir / PROMPT_FILENAME if self.prompts_dir else None
            if prompt_path is not None and prompt_path.exists():
                self._prompt_template = prompt_path.read_text(encoding="utf-8")
            else:
                self._prompt_template = DEFAULT_PROMPT
        return self._prompt_template

    def build_prompt(self, template_text: str, description: str, filename: str) -> str:
        return render_prompt(self.prompt_template, template_text, description, filename)

    async def generate(
        self,
        template_text: str,
        description: str,
        filename: str,
    ) -> GeneratedDocument:
        """
        문서 생성.

        Args:
            template_text: 추출된 템플릿 텍스트
            description: 사용자 설명
            filename: 템플릿 파일명

        Returns:
            GeneratedDocument

        Raises:
            GenerationError: kind로 분류된 실패
        """
        # API 키 검사가 프롬프트/네트워크보다 먼저
        provider = self.ensure_configured()
        prompt = self.build_prompt(template_text, description, filename)
        started = time.monotonic()

        try:
            result = await asyncio.wait_for(provider.complete(prompt), timeout=self.timeout)
        except TimeoutError as e:
            logger.error(f"Generation timed out after {self.timeout}s ({filename})")
            raise GenerationError(
                GenerationErrorKind.NETWORK,
                ErrorCodes.API_TIMEOUT,
                "문서 생성 시간이 초과되었습니다. 잠시 후 다시 시도해주세요.",
                timeout=self.timeout,
            ) from e

        logger.info(
            f"Generated document for {filename!r} "
            f"model={result.model_used} prompt={result.prompt_hash} "
            f"in {time.monotonic() - started:.1f}s"
        )
        return GeneratedDocument(content=result.text, model_used=result.model_used)

    async def check_connection(self) -> ConnectionCheckResult:
        """API 연결 테스트."""
        if self._provider is None and not is_api_key_configured():
            return ConnectionCheckResult(success=False, message="API key is not configured")
        return await self.provider.check_connection()
