"""
AI Provider Abstraction.

completion 엔드포인트 교체 가능하게 설계.
모델명은 config만 SSOT.
"""

from .anthropic import ClaudeProvider, is_api_key_configured, resolve_api_key
from .base import (
    CompletionResult,
    ConnectionCheckResult,
    LLMProvider,
    OCRProvider,
    OCRResult,
    flatten_content,
)
from .gemini import GeminiOCRProvider

__all__ = [
    "LLMProvider",
    "OCRProvider",
    "OCRResult",
    "CompletionResult",
    "ConnectionCheckResult",
    "ClaudeProvider",
    "GeminiOCRProvider",
    "flatten_content",
    "is_api_key_configured",
    "resolve_api_key",
]
