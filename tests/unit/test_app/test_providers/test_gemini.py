"""
test_gemini.py - Gemini OCR Provider 테스트 (PDF parse 모드)

Fallback 예외 정책 검증:
- FALLBACK_ERRORS: NotFound, ServiceUnavailable, ResourceExhausted → fallback
- REJECT_IMMEDIATELY: InvalidArgument, PermissionDenied, Unauthenticated → 즉시 reject
"""

from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import (
    InvalidArgument,
    NotFound,
    PermissionDenied,
    ResourceExhausted,
    ServiceUnavailable,
    Unauthenticated,
)

from src.app.providers.base import OCRError
from src.app.providers.gemini import (
    FALLBACK_ERRORS,
    REJECT_IMMEDIATELY,
    GeminiOCRProvider,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def provider():
    """기본 Gemini provider."""
    return GeminiOCRProvider(
        model="gemini-2.5-pro",
        fallback="gemini-2.5-flash",
        api_key="test-api-key",
    )


@pytest.fixture
def provider_no_fallback():
    """Fallback 없는 provider."""
    return GeminiOCRProvider(model="gemini-2.5-pro", fallback=None, api_key="test-api-key")


def attach_genai(provider: GeminiOCRProvider, side_effect=None, text: str = "") -> MagicMock:
    """provider._client 에 genai mock 주입."""
    mock_response = MagicMock()
    mock_response.text = text

    mock_model = MagicMock()
    if side_effect is not None:
        mock_model.generate_content.side_effect = side_effect
    else:
        mock_model.generate_content.return_value = mock_response

    mock_genai = MagicMock()
    mock_genai.GenerativeModel.return_value = mock_model
    provider._client = mock_genai
    return mock_model


def ok_response(text: str) -> MagicMock:
    response = MagicMock()
    response.text = text
    return response


# =============================================================================
# 초기화 / 예외 정책
# =============================================================================


class TestGeminiOCRProviderInit:
    """GeminiOCRProvider 초기화 테스트."""

    def test_init_uses_env_api_key(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "env-api-key")

        provider = GeminiOCRProvider()

        assert provider.api_key == "env-api-key"
        assert provider.is_configured is True

    def test_not_configured(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

        provider = GeminiOCRProvider()

        assert provider.is_configured is False
        with pytest.raises(OCRError) as exc_info:
            provider._get_client()
        assert exc_info.value.code == "GOOGLE_API_KEY_MISSING"


class TestExceptionMapping:
    def test_fallback_errors(self):
        assert set(FALLBACK_ERRORS) == {NotFound, ServiceUnavailable, ResourceExhausted}

    def test_reject_immediately(self):
        assert set(REJECT_IMMEDIATELY) == {InvalidArgument, PermissionDenied, Unauthenticated}


class TestNormalizeMimeType:
    def test_extension_to_mime(self, provider):
        assert provider._normalize_mime_type(".pdf") == "application/pdf"

    def test_extension_without_dot(self, provider):
        assert provider._normalize_mime_type("PDF") == "application/pdf"

    def test_already_mime_type(self, provider):
        assert provider._normalize_mime_type("application/pdf") == "application/pdf"

    def test_unknown_extension(self, provider):
        assert provider._normalize_mime_type(".xyz") == "application/octet-stream"


# =============================================================================
# extract_text
# =============================================================================


class TestExtractText:
    """extract_text 메서드 테스트."""

    @pytest.mark.asyncio
    async def test_successful_extraction(self, provider):
        mock_model = attach_genai(provider, text="# Invoice\nTotal:")

        result = await provider.extract_text(b"%PDF", ".pdf")

        assert result.success is True
        assert result.text == "# Invoice\nTotal:"
        assert result.model_used == "gemini-2.5-pro"
        assert result.fallback_triggered is False
        part = mock_model.generate_content.call_args.args[0][1]
        assert part == {"mime_type": "application/pdf", "data": b"%PDF"}

    @pytest.mark.asyncio
    async def test_fallback_on_service_unavailable(self, provider):
        attach_genai(
            provider,
            side_effect=[ServiceUnavailable("down"), ok_response("Fallback result")],
        )

        result = await provider.extract_text(b"%PDF", ".pdf")

        assert result.text == "Fallback result"
        assert result.model_requested == "gemini-2.5-pro"
        assert result.model_used == "gemini-2.5-flash"
        assert result.fallback_triggered is True

    @pytest.mark.asyncio
    async def test_reject_on_invalid_argument(self, provider):
        mock_model = attach_genai(provider, side_effect=InvalidArgument("bad input"))

        with pytest.raises(OCRError) as exc_info:
            await provider.extract_text(b"%PDF", ".pdf")

        assert exc_info.value.code == "AUTH_OR_INPUT_ERROR"
        assert mock_model.generate_content.call_count == 1

    @pytest.mark.asyncio
    async def test_no_fallback_configured(self, provider_no_fallback):
        attach_genai(provider_no_fallback, side_effect=ServiceUnavailable("down"))

        with pytest.raises(OCRError) as exc_info:
            await provider_no_fallback.extract_text(b"%PDF", ".pdf")

        assert exc_info.value.code == "NO_FALLBACK"

    @pytest.mark.asyncio
    async def test_both_primary_and_fallback_fail(self, provider):
        attach_genai(
            provider,
            side_effect=[ServiceUnavailable("down"), ResourceExhausted("quota")],
        )

        with pytest.raises(OCRError) as exc_info:
            await provider.extract_text(b"%PDF", ".pdf")

        assert exc_info.value.code == "FALLBACK_FAILED"

    @pytest.mark.asyncio
    async def test_empty_text_unsuccessful(self, provider):
        attach_genai(provider, text="  ")

        result = await provider.extract_text(b"%PDF", ".pdf")

        assert result.success is False
        assert result.error_message
