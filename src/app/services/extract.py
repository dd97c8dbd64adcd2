"""
Extraction Service: 업로드 템플릿 → 프롬프트용 텍스트.

- .txt/.md/.html: 바이트를 UTF-8로 그대로 디코딩 (깨진 바이트는 U+FFFD)
- .pdf/.docx: 기본은 고정 placeholder 문구 (실제 파싱 안 함)

extraction.binary_mode=parse:
- DOCX → python-docx로 문단/표 텍스트 추출
- PDF → OCR provider (Gemini)
- 실패하거나 OCR 키가 없으면 placeholder로 되돌림 (warning 로그)
"""

import io
import logging
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from src.app.providers.base import OCRError, OCRProvider
from src.app.providers.gemini import GeminiOCRProvider
from src.domain.constants import (
    BINARY_MODE_PARSE,
    BINARY_MODE_PLACEHOLDER,
    BINARY_TEMPLATE_EXTENSIONS,
    get_extension,
)
from src.domain.errors import ErrorCodes

logger = logging.getLogger(__name__)

PLACEHOLDER_LABELS = {
    ".pdf": "PDF",
    ".docx": "DOCX",
}


def placeholder_text(filename: str) -> str:
    """
    바이너리 템플릿용 고정 안내 문구.

    실제 내용과 무관하게 파일명만 반영된다.
    """
    label = PLACEHOLDER_LABELS[get_extension(filename)]
    return (
        f"[{label} File: {filename}]\n\n"
        f"Note: {label} content extraction requires additional processing. "
        f"Please use text-based files for best results."
    )


def decode_text(content: bytes) -> str:
    """바이트 → 텍스트 (UTF-8, 디코딩 불가 바이트는 대체 문자)."""
    return content.decode("utf-8", errors="replace")


def docx_to_text(content: bytes) -> str:
    """
    DOCX 본문 텍스트 추출.

    문단은 줄 단위, 표는 행 단위로 셀을 " | "로 연결한다.
    """
    document = Document(io.BytesIO(content))
    lines = [paragraph.text for paragraph in document.paragraphs]

    for table in document.tables:
        lines.append("")
        for row in table.rows:
            lines.append(" | ".join(cell.text.strip() for cell in row.cells))

    return "\n".join(lines).strip()


class TemplateExtractor:
    """
    템플릿 텍스트 추출기.

    Usage:
        extractor = TemplateExtractor(config)
        text = await extractor.extract("template.md", file_bytes)
    """

    def __init__(
        self,
        config: dict | None = None,
        ocr_provider: OCRProvider | None = None,
    ):
        """
        Args:
            config: 설정 (extraction.binary_mode, ai.ocr)
            ocr_provider: PDF용 OCR Provider (None이면 parse 모드에서 config 기반 생성)
        """
        config = config or {}
        self.binary_mode = config.get("extraction", {}).get(
            "binary_mode", BINARY_MODE_PLACEHOLDER
        )
        self._ocr_config = config.get("ai", {}).get("ocr", {})
        self._ocr_provider = ocr_provider

    @property
    def ocr_provider(self) -> OCRProvider:
        """OCR Provider (lazy)."""
        if self._ocr_provider is None:
            self._ocr_provider = GeminiOCRProvider(
                model=self._ocr_config.get("model", "gemini-2.5-pro"),
                fallback=self._ocr_config.get("fallback", "gemini-2.5-flash"),
            )
        return self._ocr_provider

    async def extract(self, filename: str, content: bytes) -> str:
        """
        템플릿 텍스트 추출.

        Args:
            filename: 파일명 (확장자로 처리 방식 결정)
            content: 파일 바이트

        Returns:
            프롬프트에 들어갈 템플릿 텍스트
        """
        extension = get_extension(filename)

        if extension not in BINARY_TEMPLATE_EXTENSIONS:
            return decode_text(content)

        if self.binary_mode != BINARY_MODE_PARSE:
            return placeholder_text(filename)

        if extension == ".docx":
            return self._parse_docx(filename, content)
        return await self._parse_pdf(filename, content)

    def _parse_docx(self, filename: str, content: bytes) -> str:
        try:
            text = docx_to_text(content)
        except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as e:
            logger.warning(
                f"[{ErrorCodes.DOCX_PARSE_FAILED}] {filename}: {e}. Using placeholder."
            )
            return placeholder_text(filename)

        if not text:
            logger.warning(f"DOCX has no text: {filename}. Using placeholder.")
            return placeholder_text(filename)
        return text

    async def _parse_pdf(self, filename: str, content: bytes) -> str:
        provider = self.ocr_provider
        if not getattr(provider, "is_configured", True):
            logger.warning(f"OCR provider not configured; using placeholder for {filename}")
            return placeholder_text(filename)

        try:
            result = await provider.extract_text(content, ".pdf")
        except OCRError as e:
            logger.warning(f"[{e.code}] PDF OCR failed for {filename}: {e.message}")
            return placeholder_text(filename)

        if not result.success or not result.text:
            logger.warning(
                f"[{ErrorCodes.OCR_FAILED}] Empty OCR result for {filename}. Using placeholder."
            )
            return placeholder_text(filename)

        logger.info(f"PDF text extracted via {result.model_used}: {filename}")
        return result.text
