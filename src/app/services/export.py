"""
Export Service: 편집된 문서 → Markdown 다운로드 파일.

파일명: generated-document-{epoch ms}.md
본문: 전달받은 텍스트 그대로 (UTF-8)
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from src.domain.constants import (
    EXPORT_FILENAME_PREFIX,
    EXPORT_FILENAME_SUFFIX,
    EXPORT_MEDIA_TYPE,
)


@dataclass
class ExportedFile:
    """다운로드 응답용 파일."""
    filename: str
    content: bytes
    media_type: str = EXPORT_MEDIA_TYPE

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def build_export_filename(now: datetime | None = None) -> str:
    """타임스탬프(epoch 밀리초) 포함 파일명."""
    now = now or datetime.now(UTC)
    timestamp_ms = int(now.timestamp() * 1000)
    return f"{EXPORT_FILENAME_PREFIX}-{timestamp_ms}{EXPORT_FILENAME_SUFFIX}"


def normalize_newlines(text: str) -> str:
    """
    폼 전송 줄바꿈(CRLF) → LF.

    textarea는 화면에 LF로 보이지만 form 전송 시 CRLF로 바뀐다.
    """
    return text.replace("\r\n", "\n")


def export_document(text: str, now: datetime | None = None) -> ExportedFile:
    """
    문서 내보내기.

    Args:
        text: 사용자에게 보이는 현재 편집본
        now: 파일명 타임스탬프 기준 시각

    Returns:
        ExportedFile (본문 == text.encode("utf-8"))
    """
    return ExportedFile(
        filename=build_export_filename(now),
        content=text.encode("utf-8"),
    )
