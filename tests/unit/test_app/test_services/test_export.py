"""
test_export.py - Markdown 내보내기 테스트

- 본문 == 편집본 텍스트 (UTF-8)
- 파일명: generated-document-{epoch ms}.md
"""

import re
from datetime import UTC, datetime

from src.app.services.export import (
    build_export_filename,
    export_document,
    normalize_newlines,
)


class TestBuildExportFilename:
    """파일명 규칙."""

    def test_fixed_time(self):
        now = datetime(2024, 1, 15, 9, 30, 0, 123000, tzinfo=UTC)

        filename = build_export_filename(now)

        assert filename == f"generated-document-{int(now.timestamp() * 1000)}.md"

    def test_default_now(self):
        filename = build_export_filename()

        assert re.fullmatch(r"generated-document-\d{13}\.md", filename)


class TestExportDocument:
    """내보내기 본문."""

    def test_body_is_edited_text(self):
        text = "# 제목\n\n사용자가 고친 문단.\n"

        exported = export_document(text)

        assert exported.content == text.encode("utf-8")
        assert exported.filename.endswith(".md")
        assert exported.media_type.startswith("text/markdown")

    def test_content_disposition(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)

        exported = export_document("x", now=now)

        assert exported.content_disposition == (
            f'attachment; filename="{build_export_filename(now)}"'
        )

    def test_empty_text(self):
        assert export_document("").content == b""


class TestNormalizeNewlines:
    """form CRLF → LF."""

    def test_crlf(self):
        assert normalize_newlines("a\r\nb\r\n") == "a\nb\n"

    def test_lf_unchanged(self):
        assert normalize_newlines("a\nb") == "a\nb"
