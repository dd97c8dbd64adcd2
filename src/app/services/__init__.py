"""
Application Services.

역할:
- validate: 업로드 템플릿 확장자/크기 검증
- extract: 템플릿 → 프롬프트용 텍스트
- generate: 프롬프트 구성 + completion 호출
- export: 편집본 → Markdown 다운로드
"""

from .export import build_export_filename, export_document
from .extract import TemplateExtractor
from .generate import DocumentGenerationService
from .validate import ValidationService, validate_file

__all__ = [
    "DocumentGenerationService",
    "TemplateExtractor",
    "ValidationService",
    "build_export_filename",
    "export_document",
    "validate_file",
]
