"""
FastAPI Routes.

페이지 라우트 (HTML) + API 라우트 (HTML 조각, 파일 다운로드, JSON)
"""

from . import generate

__all__ = ["generate"]
