"""
App layer: UI 서버 (FastAPI + HTMX).

역할:
- 템플릿 업로드/검증, 설명 입력
- LLM 호출 (providers), 생성 결과 편집/내보내기 UI

주의: 폴더 구분
- src/app/templates/ → Jinja2 HTML (HTMX)
- prompts/ (루트) → 생성 프롬프트 텍스트
"""
