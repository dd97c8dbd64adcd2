"""
Domain Constants: 템플릿 업로드/생성/내보내기 전역 상수.

업로드 허용 확장자, 크기 상한, 내보내기 파일명 정책 등
서비스와 라우트에서 공통으로 사용하는 값들.
"""

# =============================================================================
# Upload Policy (업로드 정책)
# =============================================================================
# 파일 선택창 accept 속성과 서버 검증이 같은 목록을 사용해야 함.

ALLOWED_TEMPLATE_EXTENSIONS = (".txt", ".md", ".html", ".pdf", ".docx")

# 바이너리 포맷 (기본: placeholder 문구 반환)
BINARY_TEMPLATE_EXTENSIONS = (".pdf", ".docx")

MAX_TEMPLATE_SIZE_MB = 10
MAX_TEMPLATE_SIZE_BYTES = MAX_TEMPLATE_SIZE_MB * 1024 * 1024

# =============================================================================
# Extraction Modes (바이너리 추출 모드)
# =============================================================================
# placeholder: 고정 안내 문구 (기본값)
# parse: DOCX는 python-docx, PDF는 OCR provider로 실제 텍스트 추출

BINARY_MODE_PLACEHOLDER = "placeholder"
BINARY_MODE_PARSE = "parse"

# =============================================================================
# Completion Defaults (config 미지정 시)
# =============================================================================

DEFAULT_LLM_MODEL = "claude-opus-4-5-20251101"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_GENERATION_TIMEOUT = 120.0

# 연결 테스트용 요청
CONNECTION_TEST_PROMPT = "Hello, this is a test."
CONNECTION_TEST_MAX_TOKENS = 10

# =============================================================================
# API Key Policy
# =============================================================================
# 인자 > MY_ANTHROPIC_KEY > ANTHROPIC_API_KEY
# .env.example에 들어있는 값 그대로면 미설정으로 취급

API_KEY_ENV_VARS = ("MY_ANTHROPIC_KEY", "ANTHROPIC_API_KEY")
API_KEY_PLACEHOLDERS = frozenset({
    "your_anthropic_api_key_here",
    "sk-ant-api03-...",
})

# =============================================================================
# Export (내보내기)
# =============================================================================
# 파일명: generated-document-{epoch ms}.md

EXPORT_FILENAME_PREFIX = "generated-document"
EXPORT_FILENAME_SUFFIX = ".md"
EXPORT_MEDIA_TYPE = "text/markdown; charset=utf-8"

# =============================================================================
# MIME Types
# =============================================================================

MIME_TYPES = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".html": "text/html",
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def get_extension(filename: str) -> str:
    """
    파일명에서 확장자 추출.

    마지막 `.` 이후 문자열을 소문자로 변환해 `.`을 붙인다.
    `.`이 없으면 파일명 전체가 확장자로 취급된다 (허용 목록에 걸리지 않음).

    Args:
        filename: 파일명

    Returns:
        ".txt" 형태의 확장자
    """
    return "." + filename.rsplit(".", 1)[-1].lower()

