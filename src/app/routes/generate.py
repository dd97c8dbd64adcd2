"""
Generate Routes: 템플릿 업로드 → 문서 생성 → 편집 → 내보내기.

- GET /                          → 생성 폼 화면 (HTMX)
- POST /api/generate/upload      → 템플릿 업로드 + 검증 (HTML 조각)
- POST /api/generate             → 문서 생성 (HTML 조각: 편집기 또는 오류 카드)
- POST /api/generate/export      → 편집본 Markdown 다운로드
- POST /api/generate/reset       → 세션 초기화
- GET  /api/generate/connection  → API 연결 테스트 (JSON)

오류 카드는 GenerationErrorKind로만 제목/문구를 고른다 (메시지 문자열 매칭 없음).
HTMX가 4xx/5xx 응답도 swap 하도록 페이지에서 htmx:beforeSwap을 설정한다.
"""

import html as html_escape_module
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from src.app.providers.anthropic import is_api_key_configured
from src.app.services.export import export_document, normalize_newlines
from src.app.services.extract import TemplateExtractor
from src.app.services.generate import DocumentGenerationService
from src.app.services.validate import FileValidationResult, ValidationService
from src.core.session_store import SessionBusyError, SessionStore
from src.domain.constants import ALLOWED_TEMPLATE_EXTENSIONS
from src.domain.errors import ErrorCodes, GenerationError, GenerationErrorKind
from src.domain.schemas import DocumentSession, UploadedFile

logger = logging.getLogger(__name__)

_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = Jinja2Templates(directory=_templates_dir)

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints

# kind → (HTTP status, 카드 제목, 고정 안내 문구)
# generic은 고정 문구 없이 에러 메시지를 그대로 보여준다
ERROR_PRESENTATION: dict[GenerationErrorKind, tuple[int, str, str | None]] = {
    GenerationErrorKind.CONFIGURATION: (
        503,
        "설정 오류",
        "Anthropic API 키가 설정되지 않았거나 유효하지 않습니다. 환경변수를 확인해주세요.",
    ),
    GenerationErrorKind.NETWORK: (
        502,
        "네트워크 오류",
        "Anthropic API에 연결할 수 없습니다. 인터넷 연결을 확인해주세요.",
    ),
    GenerationErrorKind.GENERIC: (502, "생성 실패", None),
}


# =============================================================================
# App State Accessors
# =============================================================================


def get_session_store(request: Request) -> SessionStore:
    store: SessionStore = request.app.state.sessions
    return store


def get_validation_service(request: Request) -> ValidationService:
    service: ValidationService = request.app.state.validation_service
    return service


def get_template_extractor(request: Request) -> TemplateExtractor:
    extractor: TemplateExtractor = request.app.state.template_extractor
    return extractor


def get_generation_service(request: Request) -> DocumentGenerationService:
    service: DocumentGenerationService = request.app.state.generation_service
    return service


# =============================================================================
# HTML Generation Helpers
# =============================================================================


def escape_html(text: str) -> str:
    """HTML 이스케이프."""
    return html_escape_module.escape(text)


def format_size(size: int) -> str:
    """바이트 → KB 표시 (소수점 1자리)."""
    return f"{size / 1024:.1f} KB"


def build_oob_session_input(session_id: str) -> str:
    """HTMX OOB session_id hidden input 생성 (폼 두 곳 모두 갱신)."""
    value = escape_html(session_id)
    return (
        f'<input type="hidden" name="session_id" id="upload-session-id" '
        f'value="{value}" hx-swap-oob="true">'
        f'<input type="hidden" name="session_id" id="generate-session-id" '
        f'value="{value}" hx-swap-oob="true">'
    )


def build_message_card_html(
    title: str,
    message: str,
    *,
    variant: str = "error",
    error_code: str | None = None,
    error_kind: str | None = None,
    detail: str | None = None,
) -> str:
    """
    알림 카드 HTML.

    Args:
        title: 카드 제목
        message: 본문 (escape 처리됨)
        variant: error | success | info
        error_code: [CODE] 표시
        error_kind: data-error-kind 속성
        detail: 보조 설명 (작은 글씨)
    """
    attrs = f'class="card card-{variant}"'
    if error_kind:
        attrs += f' data-error-kind="{escape_html(error_kind)}"'
    code_html = (
        f'<span class="error-code">[{escape_html(error_code)}]</span> ' if error_code else ""
    )
    detail_html = f'<br><small class="hint">{escape_html(detail)}</small>' if detail else ""
    return (
        f"<div {attrs}>"
        f"<strong>{escape_html(title)}</strong><br>"
        f"{code_html}{escape_html(message)}{detail_html}"
        f"</div>"
    )


def build_file_card_html(uploaded_file: UploadedFile) -> str:
    """업로드된 템플릿 카드."""
    return (
        f'<div class="card card-success file-card">'
        f"<strong>템플릿 업로드 완료</strong><br>"
        f'<span class="file-name">{escape_html(uploaded_file.filename)}</span> '
        f'<small class="file-size">{format_size(uploaded_file.size)}</small>'
        f"</div>"
    )


def build_editor_html(session: DocumentSession) -> str:
    """
    생성 결과 편집기.

    일반 form POST로 내보내기 → 브라우저가 첨부 파일로 다운로드.
    """
    document = session.document
    content = document.content if document else ""
    model_info = (
        f'<small class="hint">model: {escape_html(document.model_used)}</small>'
        if document and document.model_used
        else ""
    )
    return f"""<div class="card card-success" id="generated-document">
    <strong>문서 생성 완료</strong> {model_info}
    <form method="post" action="/api/generate/export">
        <input type="hidden" name="session_id" value="{escape_html(session.session_id)}">
        <textarea name="content" id="document-editor" rows="24">{escape_html(content)}</textarea>
        <button type="submit" class="button">Markdown으로 내보내기</button>
    </form>
</div>"""


def generation_error_response(error: GenerationError) -> HTMLResponse:
    """GenerationError → kind별 오류 카드."""
    status_code, title, fixed_message = ERROR_PRESENTATION[error.kind]
    card = build_message_card_html(
        title,
        fixed_message or error.message,
        error_code=error.code,
        error_kind=error.kind.value,
        detail=error.message if fixed_message else None,
    )
    return HTMLResponse(content=card, status_code=status_code)


# =============================================================================
# Page Routes (HTML)
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def generator_page(request: Request) -> HTMLResponse:
    """
    문서 생성 화면.

    API 키가 없으면 설정 안내 배너를 띄우고 생성 버튼을 비활성화한다.
    """
    session = get_session_store(request).get_or_create(None)

    return jinja_templates.TemplateResponse(
        request,
        "index.html",
        {
            "session_id": session.session_id,
            "api_configured": is_api_key_configured(),
            "accept": ",".join(ALLOWED_TEMPLATE_EXTENSIONS),
            "max_size_mb": get_validation_service(request).max_size_bytes // (1024 * 1024),
        },
    )


# =============================================================================
# API Routes
# =============================================================================


@api_router.post("/upload", response_class=HTMLResponse)
async def upload_template(
    request: Request,
    file: UploadFile = File(...),
    session_id: str | None = Form(None),
) -> HTMLResponse:
    """
    템플릿 업로드.

    검증 실패 시 세션 상태는 그대로 두고 400 카드 반환.
    성공 시 이전 파일/생성 결과를 교체한다.
    """
    session = get_session_store(request).get_or_create(session_id)
    oob_session = build_oob_session_input(session.session_id)

    filename = file.filename or "unknown"
    validation_service = get_validation_service(request)

    # multipart 헤더로 크기를 알 수 있으면 본문을 읽기 전에 거절
    validation = (
        validation_service.validate(filename, file.size)
        if file.size is not None
        else FileValidationResult(valid=True)
    )
    if validation.valid:
        content = await file.read()
        validation = validation_service.validate(filename, len(content))

    if not validation.valid:
        logger.info(f"Rejected upload {filename!r}: {validation.to_dict()}")
        card = build_message_card_html(
            "잘못된 파일",
            validation.error or "",
            error_code=validation.error_code,
        )
        return HTMLResponse(content=card + oob_session, status_code=400)

    uploaded_file = UploadedFile(filename=filename, size=len(content), content=content)
    session.attach_file(uploaded_file)
    logger.info(f"Template uploaded session={session.session_id} file={filename!r}")

    # 이전 생성 결과 영역 비우기
    clear_result = '<div id="result" hx-swap-oob="true"></div>'
    return HTMLResponse(content=build_file_card_html(uploaded_file) + clear_result + oob_session)


@api_router.post("", response_class=HTMLResponse)
async def generate_document(
    request: Request,
    session_id: str | None = Form(None),
    description: str = Form(""),
) -> HTMLResponse:
    """
    문서 생성.

    세션당 동시 생성 1건 (busy 중 재요청 → 409).
    """
    store = get_session_store(request)
    session = store.get(session_id) if session_id else None

    if session is None or session.uploaded_file is None:
        card = build_message_card_html(
            "필수 입력 누락",
            "템플릿을 업로드하고 설명을 입력해주세요.",
            error_code=ErrorCodes.NO_TEMPLATE,
        )
        return HTMLResponse(content=card, status_code=400)

    if not description.strip():
        card = build_message_card_html(
            "필수 입력 누락",
            "템플릿을 업로드하고 설명을 입력해주세요.",
            error_code=ErrorCodes.NO_DESCRIPTION,
        )
        return HTMLResponse(content=card, status_code=400)

    uploaded_file = session.uploaded_file
    generation_service = get_generation_service(request)

    try:
        with store.generation_slot(session):
            # API 키 확인이 템플릿 추출(OCR 업로드 포함)보다 먼저
            generation_service.ensure_configured()
            template_text = await get_template_extractor(request).extract(
                uploaded_file.filename, uploaded_file.content
            )
            document = await generation_service.generate(
                template_text=template_text,
                description=description,
                filename=uploaded_file.filename,
            )
    except SessionBusyError:
        card = build_message_card_html(
            "생성 중",
            "이미 문서를 생성하고 있습니다. 완료될 때까지 기다려주세요.",
            error_code=ErrorCodes.GENERATION_IN_PROGRESS,
            variant="info",
        )
        return HTMLResponse(content=card, status_code=409)
    except GenerationError as e:
        logger.warning(f"Generation failed session={session_id}: {e.to_dict()}")
        return generation_error_response(e)

    # 생성 중 다른 파일이 올라왔으면 결과를 붙이지 않음
    if session.uploaded_file is not uploaded_file:
        card = build_message_card_html(
            "템플릿 변경됨",
            "생성 중 템플릿이 바뀌었습니다. 다시 생성해주세요.",
            variant="info",
        )
        return HTMLResponse(content=card, status_code=409)

    session.set_document(document)
    return HTMLResponse(content=build_editor_html(session))


@api_router.post("/export")
async def export_generated_document(
    request: Request,
    content: str = Form(""),
    session_id: str | None = Form(None),
) -> Response:
    """
    편집본 Markdown 다운로드.

    본문은 편집기에 보이는 텍스트 그대로 (form CRLF만 LF로 정규화).
    """
    text = normalize_newlines(content)

    session = get_session_store(request).get(session_id) if session_id else None
    if not text and (session is None or session.document is None):
        card = build_message_card_html(
            "내보낼 문서 없음",
            "먼저 문서를 생성해주세요.",
            error_code=ErrorCodes.NO_DOCUMENT,
        )
        return HTMLResponse(content=card, status_code=400)

    if session is not None and session.document is not None:
        session.document.update_content(text)
        logger.info(
            f"Exporting document session={session.session_id} "
            f"edited={session.document.edited}"
        )

    exported = export_document(text)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": exported.content_disposition},
    )


@api_router.post("/reset", response_class=HTMLResponse)
async def reset_session(
    request: Request,
    session_id: str | None = Form(None),
) -> HTMLResponse:
    """폼 초기화: 세션 폐기 후 페이지 새로고침."""
    if session_id:
        store = get_session_store(request)
        session = store.get(session_id)
        if session is not None:
            session.reset()
        store.discard(session_id)
    return HTMLResponse(content="", headers={"HX-Refresh": "true"})


@api_router.get("/connection")
async def check_connection(request: Request) -> dict[str, Any]:
    """API 연결 테스트."""
    result = await get_generation_service(request).check_connection()
    return result.to_dict()
