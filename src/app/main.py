"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uvicorn src.app.main:app --reload
- 프로덕션: uvicorn src.app.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from fastapi import FastAPI

# Routes
from src.app.routes import generate
from src.app.services.extract import TemplateExtractor
from src.app.services.generate import DocumentGenerationService
from src.app.services.validate import ValidationService
from src.core.session_store import DEFAULT_MAX_SESSIONS, SessionStore

PROJECT_ROOT = Path(__file__).parent.parent.parent

# .env → 환경변수 (MY_ANTHROPIC_KEY, GOOGLE_API_KEY)
load_dotenv(PROJECT_ROOT / ".env")

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = PROJECT_ROOT / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def configure_logging(config: dict) -> None:
    """logging.level 기준 루트 로거 설정."""
    level_name = str(config.get("logging", {}).get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 로드, 서비스 초기화
    종료 시: 세션 폐기
    """
    # Startup
    config = load_config()
    configure_logging(config)

    app.state.config = config
    app.state.sessions = SessionStore(
        max_sessions=config.get("sessions", {}).get("max_sessions", DEFAULT_MAX_SESSIONS)
    )
    app.state.validation_service = ValidationService(config)
    app.state.template_extractor = TemplateExtractor(config)
    app.state.generation_service = DocumentGenerationService(
        config, prompts_dir=PROJECT_ROOT / "prompts"
    )
    logger.info("Document generator started")

    yield

    # Shutdown
    logger.info(f"Shutting down ({len(app.state.sessions)} sessions dropped)")


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="Template Document Generator",
    description="템플릿 + 설명 → LLM 생성 Markdown 문서",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Routes
# =============================================================================

# 페이지 라우트 (HTML)
app.include_router(generate.router, prefix="", tags=["Generate"])

# API 라우트
app.include_router(generate.api_router, prefix="/api/generate", tags=["Generate API"])


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
