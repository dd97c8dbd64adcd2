"""
Pytest fixtures for the document generator tests.

테스트 구성:
- 실제 네트워크 호출 없음 (provider는 mock 주입)
- API 키 환경변수는 테스트마다 명시적으로 설정/제거
"""

from pathlib import Path

import pytest
import yaml

from src.domain.constants import API_KEY_ENV_VARS

# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture
def no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Anthropic API 키 환경변수 모두 제거."""
    for name in API_KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch, no_api_key: None) -> str:
    """테스트용 Anthropic API 키 설정."""
    monkeypatch.setenv("MY_ANTHROPIC_KEY", "test-api-key")
    return "test-api-key"


# =============================================================================
# Config / Template Fixtures
# =============================================================================

@pytest.fixture
def test_config() -> dict:
    """테스트용 설정."""
    return {
        "ai": {
            "llm": {
                "model": "claude-test-model",
                "max_tokens": 2000,
                "temperature": 0.7,
                "max_retries": 0,
            },
            "generation_timeout": 5,
        },
        "upload": {"max_size_mb": 10},
        "extraction": {"binary_mode": "placeholder"},
    }


@pytest.fixture
def sample_template_text() -> str:
    """정상 케이스 Markdown 템플릿."""
    return (
        "# 주간 보고서\n"
        "\n"
        "## 요약\n"
        "{이번 주 요약}\n"
        "\n"
        "## 다음 주 계획\n"
        "- 항목 1\n"
    )
