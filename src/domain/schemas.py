"""
Data schemas for the document generator.

모두 메모리 전용 값 객체 (영속화 없음):
- UploadedFile: 업로드된 템플릿 (검증 통과 후에만 생성)
- GeneratedDocument: 생성 결과 텍스트 (사용자 편집 가능)
- DocumentSession: 세션당 최대 1개의 파일 + 1개의 문서
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class UploadedFile:
    """업로드된 템플릿 파일."""
    filename: str
    size: int
    content: bytes = field(repr=False)
    uploaded_at: str = field(default_factory=_now_iso)


@dataclass
class GeneratedDocument:
    """
    생성된 문서.

    content는 사용자가 편집기에서 직접 수정할 수 있으며,
    내보내기 시점의 편집본으로 덮어쓴다. 버전 관리 없음.
    """
    content: str
    model_used: str | None = None
    generated_at: str = field(default_factory=_now_iso)
    edited: bool = False

    def update_content(self, content: str) -> None:
        """편집 내용 반영."""
        if content != self.content:
            self.content = content
            self.edited = True


@dataclass
class DocumentSession:
    """
    브라우저 세션 단위 상태.

    불변식:
    - uploaded_file, document 각각 최대 1개
    - 새 파일 업로드 시 이전 문서는 폐기
    - busy 동안 추가 생성 요청 불가 (세션당 동시 생성 1건)
    """
    session_id: str
    uploaded_file: UploadedFile | None = None
    document: GeneratedDocument | None = None
    busy: bool = False
    created_at: str = field(default_factory=_now_iso)

    def attach_file(self, uploaded_file: UploadedFile) -> None:
        """파일 교체 (이전 생성 결과 폐기)."""
        self.uploaded_file = uploaded_file
        self.document = None

    def set_document(self, document: GeneratedDocument) -> None:
        self.document = document

    def reset(self) -> None:
        """폼 초기화: 파일/문서 모두 폐기."""
        self.uploaded_file = None
        self.document = None
