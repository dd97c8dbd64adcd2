"""
test_session_store.py - 세션 저장소 테스트

- 세션당 파일/문서 최대 1개, 새 업로드 시 이전 문서 폐기
- 세션당 동시 생성 1건 (busy)
- 상한 초과 시 오래된 idle 세션부터 제거
"""

import pytest

from src.core.session_store import SessionBusyError, SessionStore
from src.domain.schemas import GeneratedDocument, UploadedFile


@pytest.fixture
def store():
    return SessionStore(max_sessions=3)


def make_file(name: str = "t.md") -> UploadedFile:
    return UploadedFile(filename=name, size=3, content=b"abc")


# =============================================================================
# 조회 / 생성
# =============================================================================


class TestGetOrCreate:
    def test_new_id_issued(self, store):
        session = store.get_or_create(None)

        assert session.session_id
        assert session.session_id in store
        assert session.uploaded_file is None
        assert session.document is None

    def test_existing_returned(self, store):
        first = store.get_or_create("abc")

        assert store.get_or_create("abc") is first
        assert store.get("abc") is first
        assert len(store) == 1

    def test_unknown_get(self, store):
        assert store.get("missing") is None

    def test_discard(self, store):
        store.get_or_create("abc")
        store.discard("abc")
        store.discard("abc")

        assert "abc" not in store


class TestEviction:
    def test_oldest_idle_evicted(self, store):
        for session_id in ("a", "b", "c"):
            store.get_or_create(session_id)
        store.get("a")  # a를 최근 사용으로

        store.get_or_create("d")

        assert "b" not in store
        assert "a" in store
        assert "c" in store
        assert "d" in store
        assert len(store) == 3

    def test_busy_session_kept(self):
        store = SessionStore(max_sessions=1)
        busy = store.get_or_create("busy")
        busy.busy = True

        new = store.get_or_create("new")

        assert "busy" in store
        assert "new" in store
        assert store.get("new") is new


# =============================================================================
# 세션 상태
# =============================================================================


class TestDocumentSession:
    def test_new_upload_discards_document(self, store):
        session = store.get_or_create("s")
        session.attach_file(make_file("a.md"))
        session.set_document(GeneratedDocument(content="old"))

        session.attach_file(make_file("b.md"))

        assert session.uploaded_file.filename == "b.md"
        assert session.document is None

    def test_reset(self, store):
        session = store.get_or_create("s")
        session.attach_file(make_file())
        session.set_document(GeneratedDocument(content="x"))

        session.reset()

        assert session.uploaded_file is None
        assert session.document is None

    def test_document_edit_tracking(self):
        document = GeneratedDocument(content="# A")

        document.update_content("# A")
        assert document.edited is False

        document.update_content("# B")
        assert document.edited is True
        assert document.content == "# B"


# =============================================================================
# generation_slot
# =============================================================================


class TestGenerationSlot:
    def test_busy_during_slot(self, store):
        session = store.get_or_create("s")

        with store.generation_slot(session):
            assert session.busy is True

        assert session.busy is False

    def test_second_request_rejected(self, store):
        session = store.get_or_create("s")

        with store.generation_slot(session):
            with pytest.raises(SessionBusyError):
                with store.generation_slot(session):
                    pass
            assert session.busy is True

        assert session.busy is False

    def test_released_on_error(self, store):
        session = store.get_or_create("s")

        with pytest.raises(RuntimeError):
            with store.generation_slot(session):
                raise RuntimeError("boom")

        assert session.busy is False

    def test_sessions_independent(self, store):
        first = store.get_or_create("a")
        second = store.get_or_create("b")

        with store.generation_slot(first):
            with store.generation_slot(second):
                assert first.busy and second.busy
