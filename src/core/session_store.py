"""
Session store: 세션 ID → DocumentSession (메모리 전용).

- 디스크 저장 없음: 페이지 새로고침/서버 재시작 시 폐기
- 세션 수 상한 초과 시 가장 오래 사용되지 않은 세션부터 제거
- generation_slot(): 세션당 동시 생성 1건 보장 (busy 플래그)
"""

import logging
import threading
import uuid
from collections import OrderedDict
from collections.abc import Generator
from contextlib import contextmanager

from src.domain.schemas import DocumentSession

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000


class SessionBusyError(Exception):
    """이미 생성 요청이 진행 중인 세션."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Generation already in progress for session {session_id}")


class SessionStore:
    """
    메모리 세션 저장소.

    Usage:
        store = SessionStore()
        session = store.get_or_create(session_id)
        with store.generation_slot(session):
            ...
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS):
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, DocumentSession] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    @staticmethod
    def new_session_id() -> str:
        return str(uuid.uuid4())

    def get(self, session_id: str) -> DocumentSession | None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
            return session

    def get_or_create(self, session_id: str | None) -> DocumentSession:
        """
        세션 조회, 없으면 생성.

        session_id가 비어 있으면 새 ID를 발급한다.
        """
        if not session_id:
            session_id = self.new_session_id()

        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = DocumentSession(session_id=session_id)
                self._sessions[session_id] = session
                self._evict_locked(keep=session_id)
            else:
                self._sessions.move_to_end(session_id)
            return session

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def _evict_locked(self, keep: str) -> None:
        """상한 초과분 제거 (busy 세션과 방금 만든 세션은 건너뜀)."""
        while len(self._sessions) > self.max_sessions:
            for candidate_id, candidate in self._sessions.items():
                if not candidate.busy and candidate_id != keep:
                    del self._sessions[candidate_id]
                    logger.debug(f"Evicted idle session {candidate_id}")
                    break
            else:
                # 전부 busy면 더 이상 제거하지 않음
                return

    @contextmanager
    def generation_slot(self, session: DocumentSession) -> Generator[DocumentSession, None, None]:
        """
        세션 busy 플래그 획득/해제.

        Raises:
            SessionBusyError: 이미 생성 중인 세션
        """
        with self._lock:
            if session.busy:
                raise SessionBusyError(session.session_id)
            session.busy = True

        try:
            yield session
        finally:
            with self._lock:
                session.busy = False
