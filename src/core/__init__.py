"""
Core layer: 세션 상태 관리.

역할:
- 세션 저장소 (메모리 전용, 상한 + LRU 제거)
- 세션당 동시 생성 1건 (busy 슬롯)
"""

from .session_store import DEFAULT_MAX_SESSIONS, SessionBusyError, SessionStore

__all__ = [
    "DEFAULT_MAX_SESSIONS",
    "SessionBusyError",
    "SessionStore",
]
