"""
재시도 로직 유틸리티.

completion API 호출의 일시적 실패(레이트리밋, 연결 끊김, 5xx)에 대해
지수 백오프로 재시도합니다.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_exponential_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 2,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    지수 백오프를 사용한 재시도.

    Args:
        func: 인자 없는 비동기 함수 (호출마다 새 요청)
        max_retries: 최대 재시도 횟수 (0이면 1회만 시도)
        initial_delay: 초기 대기 시간(초)
        max_delay: 최대 대기 시간(초)
        exponential_base: 지수 백오프 기수
        exceptions: 재시도할 예외 타입들 (그 외 예외는 즉시 전파)
        sleep: 대기 함수 (테스트에서 교체)

    Returns:
        func의 반환값

    Raises:
        마지막 시도에서 발생한 예외
    """
    delay = initial_delay
    attempts = max(max_retries, 0) + 1

    for attempt in range(1, attempts + 1):
        try:
            result = await func()
        except exceptions as e:
            if attempt == attempts:
                logger.error(f"All {attempts} attempts failed. Last error: {e}")
                raise

            logger.warning(
                f"Attempt {attempt}/{attempts} failed: {e}. "
                f"Retrying in {delay:.1f}s..."
            )
            await sleep(delay)
            delay = min(delay * exponential_base, max_delay)
        else:
            if attempt > 1:
                logger.info(f"Retry succeeded on attempt {attempt}/{attempts}")
            return result

    # range가 비지 않으므로 도달하지 않음
    raise RuntimeError("Unexpected retry logic error")
