import logging
import threading
import time
from typing import Callable

from blog_comments.config.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    IP별 마지막 허용 시각을 기억하는 in-memory rate limiter.

    프로세스 단위로만 동작하며 재시작하면 초기화됩니다.
    여러 인스턴스 사이에서는 공유되지 않습니다.
    """

    def __init__(
        self, window_seconds: float, clock: Callable[[], float] = time.monotonic
    ):
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_seen: dict[str, float] = {}
        self._lock = threading.Lock()

    def check(self, ip: str, now: float | None = None) -> bool:
        """
        `ip`가 제한 중이면 True를 반환합니다.
        제한되지 않았다면 `now`를 기록하고 False를 반환합니다.
        만료된 항목 정리, 조회, 기록은 하나의 lock 안에서 수행됩니다.
        """
        if now is None:
            now = self._clock()

        with self._lock:
            expired = [
                key
                for key, seen in self._last_seen.items()
                if now - seen > self.window_seconds
            ]
            for key in expired:
                del self._last_seen[key]

            last = self._last_seen.get(ip)
            if last is not None and now - last < self.window_seconds:
                return True

            self._last_seen[ip] = now
            return False

    def reset(self) -> None:
        with self._lock:
            self._last_seen.clear()
        logger.info("rate limit 상태 초기화")

    def __len__(self) -> int:
        return len(self._last_seen)


_rate_limiter = RateLimiter(settings.comments.rate_limit_window)


def get_rate_limiter() -> RateLimiter:
    """
    `limiter: RateLimiter = Depends(get_rate_limiter)`로 사용
    """
    return _rate_limiter
