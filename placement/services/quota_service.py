"""Process-wide budget of AI calls.

Two fixed windows are tracked with ``limits``: a minute window and a day
window. Each window opens at the first call after the previous one expired and
resets in full when it expires. Consumed calls are never refunded, even when
the AI call fails.
"""
import logging
import math
import threading
import time
from functools import lru_cache
from typing import Optional

from limits import RateLimitItemPerDay, RateLimitItemPerMinute
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from placement.core.config import get_settings
from placement.core.errors import RateLimited
from placement.schemas.AnalysisSchemas import QuotaDecision, QuotaInfo

logger = logging.getLogger(__name__)

MINUTE_SECONDS = 60
QUOTA_KEY = "gemini"


class QuotaTracker:
    def __init__(self, per_minute: Optional[int] = None, per_day: Optional[int] = None):
        settings = get_settings()
        self.per_minute = per_minute if per_minute is not None else settings.GEMINI_RATE_LIMIT_PER_MINUTE
        self.per_day = per_day if per_day is not None else settings.GEMINI_RATE_LIMIT_PER_DAY
        self._minute = RateLimitItemPerMinute(self.per_minute)
        self._day = RateLimitItemPerDay(self.per_day)
        self._limiter = FixedWindowRateLimiter(MemoryStorage())
        # Guards reading and hitting both windows as one step.
        self._lock = threading.Lock()

    @staticmethod
    def _seconds_until(reset_time: float, now: float, window: int) -> int:
        # A window that has not opened yet resets a full window after the next call.
        if reset_time <= now:
            return window
        return math.ceil(reset_time - now)

    def _stats(self):
        now = time.time()
        minute = self._limiter.get_window_stats(self._minute, QUOTA_KEY)
        day = self._limiter.get_window_stats(self._day, QUOTA_KEY)
        info = QuotaInfo(
            minuteRemaining=max(0, minute.remaining),
            dayRemaining=max(0, day.remaining),
            resetInSeconds=self._seconds_until(minute.reset_time, now, MINUTE_SECONDS),
        )
        day_reset = self._seconds_until(day.reset_time, now, self._day.get_expiry())
        return info, day_reset

    def check_and_consume(self) -> QuotaDecision:
        """Atomically check both budgets and consume one call when allowed."""
        with self._lock:
            info, day_reset = self._stats()

            if info.dayRemaining <= 0:
                retry_after = max(1, day_reset)
                logger.warning("Daily AI quota exhausted; retry in %ss", retry_after)
                return QuotaDecision(allowed=False, retryAfter=retry_after, **info.model_dump())

            if info.minuteRemaining <= 0:
                retry_after = max(1, info.resetInSeconds)
                logger.warning("Per-minute AI quota exhausted; retry in %ss", retry_after)
                return QuotaDecision(allowed=False, retryAfter=retry_after, **info.model_dump())

            self._limiter.hit(self._minute, QUOTA_KEY)
            self._limiter.hit(self._day, QUOTA_KEY)
            info, _ = self._stats()
            return QuotaDecision(allowed=True, **info.model_dump())

    def get_quota_info(self) -> QuotaInfo:
        with self._lock:
            info, _ = self._stats()
            return info

    def ensure_available(self) -> QuotaInfo:
        """Pre-flight check: raise RateLimited when no call is left in the current windows."""
        with self._lock:
            info, day_reset = self._stats()
        if info.dayRemaining <= 0:
            raise RateLimited(
                "Daily AI quota exhausted. Please try again tomorrow.",
                retry_after=max(1, day_reset),
                quota=info.model_dump(),
            )
        if info.minuteRemaining <= 0:
            raise RateLimited(
                f"Rate limit reached. Please wait {info.resetInSeconds} seconds.",
                retry_after=max(1, info.resetInSeconds),
                quota=info.model_dump(),
            )
        return info


@lru_cache()
def get_quota_tracker() -> QuotaTracker:
    return QuotaTracker()
