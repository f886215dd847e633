"""Fixed-window request throttling held in process memory.

Counters live in a plain dict owned by one ``ThrottlerService`` instance, so
limits are per process. A multi-instance deployment needs an implementation
backed by a shared store behind the same async interface.
"""
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from gatehouse.domain.auth.value_objects import ThrottleLimit
from gatehouse.domain.errors import InvalidThrottleIdentifierError, ThrottlingError

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    count: int
    expires_at_ms: int


def _now_ms() -> int:
    return int(time.time() * 1000)


class ThrottlerService:
    def __init__(
        self,
        default_limit: ThrottleLimit,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._default_limit = default_limit
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    @property
    def default_limit(self) -> ThrottleLimit:
        return self._default_limit

    async def is_allowed(self, identifier: str, limit: ThrottleLimit | None = None) -> bool:
        limit = self._resolve(identifier, limit)
        window = self._current_window(identifier)
        return window is None or window.count < limit.limit

    async def track_request(self, identifier: str, limit: ThrottleLimit | None = None) -> None:
        """Count one request, raising ``ThrottlingError`` once the window is full."""
        limit = self._resolve(identifier, limit)
        now = self._clock()
        window = self._current_window(identifier)

        if window is None:
            self._windows[identifier] = _Window(count=1, expires_at_ms=now + limit.ttl * 1000)
            return

        if window.count >= limit.limit:
            retry_after = max(1, math.ceil((window.expires_at_ms - now) / 1000))
            logger.warning("Throttled %s, retry after %ss", identifier, retry_after)
            raise ThrottlingError(retry_after)

        window.count += 1

    async def get_remaining_requests(self, identifier: str, limit: ThrottleLimit | None = None) -> int:
        limit = self._resolve(identifier, limit)
        window = self._current_window(identifier)
        if window is None:
            return limit.limit
        return max(0, limit.limit - window.count)

    async def get_reset_seconds(self, identifier: str) -> int:
        """Seconds until the identifier's window closes, 0 when none is open."""
        self._resolve(identifier, None)
        window = self._current_window(identifier)
        if window is None:
            return 0
        return max(0, math.ceil((window.expires_at_ms - self._clock()) / 1000))

    async def reset_throttling(self, identifier: str) -> None:
        if not identifier:
            raise InvalidThrottleIdentifierError()
        self._windows.pop(identifier, None)

    def _resolve(self, identifier: str, limit: ThrottleLimit | None) -> ThrottleLimit:
        if not identifier:
            raise InvalidThrottleIdentifierError()
        self._sweep()
        return limit or self._default_limit

    def _current_window(self, identifier: str) -> _Window | None:
        window = self._windows.get(identifier)
        if window is not None and self._clock() > window.expires_at_ms:
            del self._windows[identifier]
            return None
        return window

    def _sweep(self) -> None:
        now = self._clock()
        expired = [key for key, window in self._windows.items() if now > window.expires_at_ms]
        for key in expired:
            del self._windows[key]
