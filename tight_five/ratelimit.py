"""Fixed-window request limiter, keyed by caller.

Lives on ``app.state`` and is handed to routes through a dependency; there
is no module-level state. The clock is injectable so tests can step time.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class _Window:
    started: float
    count: int


class RateLimiter:
    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def check(self, key: str) -> bool:
        """Count one request for key. False once the window's allowance is used up."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now - window.started >= self.window_seconds:
            self._prune(now)
            self._windows[key] = _Window(started=now, count=1)
            return True
        if window.count >= self.max_requests:
            return False
        window.count += 1
        return True

    def _prune(self, now: float) -> None:
        """Drop every expired window."""
        expired = [k for k, w in self._windows.items() if now - w.started >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)
