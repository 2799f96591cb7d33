# supplywatch/api/ratelimit.py
"""
Einfacher Fixed-Window-Limiter pro Client-IP für alle Endpunkte
(Default: 100 Requests je 15 Minuten).
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse

# ab dieser Größe werden abgelaufene Fenster aufgeräumt
SWEEP_THRESHOLD = 1024


def client_ip(request: Request, trust_proxy: bool = False) -> str:
    # X-Forwarded-For nur hinter einem eigenen Proxy: dessen Eintrag steht rechts
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            hop = forwarded.split(",")[-1].strip()
            if hop:
                return hop
    if request.client and request.client.host:
        return str(request.client.host)
    return "unknown"


class FixedWindowRateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
        sweep_threshold: int = SWEEP_THRESHOLD,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.sweep_threshold = sweep_threshold
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[float, int]] = {}

    def _sweep(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    def hit(self, key: str) -> float | None:
        """
        Zählt einen Request. None = erlaubt, sonst Sekunden bis zum nächsten Fenster.
        """
        if self.max_requests <= 0:
            return None
        now = self.clock()
        with self._lock:
            if len(self._windows) >= self.sweep_threshold:
                self._sweep(now)
            start, count = self._windows.get(key, (now, 0))
            if now - start >= self.window_seconds:
                start, count = now, 0
            if count >= self.max_requests:
                return max(0.0, start + self.window_seconds - now)
            self._windows[key] = (start, count + 1)
        return None

    def __len__(self) -> int:
        return len(self._windows)


async def rate_limit_middleware(request: Request, call_next):
    limiter: FixedWindowRateLimiter = request.app.state.rate_limiter
    trust_proxy = request.app.state.settings.trust_proxy
    retry_after = limiter.hit(client_ip(request, trust_proxy=trust_proxy))
    if retry_after is not None:
        return JSONResponse(
            status_code=429,
            content={"message": "Too many requests, please try again later."},
            headers={"Retry-After": str(math.ceil(retry_after))},
        )
    return await call_next(request)
