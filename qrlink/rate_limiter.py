# -*- coding: utf-8 -*-
"""
Fixed-window rate limiter.

Process-local counters keyed by identifier. This is a single-instance stand-in
for a shared counter store: with several workers each one counts separately.

Expired windows are dropped by check() itself once per sweep interval, so
memory stays bounded under any WSGI server. The optional background thread
(start()/stop()) also prunes while no requests arrive.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from . import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float  # epoch seconds


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:

    def __init__(self, clock: Callable[[], float] = time.time,
                 sweep_interval: float = config.RATE_LIMIT_SWEEP_SECONDS):
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._windows: Dict[str, _Window] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def check(self, identifier: str, limit: int,
              window_seconds: float = config.RATE_LIMIT_WINDOW_SECONDS) -> RateLimitResult:
        """Count one request for ``identifier`` and report whether it is allowed."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._drop_expired(now)
            window = self._windows.get(identifier)
            if window is None or window.reset_at < now:
                window = _Window(count=0, reset_at=now + window_seconds)
                self._windows[identifier] = window
            window.count += 1
            count, reset_at = window.count, window.reset_at

        return RateLimitResult(
            success=count <= limit,
            remaining=max(0, limit - count),
            reset_at=reset_at,
        )

    def check_bucket(self, bucket: str, identifier: str) -> RateLimitResult:
        return self.check(f"{bucket}:{identifier}", config.RATE_LIMITS[bucket])

    def check_qr_create(self, identifier: str) -> RateLimitResult:
        return self.check_bucket('qr-create', identifier)

    def check_export(self, identifier: str) -> RateLimitResult:
        return self.check_bucket('export', identifier)

    def check_api(self, identifier: str) -> RateLimitResult:
        return self.check_bucket('api', identifier)

    def check_redirect(self, identifier: str) -> RateLimitResult:
        return self.check_bucket('redirect', identifier)

    def check_url_validate(self, identifier: str) -> RateLimitResult:
        return self.check_bucket('url-validate', identifier)

    def sweep(self) -> int:
        """Drop expired windows; returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._drop_expired(now)

    def _drop_expired(self, now: float) -> int:
        expired = [key for key, window in self._windows.items() if window.reset_at < now]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        return len(expired)

    def __len__(self):
        with self._lock:
            return len(self._windows)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name='rate-limit-sweep', daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self._sweep_interval):
            removed = self.sweep()
            if removed:
                logger.debug(f"Rate limiter swept {removed} expired windows")


def rate_limit_headers(result: RateLimitResult, now: Optional[float] = None) -> Dict[str, str]:
    now = time.time() if now is None else now
    headers = {
        'X-RateLimit-Remaining': str(result.remaining),
        'X-RateLimit-Reset': str(math.ceil(result.reset_at)),
    }
    if not result.success:
        headers['Retry-After'] = str(max(0, math.ceil(result.reset_at - now)))
    return headers
