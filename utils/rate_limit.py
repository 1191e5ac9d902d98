# User value: This file softly caps bursts per client so one noisy device cannot starve estimates for others.
import threading
import time

import config

DEFAULT_MAX_TRACKED = 1024


class SoftRateLimiter:
    # User value: counts hits per client in a fixed window so limits reset predictably.
    def __init__(self, window_sec: float, max_hits: int, clock=time.monotonic, max_tracked: int = DEFAULT_MAX_TRACKED):
        self.window_sec = float(window_sec)
        self.max_hits = int(max_hits)
        self.max_tracked = int(max_tracked)
        self._clock = clock
        self._hits: dict[str, tuple[int, float]] = {}
        self._pruned_at: float | None = None
        self._lock = threading.Lock()

    def allow(self, client_key: str) -> bool:
        now = self._clock()
        with self._lock:
            if len(self._hits) >= self.max_tracked:
                self._prune(now)
            count, started = self._hits.get(client_key, (0, now))
            if now - started > self.window_sec:
                count, started = 0, now
            count += 1
            self._hits[client_key] = (count, started)
        return count <= self.max_hits

    # Caller holds _lock. Sweeps at most once per window.
    def _prune(self, now: float) -> None:
        if self._pruned_at is not None and now - self._pruned_at <= self.window_sec:
            return
        self._pruned_at = now
        expired = [key for key, (_, started) in self._hits.items() if now - started > self.window_sec]
        for key in expired:
            del self._hits[key]

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._hits)


upload_limiter = SoftRateLimiter(config.RATE_LIMIT_WINDOW_SEC, config.RATE_LIMIT_MAX)
