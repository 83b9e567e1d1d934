from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock
from time import perf_counter, time


class MetricsStore:
    """Process-wide counters plus summed timings for the thumbnail pipeline."""

    def __init__(self, prefix: str = "thumb") -> None:
        self._prefix = prefix
        self._lock = Lock()
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, list[float]] = defaultdict(lambda: [0, 0.0])
        self._updated_at = int(time())

    def incr(self, key: str, value: int = 1) -> None:
        with self._lock:
            self._counters[key] += value
            self._updated_at = int(time())

    def observe(self, key: str, seconds: float) -> None:
        with self._lock:
            timing = self._timings[key]
            timing[0] += 1
            timing[1] += seconds
            self._updated_at = int(time())

    @contextmanager
    def timed(self, key: str) -> Iterator[None]:
        started = perf_counter()
        try:
            yield
        finally:
            self.observe(key, perf_counter() - started)

    def get(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    def snapshot(self) -> dict[str, int | float]:
        with self._lock:
            merged: dict[str, int | float] = dict(self._counters)
            for key, (count, total) in self._timings.items():
                merged[f"{key}_seconds_count"] = count
                merged[f"{key}_seconds_sum"] = round(total, 6)
            merged["metrics_last_update_ts"] = self._updated_at
            return merged

    def to_prometheus_text(self) -> str:
        lines = [
            f"{self._prefix}_{key.lower().replace('-', '_')} {value}"
            for key, value in sorted(self.snapshot().items())
        ]
        return "\n".join(lines) + "\n"


metrics = MetricsStore()
