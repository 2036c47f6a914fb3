from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from threading import Lock


@dataclass
class RouteTiming:
    calls: int = 0
    elapsed_ms: float = 0.0
    failures: int = 0

    def as_dict(self) -> dict[str, float | int]:
        mean = self.elapsed_ms / self.calls if self.calls else 0.0
        return {
            "total_requests": self.calls,
            "total_duration_ms": round(self.elapsed_ms, 2),
            "avg_duration_ms": round(mean, 2),
            "error_count": self.failures,
        }


class ServiceMetrics:
    """Process-local counters exposed by /api/internal/metrics."""

    def __init__(self) -> None:
        self._routes: dict[str, RouteTiming] = {}
        self._feed_pushes: Counter[str] = Counter()
        self._transitions: Counter[str] = Counter()
        self._lock = Lock()

    def observe(self, endpoint: str, method: str, status_code: int, duration_ms: float) -> None:
        label = f"{method} {endpoint}"
        with self._lock:
            timing = self._routes.get(label)
            if timing is None:
                timing = self._routes[label] = RouteTiming()
            timing.calls += 1
            timing.elapsed_ms += duration_ms
            if status_code >= 400:
                timing.failures += 1

    def count_feed_push(self, feed: str) -> None:
        with self._lock:
            self._feed_pushes[feed] += 1

    def count_transition(self, from_status: str, to_status: str) -> None:
        with self._lock:
            self._transitions[f"{from_status}->{to_status}"] += 1

    def snapshot(self) -> dict[str, dict]:
        with self._lock:
            return {
                "requests": {label: timing.as_dict() for label, timing in self._routes.items()},
                "feed_pushes": dict(self._feed_pushes),
                "order_transitions": dict(self._transitions),
            }

    def reset(self) -> None:
        with self._lock:
            self._routes.clear()
            self._feed_pushes.clear()
            self._transitions.clear()


service_metrics = ServiceMetrics()
