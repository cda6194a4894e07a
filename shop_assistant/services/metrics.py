from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Dict, List


@dataclass
class MetricsSnapshot:
    turns_total: int
    turns_failed: int
    llm_calls_total: int
    llm_calls_per_model: Dict[str, int]
    avg_tokens_per_call: float
    rate_limited_attempts: int
    cascade_exhaustions: int
    snapshot_fallbacks: int
    searches_executed: int
    searches_degraded: int
    avg_response_latency_ms: float = 0.0


class MetricsService:
    def __init__(self) -> None:
        self._lock = Lock()
        self._turns_total = 0
        self._turns_failed = 0
        self._llm_calls_total = 0
        self._llm_calls_per_model: Dict[str, int] = {}
        self._llm_tokens_total = 0
        self._rate_limited_attempts = 0
        self._cascade_exhaustions = 0
        self._snapshot_fallbacks = 0
        self._searches_executed = 0
        self._searches_degraded = 0
        self._response_latencies: List[float] = []
        self._max_latency_samples = 1000

    def record_turn(self, *, failed: bool = False) -> None:
        with self._lock:
            self._turns_total += 1
            if failed:
                self._turns_failed += 1

    def record_llm_call(self, *, model_id: str, token_usage: Dict[str, int] | None) -> None:
        with self._lock:
            self._llm_calls_total += 1
            self._llm_calls_per_model[model_id] = self._llm_calls_per_model.get(model_id, 0) + 1
            tokens = 0
            if token_usage:
                tokens = int(token_usage.get("total_tokens", 0) or 0)
            self._llm_tokens_total += tokens

    def record_rate_limited(self) -> None:
        with self._lock:
            self._rate_limited_attempts += 1

    def record_cascade_exhausted(self) -> None:
        with self._lock:
            self._cascade_exhaustions += 1

    def record_snapshot_fallback(self) -> None:
        """Record when the static prompt replaced the live catalog prompt."""
        with self._lock:
            self._snapshot_fallbacks += 1

    def record_search(self, *, executed: bool) -> None:
        with self._lock:
            if executed:
                self._searches_executed += 1
            else:
                self._searches_degraded += 1

    def record_response_latency(self, latency_ms: float) -> None:
        """Record response latency in milliseconds."""
        with self._lock:
            self._response_latencies.append(latency_ms)
            # Keep only recent samples
            if len(self._response_latencies) > self._max_latency_samples:
                self._response_latencies = self._response_latencies[-self._max_latency_samples:]

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            avg_tokens = (self._llm_tokens_total / self._llm_calls_total) if self._llm_calls_total else 0.0
            avg_latency = (
                sum(self._response_latencies) / len(self._response_latencies)
                if self._response_latencies else 0.0
            )
            return MetricsSnapshot(
                turns_total=self._turns_total,
                turns_failed=self._turns_failed,
                llm_calls_total=self._llm_calls_total,
                llm_calls_per_model=dict(self._llm_calls_per_model),
                avg_tokens_per_call=avg_tokens,
                rate_limited_attempts=self._rate_limited_attempts,
                cascade_exhaustions=self._cascade_exhaustions,
                snapshot_fallbacks=self._snapshot_fallbacks,
                searches_executed=self._searches_executed,
                searches_degraded=self._searches_degraded,
                avg_response_latency_ms=avg_latency,
            )


_metrics_service = MetricsService()


def get_metrics_service() -> MetricsService:
    return _metrics_service
