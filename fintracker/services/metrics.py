"""
Fetch performance metrics.

Counts API calls, cache hits and misses and errors, and keeps bounded
windows of the most recent latency samples and error records. Recording is
side-effect only: no method here raises into the caller.
"""

import logging
import time
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

LATENCY_PENALTY_THRESHOLD_MS = 1000.0
SEVERE_LATENCY_PENALTY_THRESHOLD_MS = 2000.0
CACHE_BONUS_THRESHOLD = 70.0
CACHE_EXTRA_BONUS_THRESHOLD = 90.0


class MetricsRecorder:
    """Counters and moving windows describing fetch behaviour."""

    def __init__(
        self,
        latency_window: int = 100,
        error_window: int = 10,
        slow_call_threshold_ms: float = 2000.0,
        clock: Callable[[], float] = time.time,
    ):
        self.latency_window = latency_window
        self.error_window = error_window
        self.slow_call_threshold_ms = slow_call_threshold_ms
        self._clock = clock
        self._init_state()
        logger.debug("MetricsRecorder initialized")

    def _init_state(self) -> None:
        self.api_calls = 0
        self.cache_hits = 0
        self.cache_misses = 0
        self.errors = 0
        self.synthetic_short_circuits = 0
        self.latencies: deque[float] = deque(maxlen=self.latency_window)
        self.recent_errors: deque[dict[str, Any]] = deque(maxlen=self.error_window)
        self.start_time = self._clock()

    def record_call(self, endpoint: str = "unknown", duration_ms: float = 0.0) -> None:
        """Count one fetch cycle against ``endpoint``."""
        try:
            self.api_calls += 1
            if duration_ms > 0:
                self.record_latency(duration_ms, endpoint=endpoint)
        except Exception as e:
            logger.debug(f"record_call ignored bad input: {e}")

    def record_cache_hit(self, key: str = "") -> None:
        self.cache_hits += 1
        logger.debug(f"Cache hit: {key}")

    def record_cache_miss(self, key: str = "") -> None:
        self.cache_misses += 1
        logger.debug(f"Cache miss: {key}")

    def record_synthetic_short_circuit(self, reason: str = "") -> None:
        """Count a fetch answered with synthetic data without contacting the source."""
        self.synthetic_short_circuits += 1
        logger.debug(f"Synthetic short-circuit: {reason}")

    def record_error(self, error: BaseException | str = "", context: str = "unknown") -> None:
        """Count an error and keep it in the recent-errors window."""
        try:
            self.errors += 1
            error_info = {
                "timestamp": datetime.now(UTC).isoformat(),
                "error": str(error),
                "error_type": type(error).__name__
                if isinstance(error, BaseException)
                else "str",
                "context": context,
            }
            self.recent_errors.append(error_info)
            logger.warning(f"Error recorded in {context}: {error_info['error']}")
        except Exception as e:
            logger.debug(f"record_error ignored bad input: {e}")

    def record_latency(self, duration_ms: float, endpoint: str = "") -> None:
        """Add a latency sample; non-positive or non-numeric samples are dropped."""
        if isinstance(duration_ms, bool) or not isinstance(duration_ms, int | float):
            return
        if duration_ms <= 0:
            return

        self.latencies.append(float(duration_ms))
        if duration_ms > self.slow_call_threshold_ms:
            label = endpoint or "request"
            logger.warning(f"Slow API call detected: {label} took {duration_ms:.0f}ms")

    def _average_latency(self) -> float:
        if not self.latencies:
            return 0.0
        return sum(self.latencies) / len(self.latencies)

    def _cache_hit_rate(self) -> float:
        total = self.cache_hits + self.cache_misses
        return (self.cache_hits / total) * 100 if total > 0 else 0.0

    def _error_rate(self) -> float:
        return (self.errors / self.api_calls) * 100 if self.api_calls > 0 else 0.0

    def calculate_performance_score(self) -> int:
        """Overall score in [0, 100] from error rate, latency and cache hit rate."""
        score = 100.0
        score -= self._error_rate() * 10

        avg_latency = self._average_latency()
        if avg_latency > LATENCY_PENALTY_THRESHOLD_MS:
            score -= 20
        if avg_latency > SEVERE_LATENCY_PENALTY_THRESHOLD_MS:
            score -= 10

        hit_rate = self._cache_hit_rate()
        if hit_rate > CACHE_BONUS_THRESHOLD:
            score += 10
        if hit_rate > CACHE_EXTRA_BONUS_THRESHOLD:
            score += 10

        return int(max(0, min(100, round(score))))

    def get_stats(self) -> dict[str, Any]:
        latencies = list(self.latencies)
        return {
            "api_calls": self.api_calls,
            "average_latency_ms": round(self._average_latency(), 2),
            "min_latency_ms": min(latencies) if latencies else 0.0,
            "max_latency_ms": max(latencies) if latencies else 0.0,
            "latency_samples": len(latencies),
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "cache_hit_rate": round(self._cache_hit_rate(), 2),
            "errors": self.errors,
            "error_rate": round(self._error_rate(), 2),
            "synthetic_short_circuits": self.synthetic_short_circuits,
            "recent_errors": list(self.recent_errors),
            "uptime_seconds": round(self._clock() - self.start_time),
            "performance_score": self.calculate_performance_score(),
        }

    def generate_report(self) -> str:
        stats = self.get_stats()
        return "\n".join(
            [
                "Performance Report",
                "==================",
                f"Uptime: {stats['uptime_seconds']}s",
                f"API Calls: {stats['api_calls']}",
                f"Cache Hit Rate: {stats['cache_hit_rate']}%",
                f"Error Rate: {stats['error_rate']:.2f}%",
                f"Avg Load Time: {stats['average_latency_ms']}ms",
                f"Synthetic Short-Circuits: {stats['synthetic_short_circuits']}",
                f"Performance Score: {stats['performance_score']}/100",
            ]
        )

    def reset(self) -> None:
        self._init_state()
        logger.info("Performance metrics reset")
