"""Metrics service for tracking recommendation performance.

Singleton service to track recommendation calls and latency metrics.
"""

import threading
from typing import Dict


class MetricsService:
    """Singleton service for tracking API metrics.

    Thread-safe counters and latency tracking for recommendation calls,
    broken down by query mode ("product" or "cart").
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(MetricsService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize metrics counters."""
        if self._initialized:
            return

        self._lock = threading.Lock()
        self._reset_counters()
        self._initialized = True

    def _reset_counters(self) -> None:
        self._request_count = 0
        self._requests_by_mode: Dict[str, int] = {}
        self._empty_results = 0
        self._total_latency_ms = 0.0
        self._min_latency_ms = float('inf')
        self._max_latency_ms = 0.0

    def record_recommendation(
        self, mode: str, latency_ms: float, num_results: int
    ) -> None:
        """Record a recommendation call.

        Args:
            mode: Query mode, "product" or "cart"
            latency_ms: Latency in milliseconds
            num_results: Number of products returned
        """
        with self._lock:
            self._request_count += 1
            self._requests_by_mode[mode] = self._requests_by_mode.get(mode, 0) + 1
            if num_results == 0:
                self._empty_results += 1

            self._total_latency_ms += latency_ms
            if latency_ms < self._min_latency_ms:
                self._min_latency_ms = latency_ms
            if latency_ms > self._max_latency_ms:
                self._max_latency_ms = latency_ms

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with metrics including:
            - request_count: Total number of recommendation calls
            - requests_by_mode: Calls per query mode
            - empty_results: Calls that returned no products
            - average_latency_ms: Average latency in milliseconds
            - min_latency_ms: Minimum latency observed
            - max_latency_ms: Maximum latency observed
        """
        with self._lock:
            avg_latency = (
                self._total_latency_ms / self._request_count
                if self._request_count > 0
                else 0.0
            )

            return {
                "request_count": self._request_count,
                "requests_by_mode": dict(self._requests_by_mode),
                "empty_results": self._empty_results,
                "average_latency_ms": round(avg_latency, 2),
                "min_latency_ms": round(self._min_latency_ms, 2) if self._min_latency_ms != float('inf') else 0.0,
                "max_latency_ms": round(self._max_latency_ms, 2),
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._reset_counters()


# Global singleton instance
metrics_service = MetricsService()
