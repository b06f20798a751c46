"""Cache metrics for generated wrappers, with OpenTelemetry export."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Protocol

from opentelemetry import metrics as otel_metrics

logger = logging.getLogger(__name__)


class CacheMetrics(Protocol):
    """Protocol for metrics collectors.

    Keys are ``<Wrapper>.<method>`` names of memoized methods.
    """

    def record_hit(self, key: str) -> None:
        """Record a cache hit."""
        ...

    def record_miss(self, key: str) -> None:
        """Record a cache miss."""
        ...

    def record_write(self, key: str) -> None:
        """Record a value stored after a miss."""
        ...

    def record_error(self, key: str, error: BaseException) -> None:
        """Record a delegate failure on a miss."""
        ...


class NoOpMetrics:
    """Collector that does nothing (default)."""

    def record_hit(self, key: str) -> None:
        pass

    def record_miss(self, key: str) -> None:
        pass

    def record_write(self, key: str) -> None:
        pass

    def record_error(self, key: str, error: BaseException) -> None:
        pass


@dataclass
class KeyStats:
    """Statistics for one memoized method."""

    hits: int = 0
    misses: int = 0
    writes: int = 0
    errors: int = 0

    @property
    def total_operations(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        total = self.total_operations
        return self.hits / total if total > 0 else 0.0


class OpenTelemetryMetrics:
    """Collector exporting through OpenTelemetry.

    Exported instruments:
    - memoize.hits (counter)
    - memoize.misses (counter)
    - memoize.writes (counter)
    - memoize.errors (counter)

    Example:
        ```python
        from opentelemetry import metrics
        from opentelemetry.sdk.metrics import MeterProvider

        from memoize_codegen import OpenTelemetryMetrics, set_metrics

        metrics.set_meter_provider(MeterProvider())
        set_metrics(OpenTelemetryMetrics())
        ```
    """

    def __init__(self, meter_name: str = "memoize_codegen") -> None:
        """Initialize OpenTelemetry instruments.

        Args:
            meter_name: Meter grouping the instruments
        """
        meter = otel_metrics.get_meter(meter_name)

        self._hits_counter = meter.create_counter(
            "memoize.hits",
            description="Number of memoized calls answered from the cache",
            unit="1",
        )
        self._misses_counter = meter.create_counter(
            "memoize.misses",
            description="Number of memoized calls forwarded to the delegate",
            unit="1",
        )
        self._writes_counter = meter.create_counter(
            "memoize.writes",
            description="Number of results stored in a cache",
            unit="1",
        )
        self._errors_counter = meter.create_counter(
            "memoize.errors",
            description="Number of delegate failures on memoized calls",
            unit="1",
        )

    def record_hit(self, key: str) -> None:
        self._hits_counter.add(1, {"method": key})

    def record_miss(self, key: str) -> None:
        self._misses_counter.add(1, {"method": key})

    def record_write(self, key: str) -> None:
        self._writes_counter.add(1, {"method": key})

    def record_error(self, key: str, error: BaseException) -> None:
        self._errors_counter.add(1, {"method": key, "error_type": type(error).__name__})


class InMemoryMetrics:
    """In-memory collector with per-method statistics.

    Useful for development and tests. Thread-safe.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._overall = KeyStats()
        self._by_key: dict[str, KeyStats] = defaultdict(KeyStats)

    def record_hit(self, key: str) -> None:
        with self._lock:
            self._overall.hits += 1
            self._by_key[key].hits += 1

    def record_miss(self, key: str) -> None:
        with self._lock:
            self._overall.misses += 1
            self._by_key[key].misses += 1

    def record_write(self, key: str) -> None:
        with self._lock:
            self._overall.writes += 1
            self._by_key[key].writes += 1

    def record_error(self, key: str, error: BaseException) -> None:
        with self._lock:
            self._overall.errors += 1
            self._by_key[key].errors += 1

    def get_stats(self) -> KeyStats:
        """Return aggregate statistics."""
        with self._lock:
            return _copy(self._overall)

    def get_key_stats(self, key: str) -> KeyStats | None:
        """Return statistics of one method, None if never recorded."""
        with self._lock:
            if key not in self._by_key:
                return None
            return _copy(self._by_key[key])

    def get_all_key_stats(self) -> dict[str, KeyStats]:
        with self._lock:
            return {key: _copy(stats) for key, stats in self._by_key.items()}

    def reset(self) -> None:
        """Reset all statistics."""
        with self._lock:
            self._overall = KeyStats()
            self._by_key.clear()


def _copy(stats: KeyStats) -> KeyStats:
    return KeyStats(hits=stats.hits, misses=stats.misses, writes=stats.writes, errors=stats.errors)
