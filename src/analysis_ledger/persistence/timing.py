"""Latency instrumentation for repository operations.

Every public repository call can be timed into a ``LatencyRecorder``;
``LatencySummary`` then reports the P95 that the persistence contract is
judged on (single-entity CRUD < 100 ms, bulk operations < 500 ms).

Percentiles use the nearest-rank definition: the P95 of 150 samples is
the 143rd smallest sample.
"""

from __future__ import annotations

import functools
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, TypeVar

import numpy as np

F = TypeVar("F", bound=Callable)


def p95_ms(samples_ms: Sequence[float]) -> float:
    """Nearest-rank 95th percentile of millisecond samples (0.0 if empty)."""
    return percentile_ms(samples_ms, 95.0)


def percentile_ms(samples_ms: Sequence[float], q: float) -> float:
    if len(samples_ms) == 0:
        return 0.0
    return float(np.percentile(np.asarray(samples_ms, dtype=float), q, method="inverted_cdf"))


@dataclass(frozen=True)
class LatencySummary:
    """Aggregate timings for one operation name."""

    operation: str
    count: int
    p50_ms: float
    p95_ms: float
    max_ms: float
    mean_ms: float

    def within(self, budget_ms: float) -> bool:
        return self.p95_ms < budget_ms

    @classmethod
    def from_samples(cls, operation: str, samples_ms: Sequence[float]) -> "LatencySummary":
        if len(samples_ms) == 0:
            return cls(operation, 0, 0.0, 0.0, 0.0, 0.0)
        arr = np.asarray(samples_ms, dtype=float)
        return cls(
            operation=operation,
            count=int(arr.size),
            p50_ms=percentile_ms(arr, 50.0),
            p95_ms=percentile_ms(arr, 95.0),
            max_ms=float(arr.max()),
            mean_ms=float(arr.mean()),
        )


class LatencyRecorder:
    """Thread-safe collector of per-operation durations (milliseconds)."""

    def __init__(self) -> None:
        self._samples: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def record(self, operation: str, seconds: float) -> None:
        with self._lock:
            self._samples[operation].append(seconds * 1000.0)

    @contextmanager
    def measure(self, operation: str) -> Iterator[None]:
        """Time the enclosed block under *operation*."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(operation, time.perf_counter() - start)

    def samples(self, operation: str) -> list[float]:
        with self._lock:
            return list(self._samples.get(operation, ()))

    @property
    def operations(self) -> list[str]:
        with self._lock:
            return sorted(self._samples)

    def summary(self, operation: str) -> LatencySummary:
        return LatencySummary.from_samples(operation, self.samples(operation))

    def summaries(self) -> dict[str, LatencySummary]:
        return {op: self.summary(op) for op in self.operations}

    def reset(self) -> None:
        with self._lock:
            self._samples.clear()


def timed(operation: str) -> Callable[[F], F]:
    """Record a repository method's duration as ``<metric_name>.<operation>``.

    The decorated method's owner must expose ``recorder`` (may be None) and
    ``metric_name``.
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(self, *args, **kwargs):
            recorder: Optional[LatencyRecorder] = self.recorder
            if recorder is None:
                return fn(self, *args, **kwargs)
            start = time.perf_counter()
            try:
                return fn(self, *args, **kwargs)
            finally:
                recorder.record(f"{self.metric_name}.{operation}", time.perf_counter() - start)

        return wrapper  # type: ignore[return-value]

    return decorator
