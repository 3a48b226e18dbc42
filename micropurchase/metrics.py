"""
Lightweight runtime metrics for health/observability.

Uses in-process counters so it works without extra dependencies.
"""

from __future__ import annotations

import threading
import time
from collections import Counter, deque
from typing import Deque, Dict

from micropurchase.domain.enums import RejectionReason


class _RuntimeMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bids_accepted = 0
        self._rejections: Counter = Counter()
        self._auth_failures = 0
        self._upstream_auth_failures = 0
        self._error_timestamps: Deque[float] = deque()

    def record_bid_accepted(self) -> None:
        with self._lock:
            self._bids_accepted += 1

    def record_bid_rejected(self, reason: RejectionReason) -> None:
        with self._lock:
            self._rejections[reason.value] += 1

    def record_auth_failure(self) -> None:
        with self._lock:
            self._auth_failures += 1

    def record_upstream_auth_failure(self) -> None:
        with self._lock:
            self._upstream_auth_failures += 1

    def record_error(self, ts: float | None = None) -> None:
        now = ts if ts is not None else time.time()
        with self._lock:
            self._error_timestamps.append(now)
            self._prune_locked(now)

    def snapshot(self) -> Dict[str, object]:
        now = time.time()
        with self._lock:
            self._prune_locked(now)
            return {
                "bids_accepted": self._bids_accepted,
                "bid_rejections": {r.value: self._rejections.get(r.value, 0) for r in RejectionReason},
                "auth_failures": self._auth_failures,
                "upstream_auth_failures": self._upstream_auth_failures,
                "errors_last_hour": len(self._error_timestamps),
            }

    def reset_for_tests(self) -> None:
        with self._lock:
            self._bids_accepted = 0
            self._rejections.clear()
            self._auth_failures = 0
            self._upstream_auth_failures = 0
            self._error_timestamps.clear()

    def _prune_locked(self, now: float) -> None:
        cutoff = now - 3600.0
        while self._error_timestamps and self._error_timestamps[0] < cutoff:
            self._error_timestamps.popleft()


_METRICS = _RuntimeMetrics()


def record_bid_accepted() -> None:
    _METRICS.record_bid_accepted()


def record_bid_rejected(reason: RejectionReason) -> None:
    _METRICS.record_bid_rejected(reason)


def record_auth_failure() -> None:
    _METRICS.record_auth_failure()


def record_upstream_auth_failure() -> None:
    _METRICS.record_upstream_auth_failure()


def record_error(ts: float | None = None) -> None:
    _METRICS.record_error(ts)


def metrics_snapshot() -> Dict[str, object]:
    return _METRICS.snapshot()


def reset_metrics_for_tests() -> None:
    _METRICS.reset_for_tests()
