from __future__ import annotations

import time
from collections import Counter, deque
from dataclasses import asdict
from threading import Lock
from typing import Deque, Dict, List

from .models import FetchAttempt, FetchStats


class MetricsCollector:
    """Thread-safe collector for per-attempt fetch events.

    Every request the fetcher makes is counted here, so the final crawl
    summary can report how many attempts, retries and failures it took.
    Totals are running counters over the whole crawl; only the event log
    used by export_json() is bounded to the most recent maxlen attempts."""

    def __init__(self, maxlen: int = 100000) -> None:
        self._lock = Lock()
        self._events: Deque[tuple[float, FetchAttempt]] = deque(maxlen=maxlen)
        self._total = 0
        self._success = 0
        self._retries = 0
        self._latency_sum = 0
        self._status_counts: Counter = Counter()

    def record_attempt(self, attempt: FetchAttempt) -> None:
        """Record a fetch attempt with the current timestamp."""
        with self._lock:
            self._events.append((time.time(), attempt))
            self._total += 1
            self._latency_sum += attempt.latency_ms
            if attempt.success:
                self._success += 1
            if attempt.backoff_secs is not None:
                self._retries += 1
            if attempt.status_code is not None:
                self._status_counts[attempt.status_code] += 1

    def snapshot(self) -> FetchStats:
        """Return aggregated statistics over every recorded attempt."""
        with self._lock:
            total = self._total
            return FetchStats(
                total_attempts=total,
                success_count=self._success,
                failure_count=total - self._success,
                retry_count=self._retries,
                avg_latency_ms=(self._latency_sum / total) if total else 0.0,
                status_counts=dict(self._status_counts),
            )

    def export_json(self) -> List[Dict]:
        """Export the retained attempts as a list of dictionaries."""
        with self._lock:
            return [{"timestamp": ts, **asdict(e)} for ts, e in self._events]
