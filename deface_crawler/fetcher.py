from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Any, Optional

from .backoff import BackoffSchedule
from .exceptions import CrawlCancelled, TransientFetchError
from .metrics import MetricsCollector
from .models import FetchAttempt
from .transport import HttpTransport

logger = logging.getLogger(__name__)

SUCCESS_STATUS = 200


class FetchState(enum.Enum):
    ATTEMPTING = "attempting"
    BACKING_OFF = "backing_off"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class RetryingFetcher:
    """Issues one logical GET with bounded retries.

    Each failed attempt moves to BACKING_OFF and waits the next delay from
    the schedule before trying again; after the schedule's last attempt
    fails the fetch is EXHAUSTED and the last error is raised. Only status
    200 counts as success.

    The backoff wait blocks on the shared cancellation event, so a crawl
    that is being torn down does not sit out a 30 second delay.
    """

    def __init__(
        self,
        transport: HttpTransport,
        schedule: Optional[BackoffSchedule] = None,
        metrics: Optional[MetricsCollector] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self._transport = transport
        self._schedule = schedule or BackoffSchedule()
        self._metrics = metrics
        self._cancel = cancel_event or threading.Event()

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel

    def fetch(self, url: str) -> str:
        """Return the document body for url, or raise the last TransientFetchError."""
        attempt = 0
        state = FetchState.ATTEMPTING
        last_error: Optional[TransientFetchError] = None

        while True:
            if state is FetchState.ATTEMPTING:
                attempt += 1
                start = time.monotonic()
                try:
                    response = self._transport.get(url)
                    last_error = self._check(url, response)
                except Exception as exc:  # noqa: BLE001
                    last_error = TransientFetchError(url, cause=exc)
                latency_ms = int((time.monotonic() - start) * 1000)

                if last_error is None:
                    self._observe(url, attempt, latency_ms, None, response.status_code, None)
                    return response.text

                remaining = attempt < self._schedule.max_attempts
                backoff = self._schedule.get_sleep(attempt) if remaining else None
                self._observe(url, attempt, latency_ms, last_error, last_error.status_code, backoff)
                state = FetchState.BACKING_OFF if remaining else FetchState.EXHAUSTED

            elif state is FetchState.BACKING_OFF:
                if self._cancel.wait(self._schedule.get_sleep(attempt)):
                    raise CrawlCancelled(f"cancelled while backing off from {url}") from last_error
                state = FetchState.ATTEMPTING

            else:
                raise last_error

    @staticmethod
    def _check(url: str, response: Any) -> Optional[TransientFetchError]:
        status = getattr(response, "status_code", None)
        if status != SUCCESS_STATUS:
            return TransientFetchError(url, status_code=status)
        return None

    def _observe(
        self,
        url: str,
        attempt: int,
        latency_ms: int,
        error: Optional[TransientFetchError],
        status_code: Optional[int],
        backoff: Optional[float],
    ) -> None:
        if error is None:
            logger.info("GET %s -> %s (attempt %d, %d ms)", url, status_code, attempt, latency_ms)
        elif backoff is not None:
            logger.warning(
                "GET %s failed (attempt %d/%d, %d ms): %s; retrying in %.1fs",
                url, attempt, self._schedule.max_attempts, latency_ms, error, backoff,
            )
        else:
            logger.warning(
                "GET %s failed (attempt %d/%d, %d ms): %s; giving up",
                url, attempt, self._schedule.max_attempts, latency_ms, error,
            )
        if self._metrics:
            self._metrics.record_attempt(
                FetchAttempt(
                    url=url,
                    attempt=attempt,
                    success=error is None,
                    status_code=status_code,
                    latency_ms=latency_ms,
                    error_type=None if error is None else error.error_type,
                    backoff_secs=backoff,
                )
            )
