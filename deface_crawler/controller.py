from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from .exceptions import AcquisitionError
from .models import PageTask

T = TypeVar("T")


class ThreadPoolController:
    """Admits page tasks into a thread pool under a fixed concurrency cap.

    A bounded semaphore holds one token per allowed in-flight task.
    submit() blocks until a token frees up, and gives up with
    AcquisitionError as soon as the shared cancellation event is set.
    The token is released when the task finishes, whatever the outcome.
    """

    def __init__(
        self,
        max_concurrency: int,
        cancel_event: Optional[threading.Event] = None,
        poll_interval: float = 0.5,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._limit = max_concurrency
        self._executor = ThreadPoolExecutor(max_workers=max_concurrency, thread_name_prefix="page")
        self._tokens = threading.BoundedSemaphore(max_concurrency)
        self._cancel = cancel_event or threading.Event()
        self._poll_interval = poll_interval

        self._lock = threading.Lock()
        self._active = 0
        self._peak = 0

    def acquire(self, page: int) -> None:
        """Take one token for page, or raise AcquisitionError once cancelled."""
        while not self._cancel.is_set():
            if self._tokens.acquire(timeout=self._poll_interval):
                if self._cancel.is_set():
                    self._tokens.release()
                    break
                return
        raise AcquisitionError(page)

    def submit(self, fn: Callable[[PageTask], T], task: PageTask) -> "Future[T]":
        """Submit fn(task), blocking while the pool is at its concurrency limit."""
        self.acquire(task.page)
        with self._lock:
            self._active += 1
            self._peak = max(self._peak, self._active)
        try:
            return self._executor.submit(self._wrap_task, fn, task)
        except BaseException:
            self._release()
            raise

    def _wrap_task(self, fn: Callable[[PageTask], T], task: PageTask) -> T:
        try:
            return fn(task)
        finally:
            self._release()

    def _release(self) -> None:
        with self._lock:
            self._active = max(0, self._active - 1)
        self._tokens.release()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=False)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def active(self) -> int:
        with self._lock:
            return self._active

    @property
    def peak(self) -> int:
        """Highest number of tasks that were ever admitted at the same time."""
        with self._lock:
            return self._peak
