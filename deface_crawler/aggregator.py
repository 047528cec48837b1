from __future__ import annotations

import threading
from typing import Sequence

from .exceptions import AggregationError
from .models import Record
from .storage import StorageBase


class ResultAggregator:
    """Merges page results from many worker threads into one sink.

    A single lock covers both the sink write and the running total, so two
    pages finishing together never interleave rows, and the total only
    counts records that actually reached the sink."""

    def __init__(self, sink: StorageBase) -> None:
        self._sink = sink
        self._lock = threading.Lock()
        self._total = 0
        self._pages = 0

    def record(self, records: Sequence[Record]) -> int:
        """Append one page's records and return the new total."""
        with self._lock:
            try:
                self._sink.write_records(records)
            except Exception as exc:  # noqa: BLE001
                raise AggregationError(f"sink write failed for {len(records)} records: {exc}") from exc
            self._total += len(records)
            self._pages += 1
            return self._total

    @property
    def total_records(self) -> int:
        with self._lock:
            return self._total

    @property
    def pages_recorded(self) -> int:
        with self._lock:
            return self._pages
