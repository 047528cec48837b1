from __future__ import annotations

import csv
import json
from abc import ABC, abstractmethod
from typing import IO, Iterable, Optional

from .models import RECORD_HEADER, Record


class StorageBase(ABC):
    """Abstract base class for all record sinks.

    Subclasses implement _write() and _close(); close() runs at most once,
    so a sink used as a context manager is flushed exactly once even if
    the crawl aborts. Sinks are not thread-safe on their own; the
    ResultAggregator serializes writers.
    """

    def __init__(self) -> None:
        self._closed = False

    def write_records(self, records: Iterable[Record]) -> None:
        """Persist a batch of records."""
        if self._closed:
            raise ValueError("write to closed storage")
        self._write(records)

    def close(self) -> None:
        """Flush pending writes and release resources."""
        if self._closed:
            return
        self._closed = True
        self._close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "StorageBase":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @abstractmethod
    def _write(self, records: Iterable[Record]) -> None:
        ...

    @abstractmethod
    def _close(self) -> None:
        ...


class CsvStorage(StorageBase):
    """Stores records as CSV, header row first."""

    def __init__(self, path: str) -> None:
        super().__init__()
        self._path = path
        self._file: IO[str] = open(path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        self._writer.writerow(RECORD_HEADER)

    def _write(self, records: Iterable[Record]) -> None:
        self._writer.writerows(r.as_row() for r in records)

    def _close(self) -> None:
        self._file.flush()
        self._file.close()


class JsonlStorage(StorageBase):
    """Stores records as JSON Lines (.jsonl), one object per record."""

    def __init__(self, path: str) -> None:
        super().__init__()
        self._path = path
        self._file: Optional[IO[str]] = open(path, "w", encoding="utf-8")

    def _write(self, records: Iterable[Record]) -> None:
        for r in records:
            row = dict(zip(RECORD_HEADER, r.as_row()))
            self._file.write(json.dumps(row, ensure_ascii=False) + "\n")

    def _close(self) -> None:
        self._file.flush()
        self._file.close()


def open_storage(path: str) -> StorageBase:
    """Pick a sink from the output file extension; CSV unless .jsonl."""
    if path.lower().endswith(".jsonl"):
        return JsonlStorage(path)
    return CsvStorage(path)
