from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

RECORD_HEADER: Tuple[str, ...] = ("Attacker", "Country", "Web Url", "Ip", "Date")


@dataclass(frozen=True)
class Record:
    attacker: str
    country: str
    web_url: str
    ip: str
    date: str

    def as_row(self) -> Tuple[str, str, str, str, str]:
        """Return the field values in RECORD_HEADER order."""
        return (self.attacker, self.country, self.web_url, self.ip, self.date)


@dataclass(frozen=True)
class PageTask:
    page: int
    url: str


@dataclass(frozen=True)
class PageResult:
    page: int
    url: str
    success: bool
    record_count: int
    latency_ms: int
    error_type: Optional[str]


@dataclass(frozen=True)
class FetchAttempt:
    url: str
    attempt: int
    success: bool
    status_code: Optional[int]
    latency_ms: int
    error_type: Optional[str]
    backoff_secs: Optional[float] = None


@dataclass(frozen=True)
class FetchStats:
    total_attempts: int
    success_count: int
    failure_count: int
    retry_count: int
    avg_latency_ms: float
    status_counts: Dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CrawlSummary:
    state: str
    total_pages: int
    pages_scheduled: int
    pages_succeeded: int
    pages_failed: int
    pages_abandoned: int
    total_records: int
    error: Optional[str] = None
    fetch_stats: Optional[FetchStats] = None

    @property
    def ok(self) -> bool:
        return self.state == "done"
