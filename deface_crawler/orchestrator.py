from __future__ import annotations

import enum
import logging
import threading
import time
from concurrent.futures import Future, wait
from typing import List, Optional

from .aggregator import ResultAggregator
from .controller import ThreadPoolController
from .discovery import PaginationDiscoverer
from .exceptions import AcquisitionError, DiscoveryError, PageTaskError
from .fetcher import RetryingFetcher
from .metrics import MetricsCollector
from .models import CrawlSummary, PageResult, PageTask
from .parser import MirrorPageParser

logger = logging.getLogger(__name__)


class CrawlState(enum.Enum):
    IDLE = "idle"
    DISCOVERING = "discovering"
    SCHEDULING = "scheduling"
    DRAINING = "draining"
    DONE = "done"
    ABORTED = "aborted"


class CrawlOrchestrator:
    """Runs one crawl: discover the page count, then fetch every page.

    Pages are admitted through a ThreadPoolController, so at most
    max_concurrency of them are in flight. A page that still fails after
    the fetcher's retries is logged and contributes no records; the crawl
    carries on. Set fatal_page_errors to treat such a page as fatal
    instead. Fatal errors (including sink failures) set the shared
    cancellation event: no new page is admitted afterwards, and pages
    already running finish normally.

    An orchestrator performs a single crawl and cannot be reused.
    """

    def __init__(
        self,
        discoverer: PaginationDiscoverer,
        fetcher: RetryingFetcher,
        parser: MirrorPageParser,
        aggregator: ResultAggregator,
        page_url_template: str,
        max_concurrency: int,
        cancel_event: Optional[threading.Event] = None,
        fatal_page_errors: bool = False,
        metrics: Optional[MetricsCollector] = None,
        poll_interval: float = 0.5,
    ) -> None:
        if "{page}" not in page_url_template:
            raise ValueError(f"page_url_template must contain '{{page}}': {page_url_template!r}")
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._discoverer = discoverer
        self._fetcher = fetcher
        self._parser = parser
        self._aggregator = aggregator
        self._template = page_url_template
        self._max_concurrency = max_concurrency
        self._cancel = cancel_event or fetcher.cancel_event
        self._fatal_page_errors = fatal_page_errors
        self._metrics = metrics
        self._poll_interval = poll_interval

        self._state = CrawlState.IDLE
        self._lock = threading.Lock()
        self._total_pages = 0
        self._scheduled = 0
        self._succeeded = 0
        self._failed = 0
        self._abandoned = 0
        self._fatal: Optional[BaseException] = None
        self._peak = 0
        self._results: List[PageResult] = []

    @property
    def state(self) -> CrawlState:
        return self._state

    @property
    def peak_concurrency(self) -> int:
        return self._peak

    @property
    def page_results(self) -> List[PageResult]:
        """Results of the pages that ran to completion, in page order."""
        with self._lock:
            return sorted(self._results, key=lambda r: r.page)

    def page_url(self, page: int) -> str:
        return self._template.format(page=page)

    def run(self) -> CrawlSummary:
        """Discover the page count and crawl every page."""
        self._require_idle()
        self._state = CrawlState.DISCOVERING
        try:
            total = self._discoverer.discover_total_pages()
        except DiscoveryError as exc:
            logger.error("discovery failed, nothing to crawl: %s", exc)
            self._cancel.set()
            self._state = CrawlState.ABORTED
            return self._summary(error=str(exc))
        return self.crawl_pages(total)

    def crawl_pages(self, total_pages: int) -> CrawlSummary:
        """Crawl pages 1..total_pages, whose count is already known."""
        if self._state is CrawlState.IDLE:
            self._state = CrawlState.DISCOVERING
        elif self._state is not CrawlState.DISCOVERING:
            raise RuntimeError(f"crawl already {self._state.value}")
        if total_pages < 0:
            raise ValueError(f"total_pages must be >= 0, got {total_pages}")

        self._total_pages = total_pages
        self._state = CrawlState.SCHEDULING
        logger.info("crawling %d pages with concurrency %d", total_pages, self._max_concurrency)

        controller = ThreadPoolController(self._max_concurrency, self._cancel, self._poll_interval)
        futures: List[Future] = []
        try:
            for page in range(1, total_pages + 1):
                task = PageTask(page=page, url=self.page_url(page))
                try:
                    future = controller.submit(self._run_page, task)
                except AcquisitionError as exc:
                    skipped = total_pages - page + 1
                    logger.warning("%s; abandoning %d remaining pages", exc, skipped)
                    with self._lock:
                        self._abandoned += skipped
                    break
                with self._lock:
                    self._scheduled += 1
                futures.append(future)

            self._state = CrawlState.DRAINING
            wait(futures)
        finally:
            controller.shutdown(wait=True)
            self._peak = controller.peak

        for future in futures:
            self._collect(future)

        if self._fatal is not None:
            self._state = CrawlState.ABORTED
            logger.error("crawl aborted: %s", self._fatal)
            return self._summary(error=str(self._fatal))
        self._state = CrawlState.DONE
        return self._summary()

    def _collect(self, future: Future) -> None:
        """Tally one finished page task into the crawl counters."""
        if future.exception() is not None:
            with self._lock:
                self._failed += 1
            return
        result: PageResult = future.result()
        with self._lock:
            self._results.append(result)
            if result.success:
                self._succeeded += 1
            else:
                self._failed += 1
        logger.info(
            "page=%d success=%s records=%d latency_ms=%d error=%s",
            result.page, result.success, result.record_count, result.latency_ms, result.error_type,
        )

    def _run_page(self, task: PageTask) -> PageResult:
        # Runs before the controller releases the task's token, so a fatal
        # error is visible to the very next admission attempt.
        try:
            return self._crawl_page(task)
        except Exception as exc:  # noqa: BLE001
            self._record_fatal(exc)
            raise

    def _crawl_page(self, task: PageTask) -> PageResult:
        start = time.monotonic()
        try:
            document = self._fetcher.fetch(task.url)
            records = self._parser.parse(document)
        except Exception as exc:  # noqa: BLE001
            error = PageTaskError(task.page, task.url, str(exc))
            if self._fatal_page_errors:
                raise error from exc
            logger.warning("%s; continuing without its records", error)
            return PageResult(
                page=task.page,
                url=task.url,
                success=False,
                record_count=0,
                latency_ms=self._elapsed_ms(start),
                error_type=getattr(exc, "error_type", type(exc).__name__),
            )

        total = self._aggregator.record(records)
        logger.debug("page %d: %d records (running total %d)", task.page, len(records), total)
        return PageResult(
            page=task.page,
            url=task.url,
            success=True,
            record_count=len(records),
            latency_ms=self._elapsed_ms(start),
            error_type=None,
        )

    def _record_fatal(self, exc: BaseException) -> None:
        with self._lock:
            first = self._fatal is None
            if first:
                self._fatal = exc
        if first:
            logger.error("fatal page error, cancelling crawl: %s", exc)
        self._cancel.set()

    def _require_idle(self) -> None:
        if self._state is not CrawlState.IDLE:
            raise RuntimeError(f"crawl already {self._state.value}")

    def _summary(self, error: Optional[str] = None) -> CrawlSummary:
        with self._lock:
            return CrawlSummary(
                state=self._state.value,
                total_pages=self._total_pages,
                pages_scheduled=self._scheduled,
                pages_succeeded=self._succeeded,
                pages_failed=self._failed,
                pages_abandoned=self._abandoned,
                total_records=self._aggregator.total_records,
                error=error,
                fetch_stats=self._metrics.snapshot() if self._metrics else None,
            )

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
