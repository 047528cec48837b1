from __future__ import annotations

import logging
import threading
from typing import List, Optional

from .aggregator import ResultAggregator
from .config import CrawlerConfig
from .discovery import PaginationDiscoverer
from .exceptions import AggregationError
from .fetcher import RetryingFetcher
from .metrics import MetricsCollector
from .models import CrawlSummary
from .orchestrator import CrawlOrchestrator, CrawlState
from .parser import MirrorPageParser
from .storage import open_storage
from .transport import HttpTransport, create_transport

logger = logging.getLogger(__name__)


def run_crawl(
    config: CrawlerConfig,
    transport: Optional[HttpTransport] = None,
    cancel_event: Optional[threading.Event] = None,
) -> CrawlSummary:
    """Wire the components together and run one crawl.

    The output file is closed on every exit path, so an aborted crawl
    still leaves whatever rows were written. A transport passed in by
    the caller is not closed here.
    """
    config.validate()
    try:
        sink = open_storage(config.output_path)
    except OSError as exc:
        error = AggregationError(f"cannot open output {config.output_path}: {exc}")
        logger.error("%s", error)
        return CrawlSummary(
            state=CrawlState.ABORTED.value,
            total_pages=0,
            pages_scheduled=0,
            pages_succeeded=0,
            pages_failed=0,
            pages_abandoned=0,
            total_records=0,
            error=str(error),
        )

    owns_transport = transport is None
    if transport is None:
        transport = create_transport(
            config.transport,
            timeout=config.timeout,
            impersonate=config.impersonate,
            pool_size=config.max_concurrency,
        )

    cancel_event = cancel_event or threading.Event()
    metrics = MetricsCollector()
    fetcher = RetryingFetcher(transport, config.backoff_schedule, metrics=metrics, cancel_event=cancel_event)
    parser = MirrorPageParser()
    discoverer = PaginationDiscoverer(fetcher, parser, config.seed_url)

    try:
        with sink:
            orchestrator = CrawlOrchestrator(
                discoverer=discoverer,
                fetcher=fetcher,
                parser=parser,
                aggregator=ResultAggregator(sink),
                page_url_template=config.page_url_template,
                max_concurrency=config.max_concurrency,
                cancel_event=cancel_event,
                fatal_page_errors=config.fatal_page_errors,
                metrics=metrics,
            )
            summary = orchestrator.run()
    finally:
        if owns_transport:
            transport.close()

    logger.info("wrote %d records to %s", summary.total_records, config.output_path)
    return summary


def format_summary(summary: CrawlSummary) -> List[str]:
    """Human-readable lines for the end-of-crawl report."""
    lines = []
    if summary.ok:
        lines.append("crawler done!")
    else:
        lines.append(f"crawler aborted: {summary.error}")
    lines.append(
        f"pages: total={summary.total_pages} scheduled={summary.pages_scheduled} "
        f"ok={summary.pages_succeeded} failed={summary.pages_failed} abandoned={summary.pages_abandoned}"
    )
    lines.append(f"total results: {summary.total_records}")
    stats = summary.fetch_stats
    if stats is not None:
        lines.append(
            f"requests: attempts={stats.total_attempts} ok={stats.success_count} "
            f"failed={stats.failure_count} retries={stats.retry_count} "
            f"avg_latency_ms={stats.avg_latency_ms:.0f}"
        )
    return lines
