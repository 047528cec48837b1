"""Paginated defacement-mirror crawler.

Discovers how many listing pages a mirror collection has, fetches them
concurrently under a fixed cap with retry/backoff, and writes every
extracted row into one CSV file.

Key modules:
    backoff      -- BackoffSchedule, the fixed list of retry delays
    transport    -- requests / curl_cffi HTTP transports
    fetcher      -- RetryingFetcher, one logical request with retries
    parser       -- MirrorPageParser for listing pages
    discovery    -- PaginationDiscoverer for the total page count
    controller   -- ThreadPoolController, semaphore-bounded admission
    orchestrator -- CrawlOrchestrator, the crawl state machine
    aggregator   -- ResultAggregator, lock-guarded merge into the sink
    storage      -- StorageBase, CsvStorage and JsonlStorage
    metrics      -- MetricsCollector for per-attempt fetch statistics
    models       -- Record, PageTask, PageResult, CrawlSummary dataclasses
    config       -- CrawlerConfig defaults and validation
    runner       -- run_crawl, which wires everything for the CLI
"""
