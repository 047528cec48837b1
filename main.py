from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from deface_crawler.backoff import BackoffSchedule
from deface_crawler.config import (
    DEFAULT_OUTPUT_PATH,
    DEFAULT_PAGE_URL_TEMPLATE,
    DEFAULT_SEED_URL,
    CrawlerConfig,
    default_concurrency,
)
from deface_crawler.runner import format_summary, run_crawl
from deface_crawler.transport import TRANSPORTS

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl a paginated defacement mirror listing into a CSV file")
    parser.add_argument("--seed-url", default=DEFAULT_SEED_URL, help="Listing page that carries the pagination bar")
    parser.add_argument(
        "--page-url-template",
        default=DEFAULT_PAGE_URL_TEMPLATE,
        help="URL of page N, with {page} as placeholder",
    )
    parser.add_argument("--output", default=DEFAULT_OUTPUT_PATH, help="Output file (.csv, or .jsonl)")

    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=default_concurrency(),
        help="Max pages fetched at the same time (default: CPU count)",
    )
    parser.add_argument(
        "--backoff",
        type=BackoffSchedule.parse,
        default=BackoffSchedule(),
        help="Comma-separated retry delays in seconds; its length is the max attempts per request",
    )
    parser.add_argument("--timeout", type=float, default=30.0, help="Per-request timeout in seconds")
    parser.add_argument("--transport", choices=TRANSPORTS, default="requests", help="HTTP client to use")
    parser.add_argument("--impersonate", default="chrome120", help="Browser fingerprint for the curl_cffi transport")
    parser.add_argument(
        "--strict-pages",
        action="store_true",
        help="Abort the crawl when any page fails after all retries",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    config = CrawlerConfig(
        seed_url=args.seed_url,
        page_url_template=args.page_url_template,
        max_concurrency=args.max_concurrency,
        backoff_schedule=args.backoff,
        output_path=args.output,
        timeout=args.timeout,
        transport=args.transport,
        impersonate=args.impersonate,
        fatal_page_errors=args.strict_pages,
    )
    try:
        config.validate()
    except ValueError as exc:
        print(f"invalid configuration: {exc}", file=sys.stderr)
        return 2

    summary = run_crawl(config)
    print()
    for line in format_summary(summary):
        print(line)
    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
