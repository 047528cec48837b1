from __future__ import annotations

import logging

from .exceptions import CrawlCancelled, DiscoveryError, TransientFetchError
from .fetcher import RetryingFetcher
from .parser import MirrorPageParser, page_number_from_link

logger = logging.getLogger(__name__)


class PaginationDiscoverer:
    """Finds how many listing pages the seed collection has."""

    def __init__(self, fetcher: RetryingFetcher, parser: MirrorPageParser, seed_url: str) -> None:
        self._fetcher = fetcher
        self._parser = parser
        self._seed_url = seed_url

    def discover_total_pages(self) -> int:
        try:
            document = self._fetcher.fetch(self._seed_url)
        except (TransientFetchError, CrawlCancelled) as exc:
            raise DiscoveryError(f"could not fetch seed {self._seed_url}: {exc}") from exc

        href = self._parser.last_page_link(document)
        if not href:
            raise DiscoveryError(f"no last-page link found on {self._seed_url}")
        try:
            total = page_number_from_link(href)
        except ValueError as exc:
            raise DiscoveryError(f"malformed last-page link {href!r}") from exc
        if total < 1:
            raise DiscoveryError(f"last-page link {href!r} reports {total} pages")

        logger.info("discovered %d pages from %s", total, self._seed_url)
        return total
