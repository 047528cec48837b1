"""
HTML extraction for mirror listing pages.

Each listing page holds a table whose body rows carry five cells:
attacker, country, defaced URL, IP address and date. The pagination bar
at the bottom links to the last page, which is how the crawl learns how
many pages exist.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from .models import Record

logger = logging.getLogger(__name__)

LAST_PAGE_SELECTOR = "ul.pagination li:last-child a"
ROW_SELECTOR = "table tbody tr"


class MirrorPageParser:
    def __init__(self, features: str = "html.parser") -> None:
        self._features = features

    def parse(self, document: str) -> List[Record]:
        """Extract one Record per table row; short rows are skipped."""
        soup = BeautifulSoup(document, self._features)
        records: List[Record] = []
        for row in soup.select(ROW_SELECTOR):
            cells = [td.get_text(strip=True) for td in row.find_all("td")]
            if len(cells) < 5:
                logger.debug("skipping row with %d cells", len(cells))
                continue
            records.append(
                Record(
                    attacker=cells[0],
                    country=_clean_country(cells[1]),
                    web_url=cells[2],
                    ip=cells[3],
                    date=cells[4],
                )
            )
        return records

    def last_page_link(self, document: str) -> Optional[str]:
        """Return the href of the last pagination link, if the page has one."""
        soup = BeautifulSoup(document, self._features)
        link = soup.select_one(LAST_PAGE_SELECTOR)
        if link is None:
            return None
        href = link.get("href")
        return href.strip() if href else None


def page_number_from_link(href: str) -> int:
    """Parse the trailing path segment of a pagination link as an int.

    Works for absolute (``https://host/.../pages/7``) and relative
    (``/search/country/VN/pages/7``) links."""
    segments = [s for s in urlparse(href).path.split("/") if s]
    if not segments:
        raise ValueError(f"pagination link has no path: {href!r}")
    return int(segments[-1])


def _clean_country(raw: str) -> str:
    return raw.strip().replace("(", "").replace(")", "").strip()
