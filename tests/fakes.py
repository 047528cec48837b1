"""In-memory stand-ins for the network and the sink, shared by the tests."""

import threading
import time
from typing import Dict, Iterable, List, Optional, Sequence

from deface_crawler.models import Record
from deface_crawler.storage import StorageBase
from deface_crawler.transport import HttpTransport

BASE = "https://mirror.test/search/country/VN/pages"
TEMPLATE = BASE + "/{page}"
ROW = ("A", "VN", "http://x", "1.2.3.4", "2024-01-01")


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text


class FakeTransport(HttpTransport):
    """Serves canned responses keyed by URL.

    A list value is consumed one item per request, repeating its last item
    once exhausted. Exceptions in the list are raised. Unknown URLs get a
    404. Tracks the peak number of requests in flight at once."""

    def __init__(self, routes: Optional[Dict[str, object]] = None, delay: float = 0.0) -> None:
        self._routes: Dict[str, List[object]] = {}
        for url, value in (routes or {}).items():
            self._routes[url] = list(value) if isinstance(value, list) else [value]
        self._delay = delay
        self._lock = threading.Lock()
        self.calls: List[str] = []
        self.in_flight = 0
        self.peak = 0

    def get(self, url: str):
        with self._lock:
            self.calls.append(url)
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            if self._delay:
                time.sleep(self._delay)
            item = self._next(url)
            if isinstance(item, BaseException):
                raise item
            return item
        finally:
            with self._lock:
                self.in_flight -= 1

    def _next(self, url: str):
        with self._lock:
            queue = self._routes.get(url)
            if not queue:
                return FakeResponse(404, "not found")
            return queue.pop(0) if len(queue) > 1 else queue[0]

    def count(self, url: str) -> int:
        with self._lock:
            return self.calls.count(url)


class ListStorage(StorageBase):
    """Keeps written records in memory."""

    def __init__(self) -> None:
        super().__init__()
        self.records: List[Record] = []

    def _write(self, records: Iterable[Record]) -> None:
        self.records.extend(records)

    def _close(self) -> None:
        pass


class BrokenStorage(StorageBase):
    def _write(self, records: Iterable[Record]) -> None:
        raise OSError("disk full")

    def _close(self) -> None:
        pass


class RecordingEvent(threading.Event):
    """Event whose wait() returns immediately and remembers each timeout."""

    def __init__(self) -> None:
        super().__init__()
        self.waits: List[float] = []

    def wait(self, timeout=None):
        self.waits.append(timeout)
        return self.is_set()


def listing_page(rows: Sequence[Sequence[str]] = (), last_page_href: Optional[str] = None) -> str:
    """Build a listing page in the mirror's markup."""
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    pagination = ""
    if last_page_href is not None:
        pagination = (
            '<ul class="pagination">'
            f'<li><a href="{BASE}/1">1</a></li>'
            f'<li><a href="{BASE}/2">2</a></li>'
            f'<li><a href="{last_page_href}">Last</a></li>'
            "</ul>"
        )
    return (
        "<html><body>"
        "<table><thead><tr><th>Attacker</th></tr></thead>"
        f"<tbody>{body}</tbody></table>"
        f"{pagination}</body></html>"
    )


def site(total_pages: int, rows_per_page: int = 1, seed_url: str = BASE) -> Dict[str, object]:
    """Routes for a seed page plus total_pages listing pages."""
    routes: Dict[str, object] = {
        seed_url: FakeResponse(200, listing_page([ROW], last_page_href=f"{BASE}/{total_pages}")),
    }
    for page in range(1, total_pages + 1):
        routes[TEMPLATE.format(page=page)] = FakeResponse(200, listing_page([ROW] * rows_per_page))
    return routes
