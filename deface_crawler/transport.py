from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from curl_cffi import requests as curl_requests
from requests.adapters import HTTPAdapter

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml",
}


class HttpTransport(ABC):
    """One GET per call; no retries, no status interpretation.

    Returned responses expose ``status_code`` and ``text``."""

    @abstractmethod
    def get(self, url: str) -> Any:
        """Perform a single GET request and return the raw response."""

    def close(self) -> None:
        """Release pooled connections; transports without any keep this no-op."""


class RequestsTransport(HttpTransport):
    """Plain ``requests`` session shared by all worker threads."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        pool_size: int = 10,
    ) -> None:
        self._owns_session = session is None
        self._session = session or requests.Session()
        if self._owns_session:
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        self._timeout = timeout
        self._headers = dict(DEFAULT_HEADERS if headers is None else headers)

    def get(self, url: str) -> Any:
        return self._session.get(url, headers=self._headers, timeout=self._timeout)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()


class CurlCffiTransport(HttpTransport):
    """Browser-impersonating transport for hosts that reject plain clients.

    A new curl_cffi session is created per request; sessions are not
    shared between threads."""

    def __init__(
        self,
        impersonate: str = "chrome120",
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self._impersonate = impersonate
        self._timeout = timeout
        self._headers = headers

    def get(self, url: str) -> Any:
        session = curl_requests.Session()
        try:
            return session.request(
                method="GET",
                url=url,
                headers=self._headers,
                impersonate=self._impersonate,
                timeout=self._timeout,
            )
        finally:
            session.close()


TRANSPORTS = ("requests", "curl_cffi")


def create_transport(
    name: str = "requests",
    timeout: float = 30.0,
    impersonate: str = "chrome120",
    pool_size: int = 10,
) -> HttpTransport:
    """Build the transport named on the command line."""
    if name == "requests":
        return RequestsTransport(timeout=timeout, pool_size=pool_size)
    if name == "curl_cffi":
        return CurlCffiTransport(impersonate=impersonate, timeout=timeout)
    raise ValueError(f"Unknown transport: {name}")
