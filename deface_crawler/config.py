from __future__ import annotations

import os
from dataclasses import dataclass, field

from .backoff import DEFAULT_BACKOFF_SECONDS, BackoffSchedule
from .transport import TRANSPORTS

DEFAULT_SEED_URL = "https://mirror-h.org/search/country/VN/pages"
DEFAULT_PAGE_URL_TEMPLATE = "https://mirror-h.org/search/country/VN/pages/{page}"
DEFAULT_OUTPUT_PATH = "info_web_deface.csv"


def default_concurrency() -> int:
    return os.cpu_count() or 4


@dataclass
class CrawlerConfig:
    seed_url: str = DEFAULT_SEED_URL
    page_url_template: str = DEFAULT_PAGE_URL_TEMPLATE
    max_concurrency: int = field(default_factory=default_concurrency)
    backoff_schedule: BackoffSchedule = field(default_factory=lambda: BackoffSchedule(DEFAULT_BACKOFF_SECONDS))
    output_path: str = DEFAULT_OUTPUT_PATH
    timeout: float = 30.0
    transport: str = "requests"
    impersonate: str = "chrome120"
    fatal_page_errors: bool = False

    def validate(self) -> None:
        """Raise ValueError describing the first invalid setting."""
        if not self.seed_url:
            raise ValueError("seed_url is required")
        if "{page}" not in self.page_url_template:
            raise ValueError(f"page_url_template must contain '{{page}}': {self.page_url_template!r}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.transport not in TRANSPORTS:
            raise ValueError(f"Unknown transport: {self.transport}")
        if not self.output_path:
            raise ValueError("output_path is required")
