from __future__ import annotations

from typing import Iterable, Tuple

DEFAULT_BACKOFF_SECONDS: Tuple[float, ...] = (10.0, 15.0, 20.0, 25.0, 30.0)


class BackoffSchedule:
    """Fixed, escalating list of retry delays.

    The schedule length is also the maximum number of attempts a fetch may
    make. Delays are used in list order; there is no exponential growth
    and no jitter."""

    def __init__(self, delays: Iterable[float] = DEFAULT_BACKOFF_SECONDS) -> None:
        values = tuple(float(d) for d in delays)
        if not values:
            raise ValueError("backoff schedule must contain at least one delay")
        if any(d < 0 for d in values):
            raise ValueError(f"backoff delays must be non-negative: {values}")
        self._delays = values

    @classmethod
    def parse(cls, raw: str) -> "BackoffSchedule":
        """Build a schedule from a comma-separated string such as "10,15,20"."""
        parts = [p.strip() for p in raw.split(",") if p.strip()]
        try:
            return cls(float(p) for p in parts)
        except ValueError as exc:
            raise ValueError(f"invalid backoff schedule {raw!r}: {exc}") from exc

    @property
    def max_attempts(self) -> int:
        return len(self._delays)

    @property
    def delays(self) -> Tuple[float, ...]:
        return self._delays

    def get_sleep(self, attempt: int) -> float:
        """Delay to wait after the given failed attempt (1-based)."""
        if attempt < 1 or attempt > len(self._delays):
            raise IndexError(f"attempt {attempt} outside schedule of {len(self._delays)}")
        return self._delays[attempt - 1]

    def __len__(self) -> int:
        return len(self._delays)

    def __repr__(self) -> str:
        return f"BackoffSchedule({list(self._delays)!r})"
