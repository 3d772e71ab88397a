"""Rate limiter contract used by the HTTP layer.

Routes only see :class:`AbstractRateLimiter`; the in-memory fixed window
implementation is per process, so a shared store would slot in here when the
API runs with several workers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one ``consume`` call.

    ``reset_at`` is a UNIX timestamp; ``retry_after_seconds`` is only set
    when the call was refused.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    @abstractmethod
    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Spend ``cost`` units of the budget of ``key`` (``user:<id>``, ``ip:<addr>``)."""
        raise NotImplementedError
