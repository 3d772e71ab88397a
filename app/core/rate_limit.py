"""Rate limiting dependencies for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Policies:
- ``search``: per authenticated user (``user:<id>``); skipped when
  APP_ENV=development.
- ``enrich``: per client address (``ip:<client>``); guards the paid LLM call.

Each policy owns its own limiter so budgets never interfere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.auth import AuthenticatedUser, require_user
from app.core.config import settings
from app.core.logging import fingerprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    name: str
    limit: int
    window_seconds: int


def search_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        name="search",
        limit=settings.app.search_rate_limit_requests,
        window_seconds=settings.app.search_rate_limit_window_seconds,
    )


def enrich_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        name="enrich",
        limit=settings.app.enrich_rate_limit_requests,
        window_seconds=settings.app.enrich_rate_limit_window_seconds,
    )


_limiters: dict[str, tuple[RateLimitPolicy, AbstractRateLimiter]] = {}


def get_rate_limiter(policy: RateLimitPolicy) -> AbstractRateLimiter:
    """Return the process-wide limiter for a policy.

    The instance is cached in-module to preserve state across requests.
    If the policy's budget changes (primarily in tests), it is rebuilt.
    """
    cached = _limiters.get(policy.name)
    if cached is None or cached[0] != policy:
        limiter = InMemoryFixedWindowRateLimiter(
            limit=policy.limit,
            window_seconds=policy.window_seconds,
        )
        _limiters[policy.name] = (policy, limiter)
        return limiter
    return cached[1]


def reset_rate_limiters() -> None:
    """Forget all limiter state."""
    _limiters.clear()


def client_identifier(request: Request) -> str:
    """Best-effort client address.

    First X-Forwarded-For entry, then X-Real-IP, then the socket peer,
    else ``unknown``.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def check_rate_limit(policy: RateLimitPolicy, key: str) -> None:
    """Consume one unit for ``key`` under ``policy``.

    Raises:
        HTTPException: 429 Too Many Requests when the budget is exhausted.
    """
    limiter = get_rate_limiter(policy)
    key_hash = fingerprint(key)
    key_type = key.split(":", 1)[0]

    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "policy": policy.name,
                "key_type": key_type,
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "policy": policy.name,
            "key_type": key_type,
            "key_hash": key_hash,
            "limit": result.limit,
            "window_s": policy.window_seconds,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    if settings.app.rate_limit_include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(result.reset_at)

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Try again later.",
        headers=headers or None,
    )


async def enforce_search_rate_limit(
    user: Annotated[AuthenticatedUser, Depends(require_user)],
) -> None:
    """FastAPI dependency limiting searches per user."""
    if not settings.app.rate_limit_enabled or settings.is_development:
        return
    check_rate_limit(search_policy(), f"user:{user.id}")


async def enforce_enrich_rate_limit(request: Request) -> None:
    """FastAPI dependency limiting enrichment calls per client address."""
    if not settings.app.rate_limit_enabled:
        return
    check_rate_limit(enrich_policy(), f"ip:{client_identifier(request)}")
