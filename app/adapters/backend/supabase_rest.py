"""Supabase REST client adapter.

Talks to the three hosted services over plain HTTPS with ``httpx``:
PostgREST (``/rest/v1``) for tables, Storage (``/storage/v1``) for signed
PDF URLs and GoTrue (``/auth/v1``) for access token validation.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence
from urllib.parse import quote

import httpx

from app.adapters.backend.base import AbstractBackendClient, Row
from app.adapters.backend.filters import Filter
from app.core.errors import BackendAppError

logger = logging.getLogger(__name__)


def parse_content_range_total(header: str | None) -> int:
    """Extract the total from a ``Content-Range`` header.

    Examples:
        >>> parse_content_range_total("0-24/3573")
        3573
        >>> parse_content_range_total("*/0")
        0
    """
    if not header or "/" not in header:
        raise ValueError(f"Content-Range without total: {header!r}")
    total = header.rsplit("/", 1)[1].strip()
    if total == "*":
        raise ValueError("Backend did not return an exact count")
    return int(total)


class SupabaseRestClient(AbstractBackendClient):
    """Async client for a Supabase project.

    Uses one pooled ``httpx.AsyncClient``; every request carries the
    configured API key in both ``apikey`` and ``Authorization`` headers.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the REST client.

        Args:
            url: Project URL (``https://<ref>.supabase.co``).
            api_key: Service-role or anon key.
            timeout_seconds: Per-request timeout.
            transport: Optional transport override (used by tests).
        """
        self._base_url = url.rstrip("/")
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Sequence[tuple[str, str]] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                params=list(params or []),
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.error(
                "backend.unreachable",
                extra={"method": method, "path": path, "error_type": type(exc).__name__},
            )
            raise BackendAppError(
                code="backend_unreachable",
                message="The data backend could not be reached.",
                details={"context": {"path": path, "error": str(exc)}},
            ) from exc

        if response.status_code >= 400:
            logger.warning(
                "backend.request_failed",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                },
            )
            raise BackendAppError(
                code="backend_request_failed",
                message="The data backend rejected the request.",
                details={
                    "http_status": response.status_code,
                    "context": {"path": path, "body": _error_body(response)},
                },
            )
        return response

    @staticmethod
    def _table_params(
        filters: Sequence[Filter],
        or_conditions: str | None,
    ) -> list[tuple[str, str]]:
        params = list(filters)
        if or_conditions:
            params.append(("or", or_conditions))
        return params

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        or_conditions: str | None = None,
        order: str | None = None,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        params = [("select", columns), *self._table_params(filters, or_conditions)]
        if order:
            params.append(("order", order))
        if offset is not None:
            params.append(("offset", str(offset)))
        if limit is not None:
            params.append(("limit", str(limit)))

        response = await self._request("GET", f"/rest/v1/{table}", params=params)
        rows = response.json() if response.content else []
        return list(rows or [])

    async def count(
        self,
        table: str,
        *,
        filters: Sequence[Filter] = (),
        or_conditions: str | None = None,
    ) -> int:
        params = [("select", "*"), *self._table_params(filters, or_conditions)]
        response = await self._request(
            "HEAD",
            f"/rest/v1/{table}",
            params=params,
            headers={"Prefer": "count=exact"},
        )
        try:
            return parse_content_range_total(response.headers.get("content-range"))
        except ValueError as exc:
            raise BackendAppError(
                code="backend_count_unavailable",
                message="The data backend did not return a row count.",
                details={"table": table},
            ) from exc

    async def select_one(
        self,
        table: str,
        *,
        filters: Sequence[Filter],
        columns: str = "*",
    ) -> Row | None:
        rows = await self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def update(
        self,
        table: str,
        values: Row,
        *,
        filters: Sequence[Filter],
    ) -> list[Row]:
        if not filters:
            raise ValueError("update requires at least one filter")
        response = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=list(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return list(response.json() or []) if response.content else []

    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        response = await self._request(
            "POST",
            f"/storage/v1/object/sign/{quote(bucket)}/{quote(path)}",
            json={"expiresIn": expires_in},
        )
        payload = response.json()
        signed = payload.get("signedURL") or payload.get("signedUrl")
        if not signed:
            raise BackendAppError(
                code="signed_url_missing",
                message="Storage did not return a signed URL.",
                details={"bucket": bucket},
            )
        if signed.startswith("http"):
            return signed
        return f"{self._base_url}/storage/v1{signed}"

    async def get_user(self, access_token: str) -> Row | None:
        try:
            response = await self._request(
                "GET",
                "/auth/v1/user",
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except BackendAppError as exc:
            status = (exc.details or {}).get("http_status")
            if status in (401, 403):
                return None
            raise
        return response.json()

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_body(response: httpx.Response) -> str:
    """Short, log-safe excerpt of a backend error body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)[:200]
    return str(payload)[:200]
