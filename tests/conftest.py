"""Pytest configuration and fixtures shared across all test modules.

This file is loaded by pytest before any test module, so the environment
below is in place before ``app.core.config`` builds its settings.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-test-key")
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, Sequence  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.adapters.backend.base import AbstractBackendClient, Row  # noqa: E402
from app.adapters.backend.factory import get_backend_client  # noqa: E402
from app.adapters.backend.filters import Filter  # noqa: E402
from app.adapters.llm.base import AbstractLLMClient  # noqa: E402
from app.api.deps import get_enrichment_cache, get_llm_client  # noqa: E402
from app.core.errors import BackendAppError  # noqa: E402
from app.core.rate_limit import reset_rate_limiters  # noqa: E402

VALID_TOKEN = "valid-access-token"
TEST_USER = {"id": "user-1", "email": "staff@example.com"}


def _matches(row: Row, filters: Sequence[Filter]) -> bool:
    for column, expr in filters:
        op, _, value = expr.partition(".")
        actual = row.get(column)
        if op == "eq" and str(actual) != value:
            return False
        if op == "gte" and (actual is None or actual < float(value)):
            return False
        if op == "lte" and (actual is None or actual > float(value)):
            return False
        if op == "ilike":
            needle = value.strip("*").lower()
            if actual is None or needle not in str(actual).lower():
                return False
    return True


def _split_or_group(group: str) -> list[str]:
    """Split ``(a.ilike.*x*,b.ilike."*y,z*")`` into its conditions."""
    body = group[1:-1] if group.startswith("(") and group.endswith(")") else group
    items: list[str] = []
    current: list[str] = []
    quoted = escaped = False
    for ch in body:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\" and quoted:
            escaped = True
        elif ch == '"':
            quoted = not quoted
        elif ch == "," and not quoted:
            items.append("".join(current))
            current = []
        else:
            current.append(ch)
    items.append("".join(current))
    return items


def _unescape_like(pattern: str) -> str:
    return pattern.replace("\\%", "%").replace("\\_", "_").replace("\\\\", "\\")


def _matches_any(row: Row, group: str | None) -> bool:
    if not group:
        return True
    for condition in _split_or_group(group):
        column, _, expr = condition.partition(".")
        op, _, value = expr.partition(".")
        if op == "ilike":
            value = _unescape_like(value)
        if _matches(row, [(column, f"{op}.{value}")]):
            return True
    return False


class FakeBackend(AbstractBackendClient):
    """In-memory stand-in for the hosted backend.

    Supports eq/gte/lte/ilike filters, OR groups of those, ordering, offset
    and limit.
    """

    def __init__(
        self,
        tables: dict[str, list[Row]] | None = None,
        users: dict[str, Row] | None = None,
    ) -> None:
        self.tables: dict[str, list[Row]] = {k: [dict(r) for r in v] for k, v in (tables or {}).items()}
        self.users = users if users is not None else {VALID_TOKEN: TEST_USER}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_signing = False

    def _rows(self, table: str, filters: Sequence[Filter], or_conditions: str | None = None) -> list[Row]:
        return [
            row
            for row in self.tables.get(table, [])
            if _matches(row, filters) and _matches_any(row, or_conditions)
        ]

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
        self.calls.append(
            (
                "select",
                table,
                {
                    "columns": columns,
                    "filters": list(filters),
                    "or": or_conditions,
                    "order": order,
                    "offset": offset,
                    "limit": limit,
                },
            )
        )
        rows = self._rows(table, filters, or_conditions)
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=direction == "desc")
        start = offset or 0
        rows = rows[start:] if limit is None else rows[start : start + limit]
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{c: r.get(c) for c in wanted} for r in rows]
        return [dict(r) for r in rows]

    async def count(
        self,
        table: str,
        *,
        filters: Sequence[Filter] = (),
        or_conditions: str | None = None,
    ) -> int:
        self.calls.append(("count", table, {"filters": list(filters), "or": or_conditions}))
        return len(self._rows(table, filters, or_conditions))

    async def select_one(self, table: str, *, filters: Sequence[Filter], columns: str = "*") -> Row | None:
        rows = await self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def update(self, table: str, values: Row, *, filters: Sequence[Filter]) -> list[Row]:
        self.calls.append(("update", table, {"values": values, "filters": list(filters)}))
        updated = []
        for row in self._rows(table, filters):
            row.update(values)
            updated.append(dict(row))
        return updated

    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        self.calls.append(("sign", bucket, {"path": path, "expires_in": expires_in}))
        if self.fail_signing:
            raise BackendAppError(code="backend_request_failed", message="boom", details={"http_status": 400})
        return f"https://project.supabase.test/storage/v1/object/sign/{bucket}/{path}?token=signed"

    async def get_user(self, access_token: str) -> Row | None:
        return self.users.get(access_token)


class FakeLLM(AbstractLLMClient):
    def __init__(self, payload: dict[str, Any] | None = None) -> None:
        self.payload = payload or {}
        self.calls: list[dict[str, Any]] = []

    async def generate_json(self, prompt: str, *, system_prompt: str | None = None, **kwargs: Any) -> dict[str, Any]:
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, **kwargs})
        return dict(self.payload)


def make_job(job_id: str, **overrides: Any) -> Row:
    job: Row = {
        "id": job_id,
        "title": f"Job {job_id}",
        "company_name": "Acme",
        "description": "",
        "requirements": "",
        "preferred_skills": "",
        "location": "東京都",
        "job_type": "",
        "industry_category": "IT",
        "employment_type": "正社員",
        "original_md_content": "",
        "company_size": "100-500",
        "salary_min": 500,
        "salary_max": 800,
        # Larger numeric ids are newer
        "created_at": f"2024-01-01T00:00:00.{int(job_id):06d}Z" if job_id.isdigit() else "2024-01-01T00:00:00Z",
    }
    job.update(overrides)
    return job


@pytest.fixture(autouse=True)
def _reset_rate_limiters():
    reset_rate_limiters()
    yield
    reset_rate_limiters()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM(
        {
            "vision": "Make work better",
            "products": "CRM",
            "business_model": "SaaS",
            "clients": "Big Co",
            "competitors": "Other Co",
        }
    )


@pytest.fixture
def test_app(fake_backend: FakeBackend, fake_llm: FakeLLM) -> FastAPI:
    from app.core.app_factory import create_app

    app = create_app()
    app.dependency_overrides[get_backend_client] = lambda: fake_backend
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    get_enrichment_cache().clear()
    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {VALID_TOKEN}"}
