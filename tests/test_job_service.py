"""Tests for single-job lookups and display helpers."""

import pytest

from app.core.errors import NotFoundAppError
from app.services.job_service import JobService, format_salary, pdf_viewer_path
from conftest import FakeBackend, make_job


@pytest.mark.parametrize(
    ("salary_min", "salary_max", "expected"),
    [
        (None, None, "給与非公開"),
        (0, 0, "給与非公開"),
        (None, 800, "〜800万円"),
        (1200, None, "1,200万円〜"),
        (500, 1200, "500万円 - 1,200万円"),
    ],
)
def test_format_salary(salary_min, salary_max, expected) -> None:
    assert format_salary(salary_min, salary_max) == expected


def test_pdf_viewer_path_quotes_segments() -> None:
    path = pdf_viewer_path("株式会社A/B", "営業 職")

    assert path.startswith("/v1/pdfs/view/")
    # Slashes inside a name must not create extra path segments
    assert path.count("/") == 5
    assert "%2F" in path
    assert path.endswith("%20%E8%81%B7")


@pytest.mark.asyncio
async def test_get_job_returns_row() -> None:
    service = JobService(FakeBackend({"jobs": [make_job("1"), make_job("2", title="Target")]}))

    job = await service.get_job("2")

    assert job["title"] == "Target"


@pytest.mark.asyncio
async def test_get_job_missing_raises_not_found() -> None:
    service = JobService(FakeBackend({"jobs": []}))

    with pytest.raises(NotFoundAppError) as exc_info:
        await service.get_job("404")

    assert exc_info.value.code == "job_not_found"


@pytest.mark.asyncio
async def test_list_company_jobs_is_exact_match_newest_first() -> None:
    backend = FakeBackend(
        {
            "jobs": [
                make_job("1", company_name="Acme"),
                make_job("2", company_name="Acme Holdings"),
                make_job("3", company_name="Acme"),
            ]
        }
    )

    jobs = await JobService(backend).list_company_jobs("Acme")

    assert [job["id"] for job in jobs] == ["3", "1"]
