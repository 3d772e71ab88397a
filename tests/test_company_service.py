"""Tests for the company directory and dossier lookups."""

import pytest

from app.core.errors import NotFoundAppError
from app.services.company_service import (
    CompanyService,
    CompanySummary,
    aggregate_companies,
    filter_companies,
    needs_enrichment,
)
from conftest import FakeBackend, make_job


def test_aggregate_counts_jobs_per_company() -> None:
    rows = [
        {"company_name": "Acme", "industry_category": "IT", "company_size": "100"},
        {"company_name": "Beta", "industry_category": "金融", "company_size": None},
        {"company_name": "Acme", "industry_category": "Other", "company_size": "999"},
        {"company_name": "", "industry_category": "IT", "company_size": None},
        {"company_name": None, "industry_category": "IT", "company_size": None},
    ]

    companies = aggregate_companies(rows)

    assert companies == [
        CompanySummary(name="Acme", industry="IT", size="100", job_count=2),
        CompanySummary(name="Beta", industry="金融", size=None, job_count=1),
    ]


def test_filter_companies_by_name_and_industry() -> None:
    companies = [
        CompanySummary(name="Acme Corp", industry="IT"),
        CompanySummary(name="Beta Bank", industry="金融"),
        CompanySummary(name="acme finance", industry="金融"),
    ]

    assert [c.name for c in filter_companies(companies, name="ACME")] == ["Acme Corp", "acme finance"]
    assert [c.name for c in filter_companies(companies, name="acme", industry="金融")] == ["acme finance"]
    assert filter_companies(companies) == companies


def test_needs_enrichment() -> None:
    full = {"vision": "v", "products": "p", "business_model": "b", "clients": "c", "competitors": "x"}

    assert needs_enrichment(None) is True
    assert needs_enrichment({**full, "clients": ""}) is True
    assert needs_enrichment(full) is False


@pytest.mark.asyncio
async def test_list_companies_pages_through_all_rows() -> None:
    jobs = [make_job(str(i), company_name=f"Company {i % 3}") for i in range(1, 8)]
    backend = FakeBackend({"jobs": jobs})
    service = CompanyService(backend, row_cap=3)

    companies = await service.list_companies()

    assert sorted(c.name for c in companies) == ["Company 0", "Company 1", "Company 2"]
    assert sum(c.job_count for c in companies) == 7
    selects = [c for c in backend.calls if c[0] == "select"]
    assert [c[2]["offset"] for c in selects] == [0, 3, 6]
    assert selects[0][2]["columns"] == "company_name,industry_category,company_size"


@pytest.mark.asyncio
async def test_list_companies_applies_filters() -> None:
    jobs = [
        make_job("1", company_name="Acme", industry_category="IT"),
        make_job("2", company_name="Beta", industry_category="製造"),
    ]
    service = CompanyService(FakeBackend({"jobs": jobs}))

    companies = await service.list_companies(industry="製造")

    assert [c.name for c in companies] == ["Beta"]


@pytest.mark.asyncio
async def test_get_dossier() -> None:
    backend = FakeBackend({"companies_master": [{"id": 7, "company_name": "Acme", "basic_info": {}}]})
    service = CompanyService(backend)

    row = await service.get_dossier("7")
    assert row["company_name"] == "Acme"

    with pytest.raises(NotFoundAppError) as exc_info:
        await service.get_dossier("8")
    assert exc_info.value.code == "company_not_found"
