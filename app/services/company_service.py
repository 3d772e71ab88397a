"""Company directory and confidential dossiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.adapters.backend import filters as f
from app.adapters.backend.base import AbstractBackendClient, Row
from app.core.config import settings
from app.core.errors import NotFoundAppError
from app.services.job_search_service import JOBS_TABLE
from app.utils.text_normalizer import contains_ignore_case

logger = logging.getLogger(__name__)

COMPANIES_TABLE = "companies_master"

ENRICHMENT_FIELDS: tuple[str, ...] = (
    "vision",
    "products",
    "business_model",
    "clients",
    "competitors",
)


@dataclass
class CompanySummary:
    name: str
    industry: str | None = None
    size: str | None = None
    job_count: int = 1


def aggregate_companies(rows: list[Row]) -> list[CompanySummary]:
    """Group job rows by company name.

    Rows without a company name are skipped. The first industry and size
    seen for a company win.
    """
    by_name: dict[str, CompanySummary] = {}
    for row in rows:
        name = row.get("company_name")
        if not name or not str(name).strip():
            continue
        summary = by_name.get(name)
        if summary is None:
            by_name[name] = CompanySummary(
                name=name,
                industry=row.get("industry_category"),
                size=row.get("company_size"),
            )
        else:
            summary.job_count += 1
    return list(by_name.values())


def filter_companies(
    companies: list[CompanySummary],
    *,
    name: str | None = None,
    industry: str | None = None,
) -> list[CompanySummary]:
    result = companies
    if name:
        result = [c for c in result if contains_ignore_case(c.name, name)]
    if industry:
        result = [c for c in result if contains_ignore_case(c.industry, industry)]
    return result


def needs_enrichment(basic_info: dict[str, Any] | None) -> bool:
    """True when any AI-enrichable field of ``basic_info`` is empty."""
    info = basic_info or {}
    return any(not info.get(key) for key in ENRICHMENT_FIELDS)


class CompanyService:
    """Read access to the company directory and the dossier table."""

    def __init__(self, backend: AbstractBackendClient, *, row_cap: int | None = None) -> None:
        self.backend = backend
        self.row_cap = row_cap or settings.backend.max_rows_per_request

    async def _all_company_rows(self) -> list[Row]:
        rows: list[Row] = []
        offset = 0
        while True:
            chunk = await self.backend.select(
                JOBS_TABLE,
                columns="company_name,industry_category,company_size",
                order="company_name",
                offset=offset,
                limit=self.row_cap,
            )
            rows.extend(chunk)
            if len(chunk) < self.row_cap:
                return rows
            offset += self.row_cap

    async def list_companies(
        self,
        name: str | None = None,
        industry: str | None = None,
    ) -> list[CompanySummary]:
        rows = await self._all_company_rows()
        companies = aggregate_companies(rows)
        filtered = filter_companies(companies, name=name, industry=industry)

        logger.info(
            "companies.listed",
            extra={"job_rows": len(rows), "companies": len(companies), "matched": len(filtered)},
        )
        return filtered

    async def get_dossier(self, company_id: str) -> Row:
        """Fetch one ``companies_master`` row.

        Raises:
            NotFoundAppError: Unknown company id.
        """
        row = await self.backend.select_one(COMPANIES_TABLE, filters=[f.eq("id", company_id)])
        if row is None:
            raise NotFoundAppError(
                code="company_not_found",
                message="Company not found",
                details={"table": COMPANIES_TABLE, "resource_id": str(company_id)},
            )
        return row
