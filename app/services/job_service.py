"""Single-job lookups and display helpers."""

from __future__ import annotations

import logging
from urllib.parse import quote

from app.adapters.backend import filters as f
from app.adapters.backend.base import AbstractBackendClient, Row
from app.core.errors import NotFoundAppError
from app.services.job_search_service import JOBS_TABLE, NEWEST_FIRST

logger = logging.getLogger(__name__)

SALARY_UNDISCLOSED = "給与非公開"


def format_salary(salary_min: int | None, salary_max: int | None) -> str:
    """Human-readable annual salary range in units of 10k JPY.

    Zero counts as missing.

    Examples:
        >>> format_salary(None, None)
        '給与非公開'
        >>> format_salary(None, 800)
        '〜800万円'
        >>> format_salary(1200, None)
        '1,200万円〜'
        >>> format_salary(500, 1200)
        '500万円 - 1,200万円'
    """
    if not salary_min and not salary_max:
        return SALARY_UNDISCLOSED
    if not salary_min:
        return f"〜{salary_max:,}万円"
    if not salary_max:
        return f"{salary_min:,}万円〜"
    return f"{salary_min:,}万円 - {salary_max:,}万円"


def pdf_viewer_path(company_name: str, title: str) -> str:
    """Path of the local PDF proxy for a job."""
    return f"/v1/pdfs/view/{quote(company_name, safe='')}/{quote(title, safe='')}"


class JobService:
    def __init__(self, backend: AbstractBackendClient) -> None:
        self.backend = backend

    async def get_job(self, job_id: str) -> Row:
        """Fetch one job by id.

        Raises:
            NotFoundAppError: No job with that id.
        """
        job = await self.backend.select_one(JOBS_TABLE, filters=[f.eq("id", job_id)])
        if job is None:
            logger.info("job.not_found", extra={"job_id": job_id})
            raise NotFoundAppError(
                code="job_not_found",
                message="Job not found",
                details={"table": JOBS_TABLE, "resource_id": job_id},
            )
        return job

    async def list_company_jobs(self, company_name: str) -> list[Row]:
        """All jobs whose company name equals ``company_name``, newest first."""
        return await self.backend.select(
            JOBS_TABLE,
            filters=[f.eq("company_name", company_name)],
            order=NEWEST_FIRST,
        )
