from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_job_search_service, get_job_service
from app.core.auth import AuthenticatedUser, require_user
from app.core.config import settings
from app.core.rate_limit import enforce_search_rate_limit
from app.schemas.jobs import (
    JobDetailResponse,
    JobSearchRequest,
    JobSearchResponse,
    PaginationInfo,
)
from app.services.job_search_service import (
    JobSearchService,
    SearchPage,
    build_pagination,
    split_keywords,
    validate_criteria,
)
from app.services.job_service import JobService, format_salary, pdf_viewer_path

router = APIRouter(tags=["Jobs"])

SearchServiceDep = Annotated[JobSearchService, Depends(get_job_search_service)]


def _to_response(page: SearchPage) -> JobSearchResponse:
    pagination = build_pagination(page.total, page.page, page.limit)
    return JobSearchResponse(
        results=page.results,
        total=page.total,
        page=page.page,
        limit=page.limit,
        truncated=page.truncated,
        pagination=PaginationInfo(
            total_pages=pagination.total_pages,
            start_index=pagination.start_index,
            end_index=pagination.end_index,
            page_numbers=pagination.page_numbers,
        ),
    )


@router.post(
    "/jobs/search",
    response_model=JobSearchResponse,
    dependencies=[Depends(enforce_search_rate_limit)],
)
async def search_jobs(
    body: JobSearchRequest,
    service: SearchServiceDep,
    user: Annotated[AuthenticatedUser, Depends(require_user)],
) -> JobSearchResponse:
    """Search jobs by keywords (AND), salary range and locations.

    Raises:
        ValidationAppError: Too many/long keywords or bad paging (400).
    """
    criteria = validate_criteria(
        body.keywords,
        salary_min=body.filters.salary_min,
        salary_max=body.filters.salary_max,
        locations=body.filters.locations,
        page=body.page,
        limit=body.limit,
    )
    page = await service.search(criteria)
    return _to_response(page)


@router.get(
    "/jobs",
    response_model=JobSearchResponse,
    dependencies=[Depends(enforce_search_rate_limit)],
)
async def list_jobs(
    service: SearchServiceDep,
    user: Annotated[AuthenticatedUser, Depends(require_user)],
    q: Annotated[str | None, Query(description="Free text; split on whitespace into keywords.")] = None,
    salary_min: int | None = None,
    salary_max: int | None = None,
    location: Annotated[list[str] | None, Query()] = None,
    page: int = 1,
) -> JobSearchResponse:
    """Job listing with a fixed page size, newest first."""
    criteria = validate_criteria(
        split_keywords(q),
        salary_min=salary_min,
        salary_max=salary_max,
        locations=location,
        page=page,
        limit=settings.app.listing_page_size,
    )
    page_result = await service.search(criteria)
    return _to_response(page_result)


@router.get("/jobs/{job_id}", response_model=JobDetailResponse)
async def get_job(
    job_id: str,
    service: Annotated[JobService, Depends(get_job_service)],
    user: Annotated[AuthenticatedUser, Depends(require_user)],
) -> JobDetailResponse:
    job = await service.get_job(job_id)

    viewer = None
    if job.get("company_name") and job.get("title"):
        viewer = pdf_viewer_path(job["company_name"], job["title"])

    return JobDetailResponse(
        job=job,
        salary_label=format_salary(job.get("salary_min"), job.get("salary_max")),
        pdf_viewer_path=viewer,
    )
