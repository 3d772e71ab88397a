"""Pydantic schemas for job search and job detail endpoints."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SearchFilters(BaseModel):
    """Optional non-keyword filters.

    Salaries are annual amounts in units of 10k JPY. Both camelCase and
    snake_case keys are accepted.
    """

    model_config = ConfigDict(populate_by_name=True)

    salary_min: int | None = Field(
        None,
        validation_alias=AliasChoices("salary_min", "salaryMin"),
        description="Lower bound of the wanted salary range.",
    )
    salary_max: int | None = Field(
        None,
        validation_alias=AliasChoices("salary_max", "salaryMax"),
        description="Upper bound of the wanted salary range.",
    )
    locations: list[str] = Field(
        default_factory=list,
        description="Job must be located in any of these (substring match).",
    )


class JobSearchRequest(BaseModel):
    """Search body.

    Keyword entries, ``page`` and ``limit`` are loosely typed here; the search
    service drops non-string keywords and rejects bad paging with a 400.
    """

    keywords: list[Any] = Field(
        default_factory=list,
        description="Keywords combined with AND. Non-string and blank entries are ignored.",
    )
    filters: SearchFilters = Field(default_factory=SearchFilters)
    page: Any = Field(1, description="1-based page number.")
    limit: Any = Field(None, description="Page size (default 20, max 50).")


class PaginationInfo(BaseModel):
    total_pages: int
    start_index: int = Field(..., description="1-based index of the first item on the page (0 when empty).")
    end_index: int
    page_numbers: list[int | str] = Field(
        ...,
        description="Condensed page strip; '...' marks skipped ranges.",
    )


class JobSearchResponse(BaseModel):
    results: list[dict[str, Any]]
    total: int
    page: int
    limit: int
    truncated: bool = Field(
        False,
        description="True when the keyword prefetch hit its batch ceiling; total may be low.",
    )
    pagination: PaginationInfo


class JobDetailResponse(BaseModel):
    job: dict[str, Any]
    salary_label: str
    pdf_viewer_path: str | None = None


class CompanyJobsResponse(BaseModel):
    company_name: str
    total: int
    jobs: list[dict[str, Any]]
