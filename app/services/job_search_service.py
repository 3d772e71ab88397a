"""Multi-keyword job search.

The backend can only OR-combine ``ILIKE`` filters and caps every select at a
fixed number of rows. Searching with keywords therefore works in two stages:

1. fetch the OR superset (any keyword in any searchable column) in row-capped
   batches, newest first;
2. apply the AND semantics plus salary/location filters in process and slice
   the requested page out of the filtered list.

Without keywords every filter maps to a backend condition and the backend
paginates and counts.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from app.adapters.backend import filters as f
from app.adapters.backend.base import AbstractBackendClient, Row
from app.core.config import settings
from app.core.errors import ValidationAppError
from app.utils.text_normalizer import contains_ignore_case, normalize_keyword

logger = logging.getLogger(__name__)

JOBS_TABLE = "jobs"
NEWEST_FIRST = "created_at.desc"

SEARCHABLE_COLUMNS: tuple[str, ...] = (
    "title",
    "company_name",
    "description",
    "requirements",
    "preferred_skills",
    "location",
    "job_type",
    "industry_category",
    "employment_type",
    "original_md_content",
)

# Stand-ins for jobs without a published salary bound (10k JPY units).
MISSING_SALARY_MIN = 0
MISSING_SALARY_MAX = 9999

ELLIPSIS = "..."

__all__ = [
    "JobSearchService",
    "Pagination",
    "SEARCHABLE_COLUMNS",
    "SearchCriteria",
    "SearchPage",
    "build_pagination",
    "job_matches",
    "normalize_keyword",
    "salary_filter_active",
    "split_keywords",
    "validate_criteria",
]


@dataclass(frozen=True)
class SearchCriteria:
    keywords: tuple[str, ...] = ()
    salary_min: int | None = None
    salary_max: int | None = None
    locations: tuple[str, ...] = ()
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class SearchPage:
    results: list[Row] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
    truncated: bool = False


@dataclass(frozen=True)
class Pagination:
    total_pages: int
    start_index: int
    end_index: int
    page_numbers: list[int | str]


def split_keywords(text: str | None) -> list[str]:
    """Split a free-text search box on any whitespace (incl. full-width)."""
    if not text:
        return []
    return text.split()


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def validate_criteria(
    keywords: Iterable[Any] | None = None,
    *,
    salary_min: int | None = None,
    salary_max: int | None = None,
    locations: Iterable[str] | None = None,
    page: Any = 1,
    limit: Any = None,
) -> SearchCriteria:
    """Normalize and validate raw search input.

    Blank keywords are dropped, the rest normalized with
    :func:`normalize_keyword`, and keywords that normalize to nothing are
    dropped too.

    Raises:
        ValidationAppError: Too many or too long keywords, bad page or limit.
    """
    max_keywords = settings.app.max_keywords
    max_chars = settings.app.max_keyword_chars
    max_limit = settings.app.max_page_size

    normalized: list[str] = []
    for raw in keywords or ():
        if not isinstance(raw, str) or not raw.strip():
            continue
        keyword = normalize_keyword(raw)
        if keyword:
            normalized.append(keyword)

    if len(normalized) > max_keywords:
        raise ValidationAppError(
            code="too_many_keywords",
            message=f"Maximum {max_keywords} keywords allowed",
            details={"max_value": max_keywords, "actual_value": len(normalized)},
        )

    too_long = next((k for k in normalized if len(k) > max_chars), None)
    if too_long is not None:
        raise ValidationAppError(
            code="keyword_too_long",
            message=f"Each keyword must be {max_chars} characters or less",
            details={"max_value": max_chars, "actual_value": len(too_long)},
        )

    page_num = _as_int(page)
    if page_num is None or page_num < 1:
        raise ValidationAppError(
            code="invalid_page",
            message="page must be a positive integer",
        )

    limit_num = _as_int(settings.app.default_page_size if limit is None else limit)
    if limit_num is None or not 1 <= limit_num <= max_limit:
        raise ValidationAppError(
            code="invalid_limit",
            message=f"limit must be between 1 and {max_limit}",
            details={"max_value": max_limit},
        )

    cleaned_locations = tuple(loc.strip() for loc in locations or () if loc and loc.strip())

    return SearchCriteria(
        keywords=tuple(normalized),
        salary_min=salary_min,
        salary_max=salary_max,
        locations=cleaned_locations,
        page=page_num,
        limit=limit_num,
    )


def salary_filter_active(salary_min: int | None, salary_max: int | None) -> bool:
    """True when the range is narrower than the neutral floor/ceiling."""
    floor = settings.app.salary_floor
    ceiling = settings.app.salary_ceiling
    low = floor if salary_min is None else salary_min
    high = ceiling if salary_max is None else salary_max
    return low > floor or high < ceiling


def _effective_salary_range(criteria: SearchCriteria) -> tuple[int, int]:
    low = settings.app.salary_floor if criteria.salary_min is None else criteria.salary_min
    high = settings.app.salary_ceiling if criteria.salary_max is None else criteria.salary_max
    return low, high


def job_matches(job: Row, criteria: SearchCriteria) -> bool:
    """In-process filter used after the OR superset has been fetched."""
    for keyword in criteria.keywords:
        if not any(contains_ignore_case(_text(job.get(col)), keyword) for col in SEARCHABLE_COLUMNS):
            return False

    if salary_filter_active(criteria.salary_min, criteria.salary_max):
        low, high = _effective_salary_range(criteria)
        job_min = job.get("salary_min") or MISSING_SALARY_MIN
        job_max = job.get("salary_max") or MISSING_SALARY_MAX
        if not (job_min <= high and job_max >= low):
            return False

    if criteria.locations:
        location = _text(job.get("location"))
        if not any(contains_ignore_case(location, loc) for loc in criteria.locations):
            return False

    return True


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def build_pagination(total: int, page: int, limit: int, *, window: int = 2) -> Pagination:
    """Page count, 1-based item range and a condensed page-number strip.

    Up to 10 pages are listed in full. Beyond that the strip is the first
    page, the pages within ``window`` of the current one, and the last page,
    with ``"..."`` marking gaps.

    Examples:
        >>> build_pagination(300, 7, 20).page_numbers
        [1, '...', 5, 6, 7, 8, 9, '...', 15]
    """
    total_pages = max(1, math.ceil(total / limit)) if total > 0 else 0
    start_index = (page - 1) * limit + 1 if total > 0 else 0
    end_index = min(page * limit, total)

    if total_pages <= 10:
        numbers: list[int | str] = list(range(1, total_pages + 1))
    else:
        left = max(2, page - window)
        right = min(total_pages - 1, page + window)
        numbers = [1]
        if left > 2:
            numbers.append(ELLIPSIS)
        numbers.extend(range(left, right + 1))
        if right < total_pages - 1:
            numbers.append(ELLIPSIS)
        numbers.append(total_pages)

    return Pagination(
        total_pages=total_pages,
        start_index=start_index,
        end_index=end_index,
        page_numbers=numbers,
    )


class JobSearchService:
    """Keyword, salary and location search over the jobs table.

    Attributes:
        backend: Hosted backend client.
        row_cap: Rows the backend returns per select at most.
        max_batches: Ceiling on row-capped fetches for one keyword search.
    """

    def __init__(
        self,
        backend: AbstractBackendClient,
        *,
        row_cap: int | None = None,
        max_batches: int | None = None,
    ) -> None:
        self.backend = backend
        self.row_cap = row_cap or settings.backend.max_rows_per_request
        self.max_batches = max_batches or settings.backend.max_search_batches

    async def search(self, criteria: SearchCriteria) -> SearchPage:
        if criteria.keywords:
            page = await self._search_with_keywords(criteria)
        else:
            page = await self._search_without_keywords(criteria)

        logger.info(
            "search.completed",
            extra={
                "keyword_count": len(criteria.keywords),
                "location_count": len(criteria.locations),
                "salary_filter": salary_filter_active(criteria.salary_min, criteria.salary_max),
                "page": criteria.page,
                "limit": criteria.limit,
                "total": page.total,
                "truncated": page.truncated,
            },
        )
        return page

    def _backend_filters(self, criteria: SearchCriteria) -> tuple[list[f.Filter], str | None]:
        filters: list[f.Filter] = []
        if salary_filter_active(criteria.salary_min, criteria.salary_max):
            low, high = _effective_salary_range(criteria)
            # Ranges overlap: job.min <= filter.max AND job.max >= filter.min
            filters.append(f.lte("salary_min", high))
            filters.append(f.gte("salary_max", low))

        or_conditions = None
        if criteria.locations:
            or_conditions = f.or_group(f.ilike_condition("location", loc) for loc in criteria.locations)
        return filters, or_conditions

    async def _search_without_keywords(self, criteria: SearchCriteria) -> SearchPage:
        filters, or_conditions = self._backend_filters(criteria)

        rows = await self.backend.select(
            JOBS_TABLE,
            filters=filters,
            or_conditions=or_conditions,
            order=NEWEST_FIRST,
            offset=criteria.offset,
            limit=criteria.limit,
        )
        total = await self.backend.count(JOBS_TABLE, filters=filters, or_conditions=or_conditions)

        return SearchPage(results=rows, total=total, page=criteria.page, limit=criteria.limit)

    @staticmethod
    def keyword_condition(keywords: Sequence[str]) -> str:
        """OR group matching any keyword in any searchable column."""
        return f.or_group(
            f.ilike_condition(column, keyword)
            for keyword in keywords
            for column in SEARCHABLE_COLUMNS
        )

    async def fetch_candidates(self, keywords: Sequence[str]) -> tuple[list[Row], bool]:
        """Fetch the OR superset in row-capped batches.

        Returns:
            Tuple of (rows, truncated) where ``truncated`` means the batch
            ceiling stopped the fetch while more rows may exist.
        """
        condition = self.keyword_condition(keywords)
        rows: list[Row] = []

        for batch in range(self.max_batches):
            chunk = await self.backend.select(
                JOBS_TABLE,
                or_conditions=condition,
                order=NEWEST_FIRST,
                offset=batch * self.row_cap,
                limit=self.row_cap,
            )
            rows.extend(chunk)
            if len(chunk) < self.row_cap:
                return rows, False

        logger.warning(
            "search.batch_ceiling_reached",
            extra={"rows": len(rows), "max_batches": self.max_batches},
        )
        return rows, True

    async def _search_with_keywords(self, criteria: SearchCriteria) -> SearchPage:
        candidates, truncated = await self.fetch_candidates(criteria.keywords)
        matched = [job for job in candidates if job_matches(job, criteria)]

        logger.debug(
            "search.filtered",
            extra={"candidates": len(candidates), "matched": len(matched)},
        )

        start = criteria.offset
        return SearchPage(
            results=matched[start : start + criteria.limit],
            total=len(matched),
            page=criteria.page,
            limit=criteria.limit,
            truncated=truncated,
        )
