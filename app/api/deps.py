"""FastAPI dependency providers for services.

Clients and caches are built once per process; services are cheap wrappers
created per request. Tests replace any provider via
``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.adapters.backend.base import AbstractBackendClient
from app.adapters.backend.factory import get_backend_client
from app.adapters.llm.base import AbstractLLMClient
from app.adapters.llm.factory import create_llm_client
from app.core.config import settings
from app.services.company_service import CompanyService
from app.services.enrichment_service import EnrichmentService
from app.services.job_search_service import JobSearchService
from app.services.job_service import JobService
from app.services.pdf_service import PdfService
from app.utils.simple_cache import SimpleTTLCache

BackendDep = Annotated[AbstractBackendClient, Depends(get_backend_client)]


@lru_cache(maxsize=1)
def get_llm_client() -> AbstractLLMClient:
    return create_llm_client()


@lru_cache(maxsize=1)
def get_enrichment_cache() -> SimpleTTLCache[dict[str, str]]:
    return SimpleTTLCache(ttl_seconds=settings.app.company_cache_ttl_seconds, max_entries=1024)


def get_job_search_service(backend: BackendDep) -> JobSearchService:
    return JobSearchService(backend)


def get_job_service(backend: BackendDep) -> JobService:
    return JobService(backend)


def get_company_service(backend: BackendDep) -> CompanyService:
    return CompanyService(backend)


def get_pdf_service(backend: BackendDep) -> PdfService:
    return PdfService(backend)


def get_enrichment_service(
    backend: BackendDep,
    llm: Annotated[AbstractLLMClient, Depends(get_llm_client)],
    cache: Annotated[SimpleTTLCache[dict[str, str]], Depends(get_enrichment_cache)],
) -> EnrichmentService:
    return EnrichmentService(backend=backend, llm=llm, cache=cache)
