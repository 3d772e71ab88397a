from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_company_service, get_enrichment_service, get_job_service
from app.core.auth import AuthenticatedUser, require_user
from app.core.rate_limit import enforce_enrich_rate_limit
from app.schemas.companies import (
    CompanyDossierResponse,
    CompanyListResponse,
    CompanySummaryOut,
    EnrichCompanyRequest,
    EnrichCompanyResponse,
)
from app.schemas.jobs import CompanyJobsResponse
from app.services.company_service import CompanyService, needs_enrichment
from app.services.enrichment_service import EnrichmentService
from app.services.job_service import JobService

router = APIRouter(tags=["Companies"])

UserDep = Annotated[AuthenticatedUser, Depends(require_user)]
CompanyServiceDep = Annotated[CompanyService, Depends(get_company_service)]


@router.get("/companies", response_model=CompanyListResponse)
async def list_companies(
    service: CompanyServiceDep,
    user: UserDep,
    name: Annotated[str | None, Query(description="Substring of the company name.")] = None,
    industry: Annotated[str | None, Query(description="Substring of the industry.")] = None,
) -> CompanyListResponse:
    """Companies that currently have job listings, with job counts."""
    companies = await service.list_companies(name=name, industry=industry)
    return CompanyListResponse(
        total=len(companies),
        companies=[
            CompanySummaryOut(name=c.name, industry=c.industry, size=c.size, job_count=c.job_count)
            for c in companies
        ],
    )


@router.get("/companies/{company_name}/jobs", response_model=CompanyJobsResponse)
async def list_company_jobs(
    company_name: str,
    service: Annotated[JobService, Depends(get_job_service)],
    user: UserDep,
) -> CompanyJobsResponse:
    jobs = await service.list_company_jobs(company_name)
    return CompanyJobsResponse(company_name=company_name, total=len(jobs), jobs=jobs)


@router.get("/companies/master/{company_id}", response_model=CompanyDossierResponse)
async def get_company_dossier(
    company_id: str,
    service: CompanyServiceDep,
    user: UserDep,
) -> CompanyDossierResponse:
    """Confidential company dossier (staff only)."""
    dossier = await service.get_dossier(company_id)
    return CompanyDossierResponse(
        company=dossier,
        needs_enrichment=needs_enrichment(dossier.get("basic_info")),
    )


@router.post(
    "/companies/enrich",
    response_model=EnrichCompanyResponse,
    dependencies=[Depends(enforce_enrich_rate_limit)],
)
async def enrich_company(
    body: EnrichCompanyRequest,
    service: Annotated[EnrichmentService, Depends(get_enrichment_service)],
    user: UserDep,
) -> EnrichCompanyResponse:
    """Fill missing profile fields of a dossier using the LLM.

    Raises:
        LLMAppError: Model call failed or returned invalid JSON (500).
    """
    basic_info = await service.enrich(
        str(body.company_id),
        body.company_name,
        official_name=body.official_name,
    )
    return EnrichCompanyResponse(data=basic_info)
