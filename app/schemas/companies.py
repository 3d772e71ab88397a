"""Pydantic schemas for company directory, dossier and enrichment endpoints."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CompanySummaryOut(BaseModel):
    name: str
    industry: str | None = None
    size: str | None = None
    job_count: int


class CompanyListResponse(BaseModel):
    total: int
    companies: list[CompanySummaryOut]


class CompanyDossierResponse(BaseModel):
    company: dict[str, Any]
    needs_enrichment: bool = Field(
        ...,
        description="True when vision, products, business model, clients or competitors is empty.",
    )


class EnrichCompanyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    company_id: str | int = Field(
        ...,
        validation_alias=AliasChoices("company_id", "companyId"),
    )
    company_name: str = Field(
        ...,
        validation_alias=AliasChoices("company_name", "companyName"),
    )
    official_name: str | None = Field(
        None,
        validation_alias=AliasChoices("official_name", "officialName"),
        description="Registered name; preferred over company_name for the lookup.",
    )


class EnrichCompanyResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]


class ProcessCompaniesResponse(BaseModel):
    success: bool
    processed: int
    errors: list[str]
