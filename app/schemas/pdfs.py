"""Pydantic schemas for PDF lookup."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FindPdfRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str | int = Field(..., validation_alias=AliasChoices("job_id", "jobId"))


class FindPdfResponse(BaseModel):
    success: bool = True
    filename: str
    original_path: str | None = Field(None, serialization_alias="originalPath")
    url: str = Field(..., description="Signed storage URL, valid for a limited time.")
