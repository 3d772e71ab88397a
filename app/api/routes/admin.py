from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.core.auth import AuthenticatedUser, require_user
from app.core.config import settings
from app.schemas.companies import ProcessCompaniesResponse
from app.services.company_processor import process_directory

router = APIRouter(tags=["Admin"])


@router.post(
    "/admin/companies/process",
    response_model=ProcessCompaniesResponse,
    responses={500: {"model": ProcessCompaniesResponse}},
)
async def process_companies(
    user: Annotated[AuthenticatedUser, Depends(require_user)],
):
    """Convert raw dossier text files into structured JSON files.

    Per-file failures are reported in ``errors``; an unreadable input
    directory answers 500 with ``success: false``.
    """
    result = await run_in_threadpool(
        process_directory,
        settings.storage.companies_raw_dir,
        settings.storage.companies_processed_dir,
    )
    body = ProcessCompaniesResponse(
        success=result.success,
        processed=result.processed,
        errors=result.errors,
    )
    if not result.success:
        return JSONResponse(status_code=500, content=body.model_dump())
    return body
