from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_pdf_service
from app.core.auth import AuthenticatedUser, require_user
from app.schemas.pdfs import FindPdfRequest, FindPdfResponse
from app.services.pdf_service import PDF_RESPONSE_HEADERS, PdfService

router = APIRouter(tags=["PDFs"])

UserDep = Annotated[AuthenticatedUser, Depends(require_user)]
PdfServiceDep = Annotated[PdfService, Depends(get_pdf_service)]


@router.post("/pdfs/find", response_model=FindPdfResponse)
async def find_pdf(body: FindPdfRequest, service: PdfServiceDep, user: UserDep) -> FindPdfResponse:
    """Signed URL for the PDF mapped to a job.

    Raises:
        NotFoundAppError: No PDF mapping for the job (404).
        StorageAppError: URL could not be signed (500).
    """
    pdf = await service.find_signed_pdf(str(body.job_id))
    return FindPdfResponse(filename=pdf.filename, original_path=pdf.original_path, url=pdf.url)


@router.get(
    "/pdfs/view/{company_name}/{job_title:path}",
    response_class=FileResponse,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def view_pdf(
    company_name: str,
    job_title: str,
    service: PdfServiceDep,
    user: UserDep,
) -> FileResponse:
    """Serve a job's PDF from the local PDF directory, inline."""
    path = await run_in_threadpool(service.open_local_pdf, company_name, job_title)
    return FileResponse(path, media_type="application/pdf", headers=PDF_RESPONSE_HEADERS)
