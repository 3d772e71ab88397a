"""Job PDF access: signed storage URLs and the local PDF directory."""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from pathlib import Path

from app.adapters.backend import filters as f
from app.adapters.backend.base import AbstractBackendClient
from app.core.config import settings
from app.core.errors import BackendAppError, ForbiddenAppError, NotFoundAppError, StorageAppError
from app.services.pdf_resolver import resolve_pdf_filename

logger = logging.getLogger(__name__)

MAPPINGS_TABLE = "pdf_mappings"

PDF_RESPONSE_HEADERS = {
    "Content-Disposition": "inline",
    "Cache-Control": "public, max-age=31536000, immutable",
}


@dataclass(frozen=True)
class SignedPdf:
    filename: str
    original_path: str | None
    url: str


def _is_within(path: Path, root: Path) -> bool:
    return path != root and path.is_relative_to(root)


class PdfService:
    """Looks up job PDFs in storage and on the local PDF root.

    Attributes:
        backend: Hosted backend client (tables and storage).
        pdf_root: Directory laid out as ``<company>/<title>.pdf``.
    """

    def __init__(
        self,
        backend: AbstractBackendClient,
        *,
        pdf_root: Path | None = None,
        bucket: str | None = None,
        url_ttl_seconds: int | None = None,
    ) -> None:
        self.backend = backend
        self.pdf_root = Path(pdf_root or settings.storage.pdf_root)
        self.bucket = bucket or settings.backend.pdf_bucket
        self.url_ttl_seconds = url_ttl_seconds or settings.backend.signed_url_ttl_seconds

    async def find_signed_pdf(self, job_id: str) -> SignedPdf:
        """Signed storage URL for the PDF mapped to ``job_id``.

        Raises:
            NotFoundAppError: No mapping for the job.
            StorageAppError: Storage refused to sign the file.
        """
        mapping = await self.backend.select_one(MAPPINGS_TABLE, filters=[f.eq("job_id", job_id)])
        if mapping is None or not mapping.get("pdf_filename"):
            raise NotFoundAppError(
                code="pdf_not_found",
                message="PDF not found",
                details={"table": MAPPINGS_TABLE, "resource_id": str(job_id)},
            )

        filename = mapping["pdf_filename"]
        try:
            url = await self.backend.create_signed_url(self.bucket, filename, self.url_ttl_seconds)
        except BackendAppError as exc:
            raise StorageAppError(
                code="pdf_url_failed",
                message="Failed to generate PDF URL",
                details={"bucket": self.bucket, "resource_id": str(job_id)},
            ) from exc

        logger.info("pdf.signed", extra={"job_id": str(job_id), "bucket": self.bucket})
        return SignedPdf(filename=filename, original_path=mapping.get("original_path"), url=url)

    def open_local_pdf(self, company_name: str, job_title: str) -> Path:
        """Locate the PDF for a company's job on the local PDF root.

        Raises:
            ForbiddenAppError: The company segment escapes the PDF root.
            NotFoundAppError: Unknown company directory, no matching file, or
                a match that resolves outside the root.
        """
        company_name = unicodedata.normalize("NFC", company_name)
        job_title = unicodedata.normalize("NFC", job_title)
        root = self.pdf_root.resolve()

        company_dir = (root / company_name).resolve()
        if not _is_within(company_dir, root):
            logger.warning("pdf.path_rejected", extra={"company": company_name})
            raise ForbiddenAppError(code="pdf_path_forbidden", message="Forbidden")

        try:
            files = [p.name for p in company_dir.iterdir()]
        except OSError as exc:
            raise NotFoundAppError(
                code="pdf_company_not_found",
                message="Company directory not found",
                details={"resource_id": company_name},
            ) from exc

        filename = resolve_pdf_filename(job_title, files)
        if filename is None:
            logger.info(
                "pdf.unresolved",
                extra={"company": company_name, "title": job_title, "files": len(files)},
            )
            raise NotFoundAppError(code="pdf_not_found", message="PDF not found")

        candidate = company_dir / filename
        # Both the lexical path and the symlink target must stay under the root.
        if not _is_within(candidate.absolute(), root) or not _is_within(candidate.resolve(), root):
            logger.warning("pdf.symlink_rejected", extra={"company": company_name, "pdf_file": filename})
            raise NotFoundAppError(code="pdf_not_found", message="PDF not found")

        logger.info("pdf.resolved", extra={"company": company_name, "pdf_file": filename})
        return candidate.resolve()
