from __future__ import annotations

from app.api.routes.admin import router as admin_router
from app.api.routes.auth import router as auth_router
from app.api.routes.companies import router as companies_router
from app.api.routes.health import router as health_router
from app.api.routes.jobs import router as jobs_router
from app.api.routes.pdfs import router as pdfs_router

__all__ = [
    "admin_router",
    "auth_router",
    "companies_router",
    "health_router",
    "jobs_router",
    "pdfs_router",
]
