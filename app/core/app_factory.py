"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.adapters.backend.factory import get_backend_client
from app.api.routes import (
    admin_router,
    auth_router,
    companies_router,
    health_router,
    jobs_router,
    pdfs_router,
)
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("app.startup", extra={"app_env": settings.app_env})
    yield
    # Only close the pooled client if a request actually created it.
    if get_backend_client.cache_info().currsize:
        await get_backend_client().aclose()
        get_backend_client.cache_clear()
    logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Recruit CRM API",
        description=(
            "Job listing search and recruiting-company CRM backed by a hosted "
            "Supabase project: multi-keyword AND search with salary and location "
            "filters, company directory and confidential dossiers, LLM-based "
            "company profile enrichment, and job PDF access."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    for router in (jobs_router, companies_router, pdfs_router, admin_router, auth_router):
        app.include_router(router, prefix="/v1")
    app.include_router(health_router)

    # OpenAPI customizations (security schemes, tags, exemptions)
    apply_openapi_customizations(app)

    return app
