"""OpenAPI metadata and customization utilities.

Enriches the generated schema with:
- the two ways to authenticate (bearer token header or session cookie)
- tags metadata
- per-path exemptions for public endpoints
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from app.core.config import settings

PUBLIC_PATH_SUFFIXES = ("/health", "/auth/session")

TAGS = [
    {"name": "Jobs", "description": "Job search, listing and detail."},
    {"name": "Companies", "description": "Company directory, dossiers and enrichment."},
    {"name": "PDFs", "description": "Job PDF lookup and inline viewing."},
    {"name": "Admin", "description": "Dossier import maintenance."},
    {"name": "Auth", "description": "Session cookie synchronization."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add security and tags.

    Every operation requires a session by default; public endpoints are
    exempted with ``security: []``.
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Access token issued by the hosted auth provider.",
            },
        )
        security_schemes.setdefault(
            "SessionCookie",
            {
                "type": "apiKey",
                "in": "cookie",
                "name": settings.app.access_token_cookie,
                "description": "Set by POST /v1/auth/session.",
            },
        )

        schema.setdefault("security", [{"BearerAuth": []}, {"SessionCookie": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith(PUBLIC_PATH_SUFFIXES):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
