from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """Liveness probe.

    Does not touch the hosted backend, so it stays green while the backend
    is degraded.
    """
    return {"status": "ok"}
