"""Factory for the hosted backend client."""

from functools import lru_cache

from app.adapters.backend.base import AbstractBackendClient
from app.adapters.backend.supabase_rest import SupabaseRestClient
from app.core.config import BackendSettings, settings
from app.core.errors import ValidationAppError


def create_backend_client(backend_settings: BackendSettings | None = None) -> AbstractBackendClient:
    """Instantiate the backend client from configuration.

    The service-role key is preferred; the anon key is used when no service
    key is configured.

    Returns:
        AbstractBackendClient: Configured client instance.

    Raises:
        ValidationAppError: If the project URL or every key is missing.
    """
    cfg = backend_settings or settings.backend

    if not cfg.url:
        raise ValidationAppError(
            code="backend_missing_url",
            message="SUPABASE_URL environment variable is required",
        )

    api_key = cfg.service_role_key or cfg.anon_key
    if not api_key:
        raise ValidationAppError(
            code="backend_missing_key",
            message="Set SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY",
        )

    return SupabaseRestClient(
        url=cfg.url,
        api_key=api_key,
        timeout_seconds=cfg.timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_backend_client() -> AbstractBackendClient:
    """Process-wide backend client used as a FastAPI dependency.

    Routes depend on this provider so tests can swap it through
    ``app.dependency_overrides``.
    """
    return create_backend_client()
