"""Hosted backend adapter layer (tables, storage, auth)."""

from app.adapters.backend.base import AbstractBackendClient, Row
from app.adapters.backend.factory import create_backend_client, get_backend_client
from app.adapters.backend.supabase_rest import SupabaseRestClient

__all__ = [
    "AbstractBackendClient",
    "Row",
    "SupabaseRestClient",
    "create_backend_client",
    "get_backend_client",
]
