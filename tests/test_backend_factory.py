"""Tests for backend client construction."""

import pytest

from app.adapters.backend import SupabaseRestClient, create_backend_client, get_backend_client
from app.core.config import BackendSettings
from app.core.errors import ValidationAppError


def _settings(**overrides) -> BackendSettings:
    values = {"url": "https://project.supabase.test", "service_role_key": None, "anon_key": None}
    values.update(overrides)
    return BackendSettings(**values)


def test_prefers_service_role_key() -> None:
    client = create_backend_client(_settings(service_role_key="service", anon_key="anon"))

    assert isinstance(client, SupabaseRestClient)
    assert client._api_key == "service"


def test_falls_back_to_anon_key() -> None:
    client = create_backend_client(_settings(anon_key="anon"))

    assert client._api_key == "anon"


def test_missing_url() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        create_backend_client(_settings(url=None, anon_key="anon"))

    assert exc_info.value.code == "backend_missing_url"


def test_missing_keys() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        create_backend_client(_settings())

    assert exc_info.value.code == "backend_missing_key"


def test_get_backend_client_is_shared() -> None:
    get_backend_client.cache_clear()
    try:
        assert get_backend_client() is get_backend_client()
    finally:
        get_backend_client.cache_clear()
