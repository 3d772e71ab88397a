"""Builds the LLM client configured under ``LLM_*``."""

from collections.abc import Callable

from app.adapters.llm.base import AbstractLLMClient
from app.adapters.llm.openai_client import OpenAIClient
from app.core.config import LLMSettings, settings
from app.core.errors import ValidationAppError


def _openai(llm: LLMSettings) -> AbstractLLMClient:
    if not llm.api_key:
        raise ValidationAppError(
            code="llm_missing_api_key",
            message="Company enrichment with OpenAI needs LLM_API_KEY",
        )
    return OpenAIClient(
        api_key=llm.api_key,
        model=llm.model,
        base_url=llm.base_url,
        timeout_seconds=llm.timeout_seconds,
    )


# Any OpenAI-compatible endpoint goes through "openai" with LLM_BASE_URL.
_BUILDERS: dict[str, Callable[[LLMSettings], AbstractLLMClient]] = {
    "openai": _openai,
}


def create_llm_client() -> AbstractLLMClient:
    """Return the enrichment client for ``settings.llm.provider``.

    Raises:
        ValidationAppError: Unknown provider or missing credentials.
    """
    provider = settings.llm.provider.lower()
    builder = _BUILDERS.get(provider)
    if builder is None:
        raise ValidationAppError(
            code="llm_unknown_provider",
            message=f"Unknown LLM provider '{provider}' (supported: {', '.join(sorted(_BUILDERS))})",
            details={"provider": provider},
        )
    return builder(settings.llm)
