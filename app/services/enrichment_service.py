"""Company profile enrichment via LLM.

Fills the public-profile fields (vision, products, business model, clients,
competitors) of a company dossier that the imported text files never carry.
The LLM answer is cached per company name; the dossier row is updated on
every call so a re-imported dossier gets its fields back.
"""

from __future__ import annotations

import logging
from typing import Any

from app.adapters.backend import filters as f
from app.adapters.backend.base import AbstractBackendClient
from app.adapters.llm.base import AbstractLLMClient
from app.core.config import settings
from app.core.errors import NotFoundAppError, ValidationAppError
from app.services.company_service import COMPANIES_TABLE, ENRICHMENT_FIELDS
from app.utils.simple_cache import SimpleTTLCache, build_cache_key

logger = logging.getLogger(__name__)

# Bump when the prompt changes so cached answers are not reused.
PROMPT_VERSION = "v1"

SYSTEM_PROMPT = """あなたは企業情報を調査するアシスタントです。与えられた企業名について、最新の公開情報を基に以下の項目を調査し、JSON形式で回答してください。情報が見つからない場合は空文字列を返してください。

回答フォーマット:
{
  "vision": "企業のビジョン・ミッション",
  "products": "主要なプロダクト/サービス（3つ程度、箇条書き）",
  "business_model": "ビジネスモデルの説明",
  "clients": "主要クライアント（3-5社程度）",
  "competitors": "競合企業（3-5社程度）"
}"""


def build_prompt(search_name: str) -> str:
    return f"企業名: {search_name}\n\n上記の企業について調査してください。"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return "\n".join(str(item) for item in value if item)
    return str(value)


def extract_profile(raw: dict[str, Any]) -> dict[str, str]:
    """Keep only the enrichment fields; missing or empty ones become ``""``."""
    return {key: _as_text(raw.get(key)) for key in ENRICHMENT_FIELDS}


class EnrichmentService:
    """Orchestrates the LLM call, the cache and the dossier update.

    Attributes:
        backend: Hosted backend client.
        llm: LLM client adapter producing JSON objects.
        cache: TTL cache of profiles keyed by searched company name.
    """

    def __init__(
        self,
        backend: AbstractBackendClient,
        llm: AbstractLLMClient,
        cache: SimpleTTLCache[dict[str, str]],
    ) -> None:
        self.backend = backend
        self.llm = llm
        self.cache = cache

    async def _profile_for(self, search_name: str) -> dict[str, str]:
        cache_key = build_cache_key(search_name, salt=f"{settings.llm.model}:{PROMPT_VERSION}")
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("enrich.cache_hit", extra={"company": search_name})
            return dict(cached)

        raw = await self.llm.generate_json(
            build_prompt(search_name),
            system_prompt=SYSTEM_PROMPT,
            temperature=settings.llm.temperature,
        )
        profile = extract_profile(raw)
        self.cache.set(cache_key, profile)
        return profile

    async def enrich(
        self,
        company_id: str,
        company_name: str,
        official_name: str | None = None,
    ) -> dict[str, Any]:
        """Enrich one dossier and return its merged ``basic_info``.

        Raises:
            ValidationAppError: Missing id or name.
            NotFoundAppError: No dossier with that id.
            LLMAppError: The model call failed or returned invalid JSON.
            BackendAppError: Reading or updating the dossier failed.
        """
        if not str(company_id).strip() or not company_name.strip():
            raise ValidationAppError(
                code="company_identity_required",
                message="Company ID and name are required",
            )

        search_name = (official_name or "").strip() or company_name.strip()
        profile = await self._profile_for(search_name)

        id_filter = [f.eq("id", company_id)]
        existing = await self.backend.select_one(COMPANIES_TABLE, columns="basic_info", filters=id_filter)
        if existing is None:
            raise NotFoundAppError(
                code="company_not_found",
                message="Company not found",
                details={"table": COMPANIES_TABLE, "resource_id": str(company_id)},
            )

        basic_info = {**(existing.get("basic_info") or {}), **profile}
        await self.backend.update(COMPANIES_TABLE, {"basic_info": basic_info}, filters=id_filter)

        logger.info(
            "enrich.completed",
            extra={
                "company_id": str(company_id),
                "filled_fields": sum(1 for v in profile.values() if v),
            },
        )
        return basic_info
