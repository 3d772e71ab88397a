"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_backend_settings() -> "BackendSettings":
    """Build hosted backend settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return BackendSettings()  # type: ignore[call-arg]


def _build_llm_settings() -> "LLMSettings":
    """Build LLM settings from environment.

    See _build_backend_settings() for rationale about the type ignore.
    """

    return LLMSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_storage_settings() -> "StorageSettings":
    return StorageSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class BackendSettings(BaseSettings):
    """Hosted backend (Supabase) connection configuration.

    The service-role key is preferred for server-side table access; the
    anon key is the fallback when no service key is deployed.
    """

    url: str | None = Field(
        None,
        description="Project URL, e.g. https://xyzcompany.supabase.co",
    )
    anon_key: str | None = Field(
        None,
        description="Public anon key",
    )
    service_role_key: str | None = Field(
        None,
        description="Service-role key (bypasses row level security)",
    )
    timeout_seconds: float = Field(
        15.0,
        description="Request timeout in seconds",
    )
    pdf_bucket: str = Field(
        "job-pdfs",
        description="Storage bucket holding job PDFs",
    )
    signed_url_ttl_seconds: int = Field(
        3600,
        description="Lifetime of signed PDF URLs in seconds",
        ge=1,
    )
    max_rows_per_request: int = Field(
        1000,
        description="Row cap the backend applies to a single select",
        ge=1,
    )
    max_search_batches: int = Field(
        10,
        description="Maximum number of row-capped batches fetched for a keyword search",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        case_sensitive=False,
    )


class LLMSettings(BaseSettings):
    """LLM provider configuration used for company enrichment.

    Validation of provider-specific requirements happens in the factory.
    """

    provider: str = Field(
        "openai",
        description="LLM provider name (e.g., openai)",
    )
    model: str = Field(
        "gpt-4o-mini",
        description="Model name (e.g., gpt-4o-mini)",
    )
    api_key: str | None = Field(
        None,
        description="API key for cloud providers (required for OpenAI)",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint",
    )
    timeout_seconds: float = Field(
        45.0,
        description="Request timeout in seconds",
    )
    temperature: float = Field(
        0.3,
        description="Sampling temperature for enrichment prompts",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    max_keywords: int = Field(
        5,
        description="Maximum number of search keywords per request",
        ge=1,
    )
    max_keyword_chars: int = Field(
        50,
        description="Maximum length of a single normalized keyword",
        ge=1,
    )
    default_page_size: int = Field(
        20,
        description="Default page size for the search endpoint",
        ge=1,
    )
    max_page_size: int = Field(
        50,
        description="Maximum page size for the search endpoint",
        ge=1,
    )
    listing_page_size: int = Field(
        24,
        description="Fixed page size of the job listing endpoint",
        ge=1,
    )
    salary_floor: int = Field(
        300,
        description="Lower salary bound (10k JPY) that means 'no minimum'",
    )
    salary_ceiling: int = Field(
        2000,
        description="Upper salary bound (10k JPY) that means 'no maximum'",
    )
    company_cache_ttl_seconds: int = Field(
        3600,
        description="TTL for cached company enrichment results",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable in-memory rate limiting",
    )
    search_rate_limit_requests: int = Field(
        30,
        description="Search requests allowed per window (per user)",
        ge=1,
    )
    search_rate_limit_window_seconds: int = Field(
        60,
        description="Search rate limit window size in seconds",
        ge=1,
    )
    enrich_rate_limit_requests: int = Field(
        5,
        description="Enrichment requests allowed per window (per client IP)",
        ge=1,
    )
    enrich_rate_limit_window_seconds: int = Field(
        60,
        description="Enrichment rate limit window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    access_token_cookie: str = Field(
        "sb-access-token",
        description="Cookie carrying the user's access token",
    )
    refresh_token_cookie: str = Field(
        "sb-refresh-token",
        description="Cookie carrying the user's refresh token",
    )
    cookie_secure: bool = Field(
        True,
        description="Mark auth cookies as Secure",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class StorageSettings(BaseSettings):
    """Local file locations for PDFs and raw company dossiers."""

    pdf_root: Path = Field(
        PROJECT_ROOT / "public" / "pdf",
        description="Directory holding <company>/<job title>.pdf files",
    )
    companies_raw_dir: Path = Field(
        PROJECT_ROOT / "data" / "companies" / "raw",
        description="Directory of raw text company dossiers",
    )
    companies_processed_dir: Path = Field(
        PROJECT_ROOT / "data" / "companies" / "processed",
        description="Directory receiving converted JSON dossiers",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10 * 1024 * 1024, description="Rotate after this many bytes (0 disables)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation id header")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if required settings are missing.

    Environments:
    - development: Local development (search rate limiting is skipped)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    backend: BackendSettings = Field(default_factory=_build_backend_settings)
    llm: LLMSettings = Field(default_factory=_build_llm_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    storage: StorageSettings = Field(default_factory=_build_storage_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
