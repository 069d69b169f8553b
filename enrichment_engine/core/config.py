# enrichment_engine/core/config.py
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from enrichment_engine.core.exceptions import EnrichmentDisabledError
from enrichment_engine.enrichment.schemas import PROVIDER_PRECEDENCE, ProviderCategory


class EnrichmentConfig(BaseModel):
    """
    Immutable configuration handed to the orchestrator and provider clients.

    Built from Settings once; nothing below this object reads the
    environment.
    """

    model_config = ConfigDict(frozen=True)

    provider_keys: dict[ProviderCategory, Optional[str]] = Field(default_factory=dict)
    search_backend: Literal["serpapi", "tavily"] = "serpapi"
    search_base_url: str = "https://serpapi.com/search.json"
    cache_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0)
    cache_key_prefix: str = "profile_enrichment:"
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    result_limit: int = Field(default=10, ge=1, le=100)
    redis_url: str = "redis://localhost:6379/0"

    def api_key_for(self, category: ProviderCategory) -> Optional[str]:
        return self.provider_keys.get(category) or None

    @property
    def configured_categories(self) -> list[ProviderCategory]:
        return [c for c in PROVIDER_PRECEDENCE if self.api_key_for(c)]

    @property
    def is_configured(self) -> bool:
        return bool(self.configured_categories)

    def ensure_configured(self) -> None:
        """Fail fast when no search provider has credentials at all."""
        if not self.is_configured:
            raise EnrichmentDisabledError()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Core Services
    REDIS_URL: str = "redis://localhost:6379/0"

    # Search backend
    SEARCH_BACKEND: Literal["serpapi", "tavily"] = "serpapi"
    SEARCH_API_BASE_URL: str = "https://serpapi.com/search.json"

    # Shared key, used for any category without its own key
    SEARCH_API_KEY: str = ""

    # Per-category keys (blank means "use SEARCH_API_KEY", blank both means skip)
    PROFESSIONAL_SEARCH_API_KEY: str = ""
    NEWS_SEARCH_API_KEY: str = ""
    SOCIAL_SEARCH_API_KEY: str = ""
    COMPANY_SEARCH_API_KEY: str = ""
    ENCYCLOPEDIA_SEARCH_API_KEY: str = ""

    # Enrichment
    ENRICHMENT_CACHE_TTL_SECONDS: int = 24 * 60 * 60
    ENRICHMENT_CACHE_KEY_PREFIX: str = "profile_enrichment:"
    ENRICHMENT_REQUEST_TIMEOUT_SECONDS: float = 10.0
    ENRICHMENT_RESULT_LIMIT: int = 10

    # Circuit breaker
    CIRCUIT_BREAKER_FAIL_MAX: int = 5
    CIRCUIT_BREAKER_TIMEOUT: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"

    def _category_key(self, category: ProviderCategory) -> str:
        own = getattr(self, f"{category.value.upper()}_SEARCH_API_KEY", "")
        return (own or self.SEARCH_API_KEY).strip()

    @property
    def enrichment_enabled(self) -> bool:
        return any(self._category_key(c) for c in ProviderCategory)

    def enrichment_config(self) -> EnrichmentConfig:
        return EnrichmentConfig(
            provider_keys={c: self._category_key(c) or None for c in ProviderCategory},
            search_backend=self.SEARCH_BACKEND,
            search_base_url=self.SEARCH_API_BASE_URL,
            cache_ttl_seconds=self.ENRICHMENT_CACHE_TTL_SECONDS,
            cache_key_prefix=self.ENRICHMENT_CACHE_KEY_PREFIX,
            request_timeout_seconds=self.ENRICHMENT_REQUEST_TIMEOUT_SECONDS,
            result_limit=self.ENRICHMENT_RESULT_LIMIT,
            redis_url=self.REDIS_URL,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
