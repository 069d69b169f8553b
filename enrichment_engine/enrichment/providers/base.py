# enrichment_engine/enrichment/providers/base.py
"""
Fail-soft search provider client.

A provider call never raises into the orchestrator. Missing credentials or
an empty query skip the call; every failure (HTTP status, timeout,
transport, bad payload, open circuit) becomes an empty, degraded outcome
with a provider.degraded event. Calls are not retried.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from enrichment_engine.core.circuit_breaker import CircuitBreaker, get_provider_breaker
from enrichment_engine.core.exceptions import CircuitBreakerOpenError, SearchProviderError
from enrichment_engine.core.telemetry import EnrichmentEvent, Telemetry
from enrichment_engine.enrichment.schemas import ProviderCategory, ProviderResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_RESULT_LIMIT = 10


class ProviderOutcome(BaseModel):
    """Result of one provider call, including how it went."""

    category: ProviderCategory
    results: list[ProviderResult] = Field(default_factory=list)
    degraded: bool = False
    reason: Optional[str] = None
    skipped: bool = False


class SearchProviderClient(ABC):
    """
    Base class for search backends.

    Subclasses implement _fetch() and raise SearchProviderError with a
    reason code on failure; this class handles skipping, the circuit
    breaker, item validation and degradation reporting.
    """

    backend = "search"

    def __init__(
        self,
        category: ProviderCategory,
        api_key: Optional[str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        breaker: Optional[CircuitBreaker] = None,
        telemetry: Optional[Telemetry] = None,
    ):
        self.category = category
        self.api_key = (api_key or "").strip() or None
        self.timeout_seconds = timeout_seconds
        self.breaker = breaker or get_provider_breaker(category.value)
        self.telemetry = telemetry or Telemetry()

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None

    @property
    def provider_name(self) -> str:
        return f"{self.backend}:{self.category.value}"

    @abstractmethod
    async def _fetch(self, query: str, result_limit: int) -> list[Any]:
        """Issue the outbound call and return the raw result items."""

    async def fetch(self, query: str, result_limit: int = DEFAULT_RESULT_LIMIT) -> ProviderOutcome:
        """
        Search and report the outcome.

        Args:
            query: URL-encoded query string
            result_limit: Maximum number of results to request and keep

        Returns:
            ProviderOutcome; results are empty when skipped or degraded
        """
        if not self.is_configured:
            return self._skip("unconfigured")
        if not query or not query.strip():
            return self._skip("empty_query")

        try:
            async with self.breaker:
                raw_items = await self._fetch(query, result_limit)
        except CircuitBreakerOpenError as e:
            return self._degrade("circuit_open", e)
        except SearchProviderError as e:
            return self._degrade(e.reason, e)
        except Exception as e:
            return self._degrade("unexpected_error", e)

        results = self._validate(raw_items)[:result_limit]
        logger.info(f"{self.provider_name} returned {len(results)} results")
        return ProviderOutcome(category=self.category, results=results)

    async def search(self, query: str, result_limit: int = DEFAULT_RESULT_LIMIT) -> list[ProviderResult]:
        return (await self.fetch(query, result_limit)).results

    def _validate(self, raw_items: list[Any]) -> list[ProviderResult]:
        results = []
        for item in raw_items:
            try:
                results.append(ProviderResult.model_validate(item))
            except ValidationError as e:
                logger.debug(f"{self.provider_name} dropped invalid item: {e.error_count()} errors")
        return results

    def _skip(self, reason: str) -> ProviderOutcome:
        logger.debug(f"Skipping {self.provider_name}: {reason}")
        self.telemetry.emit(
            EnrichmentEvent.PROVIDER_SKIPPED,
            provider=self.category.value,
            reason=reason,
        )
        return ProviderOutcome(category=self.category, skipped=True, reason=reason)

    def _degrade(self, reason: str, error: Exception) -> ProviderOutcome:
        logger.warning(f"{self.provider_name} degraded ({reason}): {error}")
        self.telemetry.emit(
            EnrichmentEvent.PROVIDER_DEGRADED,
            provider=self.category.value,
            reason=reason,
            error_type=type(error).__name__,
        )
        return ProviderOutcome(category=self.category, degraded=True, reason=reason)

    def _error(
        self,
        reason: str,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
    ) -> SearchProviderError:
        return SearchProviderError(
            provider=self.provider_name,
            reason=reason,
            status_code=status_code,
            message=message,
        )

    async def close(self) -> None:
        """Release backend resources."""
