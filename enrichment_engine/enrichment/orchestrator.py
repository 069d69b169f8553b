# enrichment_engine/enrichment/orchestrator.py
"""
Profile Enrichment Orchestrator using LangGraph.

Runs the enrichment workflow for one subject:
1. Check the cache (a hit ends the run)
2. Fan out to every search provider in parallel
3. Extract a partial profile from each provider's results
4. Merge partials under the fixed provider precedence
5. Write the merged profile to the cache

Provider and cache failures degrade the result and never fail the run. The
only caller-visible error is an invalid subject or cache key.
"""

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any, Optional, TypedDict, Union

import httpx
import redis.asyncio as aioredis
from langgraph.graph import END, StateGraph
from pydantic import ValidationError

from enrichment_engine.core.config import EnrichmentConfig, Settings, get_settings
from enrichment_engine.core.exceptions import InvalidSubjectError
from enrichment_engine.core.telemetry import EnrichmentEvent, Telemetry
from enrichment_engine.enrichment.cache import ProfileCache, create_redis_client
from enrichment_engine.enrichment.merger import merge
from enrichment_engine.enrichment.partials import build_partial
from enrichment_engine.enrichment.providers import (
    ProviderOutcome,
    SearchProviderClient,
    build_provider_clients,
)
from enrichment_engine.enrichment.queries import generate_queries
from enrichment_engine.enrichment.schemas import (
    PROVIDER_PRECEDENCE,
    EnrichedProfile,
    PartialProfile,
    ProviderCategory,
    QuerySet,
    SubjectDescriptor,
)

logger = logging.getLogger(__name__)


class EnrichmentState(TypedDict, total=False):
    """Graph state for one enrichment run."""

    subject: SubjectDescriptor
    cache_key: str
    cache_hit: bool
    queries: QuerySet
    outcomes: dict[ProviderCategory, ProviderOutcome]
    partials: list[PartialProfile]
    profile: Optional[EnrichedProfile]


class ProfileEnrichmentOrchestrator:
    """
    Public entry point of the enrichment engine.

    Provider clients, the cache and configuration are injected, so tests can
    substitute fakes without network access.

    Usage:
        orchestrator = build_orchestrator()
        profile = await orchestrator.enrich({"name": "Ada Lovelace"}, "cust_42")
    """

    def __init__(
        self,
        providers: list[SearchProviderClient],
        cache: Optional[ProfileCache] = None,
        config: Optional[EnrichmentConfig] = None,
        telemetry: Optional[Telemetry] = None,
    ):
        self.providers = list(providers)
        self.cache = cache
        self.config = config or EnrichmentConfig()
        self.telemetry = telemetry or Telemetry()
        self.graph = self._create_graph()

    @property
    def configured_categories(self) -> list[ProviderCategory]:
        return [p.category for p in self.providers if p.is_configured]

    # ===========================================
    # Graph nodes
    # ===========================================

    async def _cache_check_node(self, state: EnrichmentState) -> dict[str, Any]:
        cache_key = state["cache_key"]
        profile = await self.cache.get(cache_key) if self.cache else None

        if profile is not None:
            logger.info(f"Cache hit for {cache_key}")
            self.telemetry.emit(EnrichmentEvent.CACHE_HIT, cache_key=cache_key)
        else:
            self.telemetry.emit(EnrichmentEvent.CACHE_MISS, cache_key=cache_key)

        return {"profile": profile, "cache_hit": profile is not None}

    async def _fanout_node(self, state: EnrichmentState) -> dict[str, Any]:
        """Query every provider concurrently; a single join for all of them."""
        queries = generate_queries(state["subject"])
        limit = self.config.result_limit
        for provider in self.providers:
            logger.debug(f"Searching {provider.category.value}: {queries.decoded(provider.category)}")

        settled = await asyncio.gather(
            *(p.fetch(queries.for_category(p.category), limit) for p in self.providers),
            return_exceptions=True,
        )

        outcomes: dict[ProviderCategory, ProviderOutcome] = {}
        for provider, outcome in zip(self.providers, settled):
            if isinstance(outcome, Exception):
                logger.warning(f"Provider {provider.category.value} raised: {outcome}")
                self.telemetry.emit(
                    EnrichmentEvent.PROVIDER_DEGRADED,
                    provider=provider.category.value,
                    reason="unexpected_error",
                    error_type=type(outcome).__name__,
                )
                outcome = ProviderOutcome(
                    category=provider.category, degraded=True, reason="unexpected_error"
                )
            outcomes[provider.category] = outcome

        return {"queries": queries, "outcomes": outcomes}

    async def _extract_node(self, state: EnrichmentState) -> dict[str, Any]:
        subject = state["subject"]
        outcomes = state.get("outcomes", {})
        partials = []

        for category in PROVIDER_PRECEDENCE:
            outcome = outcomes.get(category)
            if outcome is None:
                continue
            try:
                partials.append(build_partial(category, outcome.results, subject))
            except Exception as e:
                logger.warning(f"Extraction failed for {category.value}: {e}")
                partials.append(PartialProfile(category=category))

        return {"partials": partials}

    async def _merge_node(self, state: EnrichmentState) -> dict[str, Any]:
        return {"profile": merge(state["subject"], state.get("partials", []))}

    async def _cache_write_node(self, state: EnrichmentState) -> dict[str, Any]:
        if self.cache is not None:
            await self.cache.set(state["cache_key"], state["profile"], self.config.cache_ttl_seconds)
        return {}

    @staticmethod
    def _route_after_cache(state: EnrichmentState) -> str:
        return "hit" if state.get("cache_hit") else "miss"

    def _create_graph(self):
        """
        Flow:
        cache_check -> (hit) END
        cache_check -> (miss) fanout -> extract -> merge -> cache_write -> END
        """
        workflow = StateGraph(EnrichmentState)

        workflow.add_node("cache_check", self._cache_check_node)
        workflow.add_node("fanout", self._fanout_node)
        workflow.add_node("extract", self._extract_node)
        workflow.add_node("merge", self._merge_node)
        workflow.add_node("cache_write", self._cache_write_node)

        workflow.set_entry_point("cache_check")
        workflow.add_conditional_edges(
            "cache_check",
            self._route_after_cache,
            {"hit": END, "miss": "fanout"},
        )
        workflow.add_edge("fanout", "extract")
        workflow.add_edge("extract", "merge")
        workflow.add_edge("merge", "cache_write")
        workflow.add_edge("cache_write", END)

        return workflow.compile()

    # ===========================================
    # Public API
    # ===========================================

    def _validate(
        self,
        subject: Union[SubjectDescriptor, Mapping],
        cache_key: str,
    ) -> SubjectDescriptor:
        try:
            if isinstance(subject, Mapping):
                subject = SubjectDescriptor.model_validate(dict(subject))
            elif not isinstance(subject, SubjectDescriptor):
                raise InvalidSubjectError("Subject must be a SubjectDescriptor or a mapping")

            if not subject.name or not subject.name.strip():
                raise InvalidSubjectError("Subject name must not be empty", field="name")
            if not isinstance(cache_key, str) or not cache_key.strip():
                raise InvalidSubjectError("Cache key must not be empty", field="cache_key")

        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            error = InvalidSubjectError(f"Invalid subject: {first['msg']}", field=field)
        except InvalidSubjectError as e:
            error = e
        else:
            return subject

        self.telemetry.emit(EnrichmentEvent.ENRICHMENT_REJECTED, field=error.field, error=error.message)
        raise error

    async def enrich(
        self,
        subject: Union[SubjectDescriptor, Mapping],
        cache_key: str,
    ) -> EnrichedProfile:
        """
        Enrich a subject, serving from cache when fresh.

        Args:
            subject: SubjectDescriptor or a mapping that validates into one
            cache_key: Stable identifier of the subject (not its name)

        Returns:
            EnrichedProfile; basicInfo.name is always the subject's name

        Raises:
            InvalidSubjectError: Subject name or cache key is blank or invalid
        """
        subject = self._validate(subject, cache_key)
        started = time.monotonic()

        final_state = await self.graph.ainvoke({"subject": subject, "cache_key": cache_key})

        profile: EnrichedProfile = final_state["profile"]
        outcomes = final_state.get("outcomes", {})
        degraded = [c.value for c, o in outcomes.items() if o.degraded]
        skipped = [c.value for c, o in outcomes.items() if o.skipped]

        self.telemetry.emit(
            EnrichmentEvent.ENRICHMENT_COMPLETED,
            cache_key=cache_key,
            cache_hit=bool(final_state.get("cache_hit")),
            degraded_count=len(degraded),
            degraded_providers=degraded,
            skipped_providers=skipped,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )

        if degraded:
            logger.info(f"Enrichment for {cache_key} completed with degraded providers: {degraded}")
        else:
            logger.info(f"Enrichment for {cache_key} completed")

        return profile

    async def close(self) -> None:
        for provider in self.providers:
            await provider.close()
        if self.cache is not None:
            await self.cache.close()


def build_orchestrator(
    settings: Optional[Settings] = None,
    telemetry: Optional[Telemetry] = None,
    redis_client: Optional[aioredis.Redis] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ProfileEnrichmentOrchestrator:
    """
    Build a fully wired orchestrator from settings.

    Raises:
        EnrichmentDisabledError: No search provider API key is configured at all
    """
    settings = settings or get_settings()
    config = settings.enrichment_config()
    config.ensure_configured()

    telemetry = telemetry or Telemetry()
    cache = ProfileCache(
        redis_client=redis_client or create_redis_client(config.redis_url),
        ttl_seconds=config.cache_ttl_seconds,
        key_prefix=config.cache_key_prefix,
        telemetry=telemetry,
    )
    providers = build_provider_clients(config, telemetry, http_client=http_client)

    logger.info(
        f"Enrichment orchestrator ready: backend={config.search_backend}, "
        f"providers={[c.value for c in config.configured_categories]}"
    )
    return ProfileEnrichmentOrchestrator(providers, cache, config, telemetry)
