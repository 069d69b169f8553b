# enrichment_engine/enrichment/providers/__init__.py
"""Search provider clients, one per provider category."""

from typing import Optional

import httpx

from enrichment_engine.core.circuit_breaker import get_provider_breaker
from enrichment_engine.core.config import EnrichmentConfig
from enrichment_engine.core.telemetry import Telemetry
from enrichment_engine.enrichment.providers.base import ProviderOutcome, SearchProviderClient
from enrichment_engine.enrichment.providers.serpapi import SerpApiSearchClient
from enrichment_engine.enrichment.providers.tavily_search import TavilySearchClient
from enrichment_engine.enrichment.schemas import PROVIDER_PRECEDENCE

__all__ = [
    "ProviderOutcome",
    "SearchProviderClient",
    "SerpApiSearchClient",
    "TavilySearchClient",
    "build_provider_clients",
]


def build_provider_clients(
    config: EnrichmentConfig,
    telemetry: Telemetry,
    http_client: Optional[httpx.AsyncClient] = None,
) -> list[SearchProviderClient]:
    """
    Build one client per category, in precedence order.

    Categories without an API key still get a client; it skips every call.
    """
    clients: list[SearchProviderClient] = []

    for category in PROVIDER_PRECEDENCE:
        if config.search_backend == "tavily":
            client: SearchProviderClient = TavilySearchClient(
                category=category,
                api_key=config.api_key_for(category),
                timeout_seconds=config.request_timeout_seconds,
                breaker=get_provider_breaker(category.value),
                telemetry=telemetry,
            )
        else:
            client = SerpApiSearchClient(
                category=category,
                api_key=config.api_key_for(category),
                base_url=config.search_base_url,
                timeout_seconds=config.request_timeout_seconds,
                http_client=http_client,
                breaker=get_provider_breaker(category.value),
                telemetry=telemetry,
            )
        clients.append(client)

    return clients
