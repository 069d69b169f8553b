# tests/enrichment/test_orchestrator.py
"""
Tests for the LangGraph enrichment orchestrator.
"""

import asyncio
import logging
import time
from unittest.mock import patch

import httpx
import pytest

from enrichment_engine.core.config import EnrichmentConfig
from enrichment_engine.core.exceptions import InvalidSubjectError, SearchProviderError
from enrichment_engine.core.telemetry import EnrichmentEvent
from enrichment_engine.enrichment import partials as partials_module
from enrichment_engine.enrichment.cache import ProfileCache
from enrichment_engine.enrichment.orchestrator import ProfileEnrichmentOrchestrator
from enrichment_engine.enrichment.providers import build_provider_clients
from enrichment_engine.enrichment.schemas import (
    PROVIDER_PRECEDENCE,
    CompanyOwnership,
    ProviderCategory,
    SubjectDescriptor,
)

ADA = SubjectDescriptor(
    name="Ada Lovelace",
    company_ownership=[CompanyOwnership(company_name="Analytical Engines", role="Founder")],
)

PROFESSIONAL_ITEMS = [
    {
        "title": "Ada Lovelace - Analyst at Analytical Engines | LinkedIn",
        "link": "https://www.linkedin.com/in/ada-lovelace",
        "snippet": "Ada Lovelace is a mathematician based in London. Skills: Mathematics, Poetry.",
    }
]
ENCYCLOPEDIA_ITEMS = [
    {
        "title": "Ada Lovelace - Wikipedia",
        "link": "https://en.wikipedia.org/wiki/Ada_Lovelace",
        "snippet": "Ada Lovelace was an English writer. She studied at University of London.",
    }
]
NEWS_ITEMS = [
    {
        "title": "Ada Lovelace honored for computing notes",
        "link": "https://news.example.com/ada",
        "snippet": "Ada received an award on October 13, 2015 for her work on the engine.",
    }
]
SOCIAL_ITEMS = [{"title": "Ada (@ada)", "link": "https://twitter.com/ada", "snippet": "Numbers."}]
COMPANY_ITEMS = [
    {
        "title": "Analytical Engines - Company Profile",
        "link": "https://companies.example.com/analytical-engines",
        "snippet": "Builds engines.",
    }
]

ITEMS = {
    ProviderCategory.PROFESSIONAL: PROFESSIONAL_ITEMS,
    ProviderCategory.ENCYCLOPEDIA: ENCYCLOPEDIA_ITEMS,
    ProviderCategory.NEWS: NEWS_ITEMS,
    ProviderCategory.SOCIAL: SOCIAL_ITEMS,
    ProviderCategory.COMPANY: COMPANY_ITEMS,
}


def providers(stub_provider, telemetry=None, **overrides):
    """One stub per category; overrides map category value -> stub kwargs."""
    built = []
    for category in PROVIDER_PRECEDENCE:
        kwargs = {"items": ITEMS[category], "telemetry": telemetry}
        kwargs.update(overrides.get(category.value, {}))
        built.append(stub_provider(category, **kwargs))
    return built


class TestEnrich:
    """End-to-end runs over stub providers."""

    @pytest.mark.asyncio
    async def test_full_profile(self, stub_provider, telemetry):
        """Test a full enrichment run."""
        orchestrator = ProfileEnrichmentOrchestrator(providers(stub_provider), telemetry=telemetry)

        profile = await orchestrator.enrich(ADA, "cust_1")

        assert profile.basic_info.name == "Ada Lovelace"
        assert profile.basic_info.short_bio == "Ada Lovelace is a mathematician based in London."
        assert profile.basic_info.current_location == "London"
        assert profile.professional.current_role.title == "Analyst"
        assert profile.professional.skills == ["Mathematics", "Poetry"]
        assert [e.institution for e in profile.professional.education] == ["University of London"]
        assert profile.social.linked_in.url == "https://www.linkedin.com/in/ada-lovelace"
        assert profile.social.twitter.handle == "ada"
        assert profile.media_presence.news_articles[0].url == "https://news.example.com/ada"
        assert profile.professional.achievements[0].date == "October 13, 2015"
        assert [(c.name, c.role) for c in profile.companies] == [("Analytical Engines", "Founder")]

    @pytest.mark.asyncio
    async def test_each_provider_gets_its_own_query(self, stub_provider):
        """Test each provider receives its category query."""
        stubs = providers(stub_provider)
        orchestrator = ProfileEnrichmentOrchestrator(stubs)

        await orchestrator.enrich(ADA, "cust_1")

        by_category = {stub.category: stub.queries for stub in stubs}
        assert by_category[ProviderCategory.PROFESSIONAL] == [
            "Ada+Lovelace Analytical+Engines site%3Alinkedin.com%2Fin%2F"
        ]
        assert all(len(queries) == 1 for queries in by_category.values())

    @pytest.mark.asyncio
    async def test_readable_queries_are_logged(self, stub_provider, caplog):
        """Test each provider's query is logged in readable form at DEBUG."""
        orchestrator = ProfileEnrichmentOrchestrator(providers(stub_provider))

        with caplog.at_level(logging.DEBUG, logger="enrichment_engine.enrichment.orchestrator"):
            await orchestrator.enrich(ADA, "cust_1")

        assert "Searching professional: Ada Lovelace Analytical Engines site:linkedin.com/in/" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["Ada Lovelace", "  Ada  Lovelace ", "Zoë O'Brien", "李小龍"])
    async def test_name_is_copied_verbatim(self, stub_provider, name):
        """Test the subject name is returned unchanged."""
        orchestrator = ProfileEnrichmentOrchestrator(providers(stub_provider))

        profile = await orchestrator.enrich({"name": name}, "cust_1")

        assert profile.basic_info.name == name

    @pytest.mark.asyncio
    async def test_empty_results_keep_every_array(self, stub_provider):
        """Test empty results still serialize every array."""
        stubs = [stub_provider(category) for category in PROVIDER_PRECEDENCE]
        orchestrator = ProfileEnrichmentOrchestrator(stubs)

        document = (await orchestrator.enrich(ADA, "cust_1")).to_document()

        assert document["professional"]["jobHistory"] == []
        assert document["social"]["other"] == []
        assert document["mediaPresence"]["newsArticles"] == []
        assert document["interests"]["publicActivities"] == []
        assert document["companies"] == []

    @pytest.mark.asyncio
    async def test_providers_run_in_parallel(self, stub_provider):
        """Test providers are queried concurrently."""
        overrides = {category.value: {"delay": 0.3} for category in PROVIDER_PRECEDENCE}
        orchestrator = ProfileEnrichmentOrchestrator(providers(stub_provider, **overrides))

        started = time.monotonic()
        await orchestrator.enrich(ADA, "cust_1")

        assert time.monotonic() - started < 1.0


class TestPrecedence:
    """Merge order does not depend on which provider answers first."""

    @pytest.mark.asyncio
    async def test_slow_professional_still_wins_bio(self, stub_provider):
        """Test a slow professional provider still wins the bio."""
        orchestrator = ProfileEnrichmentOrchestrator(
            providers(stub_provider, professional={"delay": 0.2})
        )

        profile = await orchestrator.enrich(ADA, "cust_1")

        assert profile.basic_info.short_bio == "Ada Lovelace is a mathematician based in London."

    @pytest.mark.asyncio
    async def test_partials_are_merged_in_precedence_order(self, stub_provider):
        """Test partials are built in precedence order."""
        overrides = {
            category.value: {"delay": 0.05 * (len(PROVIDER_PRECEDENCE) - i)}
            for i, category in enumerate(PROVIDER_PRECEDENCE)
        }
        orchestrator = ProfileEnrichmentOrchestrator(providers(stub_provider, **overrides))

        with patch(
            "enrichment_engine.enrichment.orchestrator.build_partial",
            wraps=partials_module.build_partial,
        ) as build_partial:
            await orchestrator.enrich(ADA, "cust_1")

        categories = [call.args[0] for call in build_partial.call_args_list]
        assert categories == list(PROVIDER_PRECEDENCE)


class TestDegradation:
    """Provider, extraction and cache failures never fail the run."""

    @pytest.mark.asyncio
    async def test_failed_providers_degrade(self, stub_provider, metrics, telemetry):
        """Test failing providers degrade to empty partials."""
        orchestrator = ProfileEnrichmentOrchestrator(
            providers(
                stub_provider,
                telemetry=telemetry,
                news={"error": SearchProviderError("stub:news", "rate_limited", status_code=429)},
                social={"error": RuntimeError("boom")},
            ),
            telemetry=telemetry,
        )

        profile = await orchestrator.enrich(ADA, "cust_1")

        assert profile.professional.current_role.title == "Analyst"
        assert profile.media_presence.news_articles == []
        assert profile.social.twitter is None
        assert metrics.count(EnrichmentEvent.PROVIDER_DEGRADED) == 2
        assert metrics.count(EnrichmentEvent.PROVIDER_DEGRADED, reason="rate_limited") == 1
        assert metrics.count(EnrichmentEvent.PROVIDER_DEGRADED, reason="unexpected_error") == 1
        assert metrics.count(EnrichmentEvent.ENRICHMENT_COMPLETED) == 1

    @pytest.mark.asyncio
    async def test_provider_raising_from_fetch(self, stub_provider, metrics, telemetry):
        """Test a provider raising from fetch is contained."""
        stubs = providers(stub_provider)

        async def broken_fetch(query, result_limit=10):
            raise RuntimeError("client bug")

        stubs[0].fetch = broken_fetch
        orchestrator = ProfileEnrichmentOrchestrator(stubs, telemetry=telemetry)

        profile = await orchestrator.enrich(ADA, "cust_1")

        assert profile.professional.current_role is None
        assert profile.basic_info.short_bio == "Ada Lovelace was an English writer."
        assert metrics.count(EnrichmentEvent.PROVIDER_DEGRADED, provider="professional") == 1

    @pytest.mark.asyncio
    async def test_extraction_failure_yields_empty_partial(self, stub_provider):
        """Test an extraction error yields an empty partial."""
        orchestrator = ProfileEnrichmentOrchestrator(providers(stub_provider))
        real_build_partial = partials_module.build_partial

        def flaky_build_partial(category, results, subject):
            if category == ProviderCategory.SOCIAL:
                raise ValueError("bad snippet")
            return real_build_partial(category, results, subject)

        with patch(
            "enrichment_engine.enrichment.orchestrator.build_partial",
            side_effect=flaky_build_partial,
        ):
            profile = await orchestrator.enrich(ADA, "cust_1")

        assert profile.social.twitter is None
        assert profile.professional.current_role.title == "Analyst"

    @pytest.mark.asyncio
    async def test_cache_failure_still_returns_profile(self, stub_provider, fake_redis, metrics, telemetry):
        """Test a cache outage still returns a profile."""
        fake_redis.fail = True
        orchestrator = ProfileEnrichmentOrchestrator(
            providers(stub_provider),
            cache=ProfileCache(fake_redis, telemetry=telemetry),
            telemetry=telemetry,
        )

        profile = await orchestrator.enrich(ADA, "cust_1")

        assert profile.basic_info.name == "Ada Lovelace"
        assert metrics.count(EnrichmentEvent.CACHE_ERROR, operation="read") == 1
        assert metrics.count(EnrichmentEvent.CACHE_ERROR, operation="write") == 1


class TestCaching:
    """Cache-aside behavior."""

    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, stub_provider, fake_redis, metrics, telemetry):
        """Test a repeat call is served from cache."""
        stubs = providers(stub_provider)
        orchestrator = ProfileEnrichmentOrchestrator(
            stubs, cache=ProfileCache(fake_redis), telemetry=telemetry
        )

        first = await orchestrator.enrich(ADA, "cust_1")
        calls_after_first = [stub.calls for stub in stubs]
        second = await orchestrator.enrich(ADA, "cust_1")

        assert second.to_json() == first.to_json()
        assert [stub.calls for stub in stubs] == calls_after_first == [1] * len(stubs)
        assert metrics.count(EnrichmentEvent.CACHE_MISS) == 1
        assert metrics.count(EnrichmentEvent.CACHE_HIT) == 1
        assert fake_redis.writes == 1

    @pytest.mark.asyncio
    async def test_cache_is_keyed_by_cache_key(self, stub_provider, fake_redis):
        """Test profiles are cached under the cache key."""
        stubs = providers(stub_provider)
        orchestrator = ProfileEnrichmentOrchestrator(stubs, cache=ProfileCache(fake_redis))

        await orchestrator.enrich(ADA, "cust_1")
        await orchestrator.enrich(ADA, "cust_2")

        assert all(stub.calls == 2 for stub in stubs)
        assert set(fake_redis.store) == {"profile_enrichment:cust_1", "profile_enrichment:cust_2"}

    @pytest.mark.asyncio
    async def test_configured_ttl_is_used(self, stub_provider, fake_redis):
        """Test the configured TTL is used."""
        orchestrator = ProfileEnrichmentOrchestrator(
            providers(stub_provider),
            cache=ProfileCache(fake_redis),
            config=EnrichmentConfig(cache_ttl_seconds=120),
        )

        await orchestrator.enrich(ADA, "cust_1")

        assert fake_redis.ttls["profile_enrichment:cust_1"] == 120


class TestUnconfigured:
    @pytest.mark.asyncio
    async def test_no_keys_returns_name_only_profile_without_network(self, metrics, telemetry):
        """Test no keys give a name-only profile without network calls."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[])

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients = build_provider_clients(EnrichmentConfig(), telemetry, http_client=http_client)
        orchestrator = ProfileEnrichmentOrchestrator(clients, telemetry=telemetry)

        profile = await asyncio.wait_for(
            orchestrator.enrich({"name": "Ada Lovelace"}, "cust_ada"), timeout=2.0
        )

        assert requests == []
        assert orchestrator.configured_categories == []
        assert profile == profile.empty("Ada Lovelace")
        assert metrics.count(EnrichmentEvent.PROVIDER_SKIPPED) == 5
        await http_client.aclose()


class TestValidation:
    """Invalid input is rejected before any provider call."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("subject", [{"name": ""}, {"name": "   "}, {}])
    async def test_blank_name_rejected(self, stub_provider, metrics, telemetry, subject):
        """Test blank names are rejected."""
        stubs = providers(stub_provider)
        orchestrator = ProfileEnrichmentOrchestrator(stubs, telemetry=telemetry)

        with pytest.raises(InvalidSubjectError) as exc_info:
            await orchestrator.enrich(subject, "cust_1")

        assert exc_info.value.field == "name"
        assert all(stub.calls == 0 for stub in stubs)
        assert metrics.count(EnrichmentEvent.ENRICHMENT_REJECTED) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cache_key", ["", "   "])
    async def test_blank_cache_key_rejected(self, stub_provider, cache_key):
        """Test blank cache keys are rejected."""
        stubs = providers(stub_provider)
        orchestrator = ProfileEnrichmentOrchestrator(stubs)

        with pytest.raises(InvalidSubjectError) as exc_info:
            await orchestrator.enrich(ADA, cache_key)

        assert exc_info.value.field == "cache_key"
        assert all(stub.calls == 0 for stub in stubs)

    @pytest.mark.asyncio
    async def test_wrong_subject_type_rejected(self, stub_provider):
        """Test subjects of the wrong type are rejected."""
        orchestrator = ProfileEnrichmentOrchestrator(providers(stub_provider))

        with pytest.raises(InvalidSubjectError):
            await orchestrator.enrich("Ada Lovelace", "cust_1")
