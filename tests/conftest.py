import asyncio
import os
from typing import Any, Optional

# Settings are read at import time; give the app a key before it is imported
os.environ.setdefault("SEARCH_API_KEY", "test-key")

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from enrichment_engine.core.circuit_breaker import CircuitBreaker, reset_circuit_breakers
from enrichment_engine.core.telemetry import MetricsEventSink, Telemetry
from enrichment_engine.enrichment.providers.base import SearchProviderClient
from enrichment_engine.enrichment.schemas import ProviderCategory


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis (get/setex only)."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail = False
        self.gets = 0
        self.writes = 0

    async def get(self, key: str) -> Optional[str]:
        self.gets += 1
        if self.fail:
            raise RedisConnectionError("Connection refused")
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.writes += 1
        if self.fail:
            raise RedisConnectionError("Connection refused")
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def aclose(self) -> None:
        pass


class StubProvider(SearchProviderClient):
    """Provider double returning canned items, optionally late or failing."""

    backend = "stub"

    def __init__(
        self,
        category: ProviderCategory,
        items: Optional[list[dict[str, Any]]] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        api_key: Optional[str] = "test-key",
        telemetry: Optional[Telemetry] = None,
    ):
        super().__init__(
            category=category,
            api_key=api_key,
            timeout_seconds=1.0,
            breaker=CircuitBreaker(f"stub:{category.value}", fail_max=5, reset_timeout=60),
            telemetry=telemetry,
        )
        self.items = items or []
        self.delay = delay
        self.error = error
        self.queries: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.queries)

    async def _fetch(self, query: str, result_limit: int) -> list[Any]:
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.items)


@pytest.fixture(autouse=True)
def reset_breakers():
    """Circuit breakers are process-wide; start every test closed."""
    reset_circuit_breakers()
    yield
    reset_circuit_breakers()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def stub_provider():
    return StubProvider


@pytest.fixture
def metrics() -> MetricsEventSink:
    return MetricsEventSink()


@pytest.fixture
def telemetry(metrics) -> Telemetry:
    return Telemetry(metrics)
