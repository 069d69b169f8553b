# enrichment_engine/enrichment/providers/serpapi.py
"""
JSON search API backend (SerpAPI-compatible).

One GET per call with the pre-encoded query. The response may be a bare
JSON list of {title, link, snippet, date?} objects or a SerpAPI-style
object holding organic_results / news_results.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from enrichment_engine.core.circuit_breaker import CircuitBreaker
from enrichment_engine.core.telemetry import Telemetry
from enrichment_engine.enrichment.providers.base import (
    DEFAULT_RESULT_LIMIT,
    DEFAULT_TIMEOUT_SECONDS,
    SearchProviderClient,
)
from enrichment_engine.enrichment.schemas import ProviderCategory

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://serpapi.com/search.json"

RESULT_KEYS = ("organic_results", "news_results")


class SerpApiSearchClient(SearchProviderClient):
    """
    httpx client for a JSON search API.

    The HTTP client may be shared across categories; a client created here
    is owned and closed by this instance.
    """

    backend = "serpapi"

    def __init__(
        self,
        category: ProviderCategory,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
        breaker: Optional[CircuitBreaker] = None,
        telemetry: Optional[Telemetry] = None,
    ):
        super().__init__(
            category=category,
            api_key=api_key,
            timeout_seconds=timeout_seconds,
            breaker=breaker,
            telemetry=telemetry,
        )
        self.base_url = base_url
        self._http_client = http_client
        self._owns_client = http_client is None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client (connection pooling)."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout_seconds,
                limits=httpx.Limits(max_connections=10),
            )
            self._owns_client = True
        return self._http_client

    def build_url(self, query: str, result_limit: int = DEFAULT_RESULT_LIMIT) -> str:
        """
        Full request URL.

        The query terms are already URL-encoded, so only the separating
        spaces are encoded here; the remaining parameters go through
        urlencode.
        """
        params = urlencode({"api_key": self.api_key, "num": result_limit, "engine": "google"})
        separator = "&" if "?" in self.base_url else "?"
        return f"{self.base_url}{separator}q={query.strip().replace(' ', '+')}&{params}"

    async def _fetch(self, query: str, result_limit: int) -> list[Any]:
        client = await self._get_http_client()

        try:
            response = await client.get(
                self.build_url(query, result_limit),
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise self._error("timeout", message=f"Request timed out: {e}")
        except httpx.TransportError as e:
            raise self._error("transport_error", message=f"Transport error: {e}")

        if response.status_code == 429:
            raise self._error("rate_limited", status_code=429)
        if not response.is_success:
            raise self._error(f"http_{response.status_code}", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise self._error("invalid_payload", message=f"Response is not JSON: {e}")

        return self._items(payload)

    def _items(self, payload: Any) -> list[Any]:
        if isinstance(payload, list):
            return payload

        if not isinstance(payload, dict) or payload.get("error"):
            raise self._error(
                "invalid_payload",
                message=f"Unexpected search response: {str(payload)[:200]}",
            )

        for key in RESULT_KEYS:
            items = payload.get(key)
            if items is None:
                continue
            if not isinstance(items, list):
                raise self._error("invalid_payload", message=f"{key} is not a list")
            return items

        return []

    async def close(self) -> None:
        """Close HTTP client."""
        if self._owns_client and self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
