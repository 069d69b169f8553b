# enrichment_engine/enrichment/providers/tavily_search.py
"""
Tavily search backend.
Maps Tavily results (url, content, published_date) onto ProviderResult.
"""

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import unquote_plus

import httpx
from tavily import AsyncTavilyClient
from tavily.errors import (
    BadRequestError,
    ForbiddenError,
    InvalidAPIKeyError,
    TimeoutError as TavilyTimeoutError,
    UsageLimitExceededError,
)

from enrichment_engine.core.circuit_breaker import CircuitBreaker
from enrichment_engine.core.telemetry import Telemetry
from enrichment_engine.enrichment.providers.base import DEFAULT_TIMEOUT_SECONDS, SearchProviderClient
from enrichment_engine.enrichment.schemas import ProviderCategory

logger = logging.getLogger(__name__)

# Status codes behind the client's own error types
_TAVILY_ERROR_STATUS = {
    BadRequestError: 400,
    InvalidAPIKeyError: 401,
    ForbiddenError: 403,
}


class TavilySearchClient(SearchProviderClient):
    """
    Tavily search client.

    The news category searches Tavily's news topic; every other category
    uses general search with the query's site filters.
    """

    backend = "tavily"

    def __init__(
        self,
        category: ProviderCategory,
        api_key: Optional[str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[AsyncTavilyClient] = None,
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
        self._client = client

    def _get_client(self) -> AsyncTavilyClient:
        if self._client is None:
            self._client = AsyncTavilyClient(api_key=self.api_key)
        return self._client

    async def _fetch(self, query: str, result_limit: int) -> list[Any]:
        search_kwargs: dict[str, Any] = {
            "query": unquote_plus(query),
            "max_results": result_limit,
            "search_depth": "basic",
        }
        if self.category == ProviderCategory.NEWS:
            search_kwargs["topic"] = "news"

        try:
            response = await asyncio.wait_for(
                self._get_client().search(**search_kwargs),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException, TavilyTimeoutError) as e:
            raise self._error("timeout", message=f"Tavily search timed out: {e}")
        except UsageLimitExceededError as e:
            raise self._error("rate_limited", status_code=429, message=str(e))
        except (InvalidAPIKeyError, ForbiddenError, BadRequestError) as e:
            status = _TAVILY_ERROR_STATUS[type(e)]
            raise self._error(f"http_{status}", status_code=status, message=str(e))
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            reason = "rate_limited" if status == 429 else f"http_{status}"
            raise self._error(reason, status_code=status)
        except httpx.TransportError as e:
            raise self._error("transport_error", message=f"Transport error: {e}")

        if not isinstance(response, dict) or not isinstance(response.get("results", []), list):
            raise self._error("invalid_payload", message="Unexpected Tavily response")

        return [self._to_item(r) for r in response.get("results", [])]

    @staticmethod
    def _to_item(result: Any) -> Any:
        if not isinstance(result, dict):
            return result
        return {
            "title": result.get("title"),
            "link": result.get("url"),
            "snippet": result.get("content"),
            "date": result.get("published_date"),
        }
