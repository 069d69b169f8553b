# enrichment_engine/features/enrichment/schemas.py
"""API schemas for profile enrichment endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from enrichment_engine.enrichment.schemas import SubjectDescriptor


class EnrichmentRequest(SubjectDescriptor):
    """Subject to enrich. Accepts camelCase or snake_case keys."""


class EnrichmentHealthResponse(BaseModel):
    """Configuration and runtime state of the enrichment engine."""

    enabled: bool = Field(..., description="At least one search provider is configured")
    backend: str = Field(..., description="Search backend: serpapi or tavily")
    configured_categories: list[str] = Field(
        default_factory=list, description="Provider categories with an API key"
    )
    circuit_breakers: list[dict[str, Any]] = Field(
        default_factory=list, description="Per-provider circuit breaker state"
    )
    counters: dict[str, int] = Field(
        default_factory=dict, description="Telemetry event counters since startup"
    )
