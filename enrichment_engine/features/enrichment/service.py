# enrichment_engine/features/enrichment/service.py
"""
Business logic for the profile enrichment feature.
"""

import logging
from typing import Any, Optional

from enrichment_engine.core.circuit_breaker import get_all_breaker_stats
from enrichment_engine.core.config import Settings, get_settings
from enrichment_engine.core.telemetry import create_default_telemetry
from enrichment_engine.enrichment.orchestrator import (
    ProfileEnrichmentOrchestrator,
    build_orchestrator,
)
from enrichment_engine.enrichment.schemas import EnrichedProfile, SubjectDescriptor

logger = logging.getLogger(__name__)


class EnrichmentService:
    """
    Owns the orchestrator for the lifetime of the application.

    The orchestrator is built on start() (or on first use), so an
    unconfigured deployment fails with EnrichmentDisabledError at startup.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        orchestrator: Optional[ProfileEnrichmentOrchestrator] = None,
    ):
        self.settings = settings or get_settings()
        self.telemetry, self.metrics = create_default_telemetry()
        self._orchestrator = orchestrator

    def start(self) -> ProfileEnrichmentOrchestrator:
        """
        Build the orchestrator if needed.

        Raises:
            EnrichmentDisabledError: No search provider is configured
        """
        if self._orchestrator is None:
            self._orchestrator = build_orchestrator(self.settings, telemetry=self.telemetry)
        return self._orchestrator

    async def enrich_subject(self, subject_id: str, subject: SubjectDescriptor) -> EnrichedProfile:
        """
        Enrich one subject, keyed by its stable identifier.

        Raises:
            EnrichmentDisabledError: No search provider is configured
            InvalidSubjectError: Subject or identifier rejected
        """
        orchestrator = self.start()
        return await orchestrator.enrich(subject, subject_id)

    def health(self) -> dict[str, Any]:
        config = self.settings.enrichment_config()
        return {
            "enabled": self.settings.enrichment_enabled,
            "backend": config.search_backend,
            "configured_categories": [c.value for c in config.configured_categories],
            "circuit_breakers": get_all_breaker_stats(),
            "counters": self.metrics.snapshot(),
        }

    async def close(self) -> None:
        if self._orchestrator is not None:
            await self._orchestrator.close()
            self._orchestrator = None


# Singleton instance
_service: Optional[EnrichmentService] = None


def get_enrichment_service() -> EnrichmentService:
    """Get or create enrichment service singleton."""
    global _service
    if _service is None:
        _service = EnrichmentService()
    return _service


async def shutdown_enrichment_service() -> None:
    global _service
    if _service is not None:
        await _service.close()
        _service = None
