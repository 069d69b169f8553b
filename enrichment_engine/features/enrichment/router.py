# enrichment_engine/features/enrichment/router.py
"""
API endpoints for profile enrichment.

Provides:
- POST /enrichment/{subject_id} - Enrich a subject (served from cache when fresh)
- GET /enrichment/health - Configuration, circuit breakers and counters
"""

import logging

from fastapi import APIRouter, HTTPException

from enrichment_engine.core.exceptions import EnrichmentDisabledError, InvalidSubjectError
from enrichment_engine.enrichment.schemas import EnrichedProfile
from enrichment_engine.features.enrichment.schemas import (
    EnrichmentHealthResponse,
    EnrichmentRequest,
)
from enrichment_engine.features.enrichment.service import get_enrichment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrichment", tags=["Profile Enrichment"])


@router.get(
    "/health",
    response_model=EnrichmentHealthResponse,
    summary="Enrichment service health",
    description="Check if the enrichment service is configured and healthy.",
)
async def enrichment_health() -> EnrichmentHealthResponse:
    """
    Check enrichment service health.

    Returns configuration status, circuit breaker states and event counters.
    """
    service = get_enrichment_service()
    return EnrichmentHealthResponse(**service.health())


@router.post(
    "/{subject_id}",
    response_model=EnrichedProfile,
    summary="Enrich a subject profile",
    description=(
        "Search public sources for the subject and return a merged, best-effort "
        "profile. Results are cached per subject_id for 24 hours."
    ),
)
async def enrich_subject(subject_id: str, request: EnrichmentRequest) -> EnrichedProfile:
    service = get_enrichment_service()

    try:
        return await service.enrich_subject(subject_id, request)

    except InvalidSubjectError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": e.message, "field": e.field},
        )
    except EnrichmentDisabledError:
        raise HTTPException(
            status_code=503,
            detail="Profile enrichment is currently disabled. Please configure API keys.",
        )
    except Exception as e:
        logger.error(f"Enrichment error for subject {subject_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="An error occurred during enrichment",
        )
