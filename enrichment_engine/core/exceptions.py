# enrichment_engine/core/exceptions.py
"""
Custom exception hierarchy for the profile enrichment engine.
All exceptions inherit from EnrichmentServiceError for consistent handling.

Only EnrichmentDisabledError and InvalidSubjectError ever reach callers of
the orchestrator. Provider and cache errors are raised internally and
converted into degraded results where they happen.
"""

from typing import Optional


class EnrichmentServiceError(Exception):
    """Base exception for all enrichment engine errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "ENRICHMENT_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ===========================================
# Configuration / Validation Exceptions
# ===========================================


class EnrichmentDisabledError(EnrichmentServiceError):
    """Enrichment is disabled (no search provider API key configured)."""

    def __init__(self):
        super().__init__(
            message=(
                "Profile enrichment is disabled. Configure SEARCH_API_KEY "
                "or at least one per-category search API key."
            ),
            error_code="ENRICHMENT_DISABLED",
        )


class InvalidSubjectError(EnrichmentServiceError):
    """Subject descriptor or cache key rejected at the orchestrator boundary."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(
            message=message,
            error_code="INVALID_SUBJECT",
            details={"field": field} if field else {},
        )


# ===========================================
# Circuit Breaker Exceptions
# ===========================================


class CircuitBreakerOpenError(EnrichmentServiceError):
    """Circuit breaker is open - service unavailable."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(
            message=f"Circuit breaker open for {service_name}. Service temporarily unavailable.",
            error_code="CIRCUIT_BREAKER_OPEN",
            details={"service": service_name},
        )


# ===========================================
# External API Exceptions
# ===========================================


class ExternalAPIError(EnrichmentServiceError):
    """Error from external API call."""

    def __init__(
        self,
        service_name: str,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.service_name = service_name
        self.status_code = status_code
        super().__init__(
            message=message or f"External API error from {service_name}",
            error_code="EXTERNAL_API_ERROR",
            details={
                "service": service_name,
                "status_code": status_code,
            },
        )


class SearchProviderError(ExternalAPIError):
    """Error from a search provider backend."""

    def __init__(
        self,
        provider: str,
        reason: str,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.reason = reason
        super().__init__(
            service_name=provider,
            status_code=status_code,
            message=message or f"Search provider {provider} failed: {reason}",
        )
        self.error_code = "SEARCH_PROVIDER_ERROR"
        self.details["reason"] = reason


class CacheError(EnrichmentServiceError):
    """Error talking to the cache store."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(
            message=message or f"Cache {operation} failed",
            error_code="CACHE_ERROR",
            details={"operation": operation},
        )
