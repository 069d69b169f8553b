# enrichment_engine/core/circuit_breaker.py
"""
Circuit breaker for outbound search provider calls.

A provider that keeps failing is short-circuited for a cool-off period so
that enrichment requests stop paying its timeout. Callers treat an open
circuit like any other provider failure: an empty, degraded result.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from enrichment_engine.core.config import settings
from enrichment_engine.core.exceptions import CircuitBreakerOpenError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject requests
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreaker:
    """
    Async circuit breaker.

    Usage:
        breaker = CircuitBreaker("search:news")

        async with breaker:
            payload = await client.get(...)
    """

    def __init__(
        self,
        name: str,
        fail_max: Optional[int] = None,
        reset_timeout: Optional[float] = None,
        exclude_exceptions: tuple[type[BaseException], ...] = (),
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.fail_max = fail_max or settings.CIRCUIT_BREAKER_FAIL_MAX
        self.reset_timeout = (
            reset_timeout if reset_timeout is not None else settings.CIRCUIT_BREAKER_TIMEOUT
        )
        self.exclude_exceptions = exclude_exceptions
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state == CircuitState.CLOSED

    @property
    def is_open(self) -> bool:
        return self._state == CircuitState.OPEN

    async def __aenter__(self):
        await self._before_call()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self._on_success()
        elif not issubclass(exc_type, self.exclude_exceptions):
            await self._on_failure(exc_val)
        return False

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        async with self:
            return await func(*args, **kwargs)

    async def _before_call(self) -> None:
        async with self._lock:
            if self._state != CircuitState.OPEN:
                return

            if self._clock() - (self._opened_at or 0.0) >= self.reset_timeout:
                self._state = CircuitState.HALF_OPEN
                logger.info(f"Circuit breaker {self.name} entering HALF_OPEN state")
                return

            raise CircuitBreakerOpenError(self.name)

    async def _on_success(self) -> None:
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                logger.info(f"Circuit breaker {self.name} recovered, closing circuit")
            self._reset()

    async def _on_failure(self, exception: Optional[BaseException]) -> None:
        async with self._lock:
            self._failure_count += 1

            logger.warning(
                f"Circuit breaker {self.name} failure {self._failure_count}/{self.fail_max}: "
                f"{type(exception).__name__}: {exception}"
            )

            if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.fail_max:
                if self._state != CircuitState.OPEN:
                    logger.warning(
                        f"Circuit breaker {self.name} opened after {self._failure_count} failures"
                    )
                self._state = CircuitState.OPEN
                self._opened_at = self._clock()

    def _reset(self) -> None:
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None

    def get_stats(self) -> dict:
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "fail_max": self.fail_max,
            "reset_timeout": self.reset_timeout,
        }


# ===========================================
# Breaker registry
# ===========================================

_circuit_breakers: dict[str, CircuitBreaker] = {}


def get_circuit_breaker(
    name: str,
    fail_max: Optional[int] = None,
    reset_timeout: Optional[float] = None,
) -> CircuitBreaker:
    """
    Get or create a circuit breaker by name.

    Breakers are shared per name so that state survives across requests.
    """
    if name not in _circuit_breakers:
        _circuit_breakers[name] = CircuitBreaker(
            name=name,
            fail_max=fail_max,
            reset_timeout=reset_timeout,
        )
    return _circuit_breakers[name]


def get_provider_breaker(category: str) -> CircuitBreaker:
    return get_circuit_breaker(f"search:{category}")


def get_all_breaker_stats() -> list[dict]:
    return [breaker.get_stats() for breaker in _circuit_breakers.values()]


def reset_circuit_breakers() -> None:
    _circuit_breakers.clear()
