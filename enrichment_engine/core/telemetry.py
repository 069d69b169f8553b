# enrichment_engine/core/telemetry.py
"""
Structured event emission for the enrichment pipeline.

Every component reports what happened (cache hits and misses, degraded or
skipped providers, completed requests) through a Telemetry facade. Sinks
decide what to do with the events:

- LoggingEventSink writes one JSON line per event on the
  "enrichment.events" logger, for log shippers.
- MetricsEventSink keeps labelled in-process counters, exposed on the
  health endpoint and handy in tests.

Usage:
    telemetry = Telemetry(CompositeEventSink([LoggingEventSink(), metrics]))
    telemetry.emit(EnrichmentEvent.CACHE_HIT, cache_key="cust_42")
    metrics.count(EnrichmentEvent.CACHE_HIT)
"""

import json
import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional, Protocol

event_logger = logging.getLogger("enrichment.events")


class EnrichmentEvent(str, Enum):
    """Event types emitted by the enrichment pipeline."""

    CACHE_HIT = "cache.hit"
    CACHE_MISS = "cache.miss"
    CACHE_ERROR = "cache.error"
    PROVIDER_DEGRADED = "provider.degraded"
    PROVIDER_SKIPPED = "provider.skipped"
    ENRICHMENT_COMPLETED = "enrichment.completed"
    ENRICHMENT_REJECTED = "enrichment.rejected"


# Fields used as counter labels, per event type
_COUNTER_LABELS: dict[EnrichmentEvent, tuple[str, ...]] = {
    EnrichmentEvent.PROVIDER_DEGRADED: ("provider", "reason"),
    EnrichmentEvent.PROVIDER_SKIPPED: ("provider",),
    EnrichmentEvent.CACHE_ERROR: ("operation",),
}


class EventSink(Protocol):
    def emit(self, event: EnrichmentEvent, fields: dict[str, Any]) -> None:
        ...


class LoggingEventSink:
    """Writes events as JSON for structured logging."""

    def __init__(self, service_name: str = "profile-enrichment"):
        self.service_name = service_name

    def emit(self, event: EnrichmentEvent, fields: dict[str, Any]) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service_name,
            "event": event.value,
            **fields,
        }
        event_logger.info(json.dumps(entry, default=str))


class MetricsEventSink:
    """Thread-safe labelled counters keyed by event type."""

    def __init__(self):
        self._values: dict[tuple[str, tuple[tuple[str, str], ...]], int] = {}
        self._lock = threading.Lock()

    def emit(self, event: EnrichmentEvent, fields: dict[str, Any]) -> None:
        labels = tuple(
            (name, str(fields.get(name, ""))) for name in _COUNTER_LABELS.get(event, ())
        )
        key = (event.value, labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0) + 1

    def count(self, event: EnrichmentEvent, **labels: str) -> int:
        """Total for an event, optionally narrowed to matching labels."""
        with self._lock:
            return sum(
                value
                for (name, key_labels), value in self._values.items()
                if name == event.value
                and all(dict(key_labels).get(k) == v for k, v in labels.items())
            )

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            totals: dict[str, int] = {}
            for (name, labels), value in self._values.items():
                suffix = ",".join(f"{k}={v}" for k, v in labels)
                key = f"{name}{{{suffix}}}" if suffix else name
                totals[key] = totals.get(key, 0) + value
            return totals

    def reset(self) -> None:
        with self._lock:
            self._values.clear()


class CompositeEventSink:
    """Fans one event out to several sinks."""

    def __init__(self, sinks: Iterable[EventSink]):
        self.sinks = list(sinks)

    def emit(self, event: EnrichmentEvent, fields: dict[str, Any]) -> None:
        for sink in self.sinks:
            sink.emit(event, fields)


class Telemetry:
    """Facade handed to every pipeline component."""

    def __init__(self, sink: Optional[EventSink] = None):
        self.sink = sink or LoggingEventSink()

    def emit(self, event: EnrichmentEvent, **fields: Any) -> None:
        try:
            self.sink.emit(event, fields)
        except Exception as e:
            logging.getLogger(__name__).warning(f"Telemetry sink error for {event.value}: {e}")


def create_default_telemetry() -> tuple[Telemetry, MetricsEventSink]:
    metrics = MetricsEventSink()
    return Telemetry(CompositeEventSink([LoggingEventSink(), metrics])), metrics
