# tests/core/test_telemetry.py
"""
Unit tests for telemetry event emission.
"""

import json
import logging

from enrichment_engine.core.telemetry import (
    CompositeEventSink,
    EnrichmentEvent,
    LoggingEventSink,
    MetricsEventSink,
    Telemetry,
    create_default_telemetry,
)


class ExplodingSink:
    def emit(self, event, fields):
        raise RuntimeError("sink down")


class TestMetricsEventSink:
    def test_counts_events(self, metrics, telemetry):
        """Test events are counted by name."""
        telemetry.emit(EnrichmentEvent.CACHE_HIT, cache_key="a")
        telemetry.emit(EnrichmentEvent.CACHE_HIT, cache_key="b")
        telemetry.emit(EnrichmentEvent.CACHE_MISS, cache_key="c")

        assert metrics.count(EnrichmentEvent.CACHE_HIT) == 2
        assert metrics.count(EnrichmentEvent.CACHE_MISS) == 1
        assert metrics.count(EnrichmentEvent.CACHE_ERROR) == 0

    def test_counts_by_label(self, metrics, telemetry):
        """Test counts can be filtered by label."""
        telemetry.emit(EnrichmentEvent.PROVIDER_DEGRADED, provider="news", reason="timeout")
        telemetry.emit(EnrichmentEvent.PROVIDER_DEGRADED, provider="news", reason="rate_limited")
        telemetry.emit(EnrichmentEvent.PROVIDER_DEGRADED, provider="social", reason="timeout")

        assert metrics.count(EnrichmentEvent.PROVIDER_DEGRADED) == 3
        assert metrics.count(EnrichmentEvent.PROVIDER_DEGRADED, provider="news") == 2
        assert metrics.count(EnrichmentEvent.PROVIDER_DEGRADED, reason="timeout") == 2

    def test_snapshot_and_reset(self, metrics, telemetry):
        """Test snapshot and reset."""
        telemetry.emit(EnrichmentEvent.PROVIDER_SKIPPED, provider="company", reason="unconfigured")
        telemetry.emit(EnrichmentEvent.CACHE_MISS, cache_key="x")

        snapshot = metrics.snapshot()
        assert snapshot["provider.skipped{provider=company}"] == 1
        assert snapshot["cache.miss"] == 1

        metrics.reset()
        assert metrics.snapshot() == {}


class TestSinks:
    def test_logging_sink_writes_json(self, caplog):
        """Test the logging sink writes one JSON line per event."""
        sink = LoggingEventSink(service_name="test-service")

        with caplog.at_level(logging.INFO, logger="enrichment.events"):
            sink.emit(EnrichmentEvent.CACHE_HIT, {"cache_key": "cust_1"})

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["event"] == "cache.hit"
        assert entry["service"] == "test-service"
        assert entry["cache_key"] == "cust_1"
        assert "timestamp" in entry

    def test_composite_fans_out(self):
        """Test the composite sink forwards to every sink."""
        first, second = MetricsEventSink(), MetricsEventSink()
        telemetry = Telemetry(CompositeEventSink([first, second]))

        telemetry.emit(EnrichmentEvent.ENRICHMENT_COMPLETED, cache_key="x")

        assert first.count(EnrichmentEvent.ENRICHMENT_COMPLETED) == 1
        assert second.count(EnrichmentEvent.ENRICHMENT_COMPLETED) == 1

    def test_sink_errors_are_contained(self):
        """Test a failing sink does not break emission."""
        telemetry = Telemetry(ExplodingSink())

        telemetry.emit(EnrichmentEvent.CACHE_MISS, cache_key="x")

    def test_default_telemetry_exposes_metrics(self):
        """Test the default telemetry exposes its metrics sink."""
        telemetry, metrics = create_default_telemetry()

        telemetry.emit(EnrichmentEvent.CACHE_MISS, cache_key="x")

        assert metrics.count(EnrichmentEvent.CACHE_MISS) == 1
