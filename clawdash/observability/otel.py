"""OpenTelemetry + Prometheus fallback wiring for the clawdash backend."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI

from clawdash import config

logger = logging.getLogger("clawdash.observability")


_initialized = False
_enabled = False
_tracer: Any | None = None
_trace_provider: Any | None = None
_meter_provider: Any | None = None
_fastapi_instrumentor: Any | None = None

_fetch_counter: Any | None = None
_fetch_latency_hist: Any | None = None
_section_counter: Any | None = None

_prom_enabled = False
_prom_fetch_counter: Any | None = None
_prom_fetch_latency_hist: Any | None = None
_prom_section_counter: Any | None = None


def _normalize_otlp_endpoint(base_endpoint: str, signal_path: str) -> str:
    endpoint = (base_endpoint or "").strip()
    if not endpoint:
        return ""
    if endpoint.endswith(signal_path):
        return endpoint
    if endpoint.endswith("/"):
        endpoint = endpoint[:-1]
    if endpoint.endswith("/v1"):
        return f"{endpoint}{signal_path[3:]}"
    return f"{endpoint}{signal_path}"


def initialize(app: FastAPI | None = None) -> None:
    global _initialized, _enabled, _tracer, _trace_provider, _meter_provider, _fastapi_instrumentor
    global _fetch_counter, _fetch_latency_hist, _section_counter
    global _prom_enabled, _prom_fetch_counter, _prom_fetch_latency_hist, _prom_section_counter

    if _initialized:
        if _enabled and app and _fastapi_instrumentor:
            _fastapi_instrumentor.instrument_app(app)
        return

    _initialized = True

    if not config.OTEL_ENABLED:
        logger.info("OpenTelemetry disabled (CLAWDASH_OTEL_ENABLED=false)")
        return

    try:
        from opentelemetry import metrics, trace
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
        from opentelemetry.sdk.metrics import MeterProvider
        from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError as exc:
        logger.warning("OpenTelemetry dependencies unavailable: %s", exc)
        return

    traces_endpoint = _normalize_otlp_endpoint(config.OTEL_ENDPOINT, "/v1/traces")
    metrics_endpoint = _normalize_otlp_endpoint(config.OTEL_ENDPOINT, "/v1/metrics")
    service_name = config.OTEL_SERVICE_NAME or "clawdash-backend"

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.namespace": "clawdash",
        }
    )

    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=traces_endpoint or None)))
    trace.set_tracer_provider(trace_provider)
    tracer = trace.get_tracer("clawdash.backend")

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=metrics_endpoint or None)
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)
    meter = metrics.get_meter("clawdash.backend")

    _fetch_counter = meter.create_counter(
        "clawdash_source_fetches_total",
        unit="1",
        description="Upstream source fetches by outcome",
    )
    _fetch_latency_hist = meter.create_histogram(
        "clawdash_source_fetch_latency_ms",
        unit="ms",
        description="Latency of upstream source fetches",
    )
    _section_counter = meter.create_counter(
        "clawdash_snapshot_sections_total",
        unit="1",
        description="Snapshot sections served live or from the baseline",
    )

    _trace_provider = trace_provider
    _meter_provider = meter_provider
    _tracer = tracer
    _fastapi_instrumentor = FastAPIInstrumentor()
    _enabled = True

    if app:
        _fastapi_instrumentor.instrument_app(app)

    if config.PROM_PORT > 0:
        try:
            from prometheus_client import Counter, Histogram, start_http_server

            start_http_server(config.PROM_PORT)
            _prom_enabled = True
            _prom_fetch_counter = Counter(
                "clawdash_source_fetches_total",
                "Upstream source fetches by outcome",
                ["source", "result"],
            )
            _prom_fetch_latency_hist = Histogram(
                "clawdash_source_fetch_latency_ms",
                "Latency of upstream source fetches",
                ["source", "result"],
            )
            _prom_section_counter = Counter(
                "clawdash_snapshot_sections_total",
                "Snapshot sections served live or from the baseline",
                ["section", "origin"],
            )
            logger.info("Prometheus fallback metrics server listening on port %s", config.PROM_PORT)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Prometheus fallback not started: %s", exc)
            _prom_enabled = False

    logger.info(
        "OpenTelemetry initialized (service=%s endpoint=%s)",
        service_name,
        config.OTEL_ENDPOINT,
    )


def shutdown(app: FastAPI | None = None) -> None:
    global _enabled
    if not _initialized:
        return
    try:
        if app and _fastapi_instrumentor:
            _fastapi_instrumentor.uninstrument_app(app)
    except Exception:
        pass
    try:
        if _meter_provider is not None:
            _meter_provider.shutdown()
    except Exception:
        pass
    try:
        if _trace_provider is not None:
            _trace_provider.shutdown()
    except Exception:
        pass
    _enabled = False


@contextmanager
def start_span(name: str, attributes: dict[str, Any] | None = None):
    if not _enabled or _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                if value is not None:
                    span.set_attribute(key, value)
        yield span


def record_source_fetch(source: str, result: str, duration_ms: float) -> None:
    labels = {
        "source": source or "unknown",
        "result": result or "unknown",
    }
    latency = max(0.0, float(duration_ms))
    if _enabled and _fetch_counter is not None:
        _fetch_counter.add(1, labels)
    if _enabled and _fetch_latency_hist is not None:
        _fetch_latency_hist.record(latency, labels)
    if _prom_enabled and _prom_fetch_counter is not None:
        _prom_fetch_counter.labels(**labels).inc()
    if _prom_enabled and _prom_fetch_latency_hist is not None:
        _prom_fetch_latency_hist.labels(**labels).observe(latency)


def record_snapshot_sections(live: list[str], kept: list[str]) -> None:
    for origin, sections in (("live", live), ("baseline", kept)):
        for section in sections:
            labels = {"section": section, "origin": origin}
            if _enabled and _section_counter is not None:
                _section_counter.add(1, labels)
            if _prom_enabled and _prom_section_counter is not None:
                _prom_section_counter.labels(**labels).inc()
