"""OpenTelemetry and logging configuration."""

import logging
import os
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger.json import JsonFormatter

from bar_ordering_client.observability.metrics import SERVICE_NAME

logger = logging.getLogger(__name__)

DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"
METRIC_EXPORT_INTERVAL_MILLIS = 60000

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def get_service_resource() -> Resource:
    """Create OpenTelemetry resource with service identification.

    Returns:
        Resource with service name and environment attributes
    """
    return Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME),
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
        }
    )


def _otlp_url(signal: str) -> str:
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_OTLP_ENDPOINT).rstrip("/")
    return f"{endpoint}/v1/{signal}"


def setup_tracing(resource: Resource) -> None:
    """Export spans to the OTLP collector in batches.

    Args:
        resource: Service resource for trace identification
    """
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=_otlp_url("traces"))))
    trace.set_tracer_provider(provider)

    logger.info(f"OpenTelemetry tracing exporting to {_otlp_url('traces')}")


def setup_metrics(resource: Resource) -> None:
    """Export the ordering metrics to the OTLP collector once a minute.

    Args:
        resource: Service resource for metric identification
    """
    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=_otlp_url("metrics")),
        export_interval_millis=METRIC_EXPORT_INTERVAL_MILLIS,
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))

    logger.info(f"OpenTelemetry metrics exporting to {_otlp_url('metrics')}")


def setup_observability(app: Any = None, enable_exporters: bool = True) -> None:
    """Initialize tracing and metrics, and instrument httpx and FastAPI.

    Exporters are never enabled when ``ENVIRONMENT`` is ``test``.

    Args:
        app: Optional FastAPI application to instrument
        enable_exporters: Whether to send telemetry to the OTLP collector
    """
    if os.getenv("ENVIRONMENT", "development") == "test":
        enable_exporters = False

    resource = get_service_resource()

    if enable_exporters:
        setup_tracing(resource)
        setup_metrics(resource)
    else:
        trace.set_tracer_provider(TracerProvider(resource=resource))
        metrics.set_meter_provider(MeterProvider(resource=resource))

    # Every backend call goes through httpx.AsyncClient
    HTTPXClientInstrumentor().instrument()

    if app is not None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="health")
        logger.info("FastAPI application instrumented")

    logger.info(f"Observability configured (exporters {'on' if enable_exporters else 'off'})")


def configure_logging(log_level: str = "INFO") -> None:
    """Send structured JSON logs to stderr.

    Each record carries the service name as a static ``service`` field.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level_name = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            timestamp=True,
            static_fields={"service": SERVICE_NAME},
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.info(f"Structured JSON logging configured at {level_name} level")
