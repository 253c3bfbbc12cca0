"""OpenTelemetry and logging setup for the kitchen order service."""

import logging
import os
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.botocore import BotocoreInstrumentor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)

SERVICE_NAME = "kitchen-svc"

# Polled by load balancers every few seconds
UNTRACED_URLS = "api/health"


def _otlp_endpoint() -> str:
    return os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318").rstrip("/")


def get_service_resource() -> Resource:
    """Create the OpenTelemetry resource identifying this service.

    Returns:
        Resource with service name, version and environment attributes
    """
    return Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME),
            "service.version": "1.0.0",
            "deployment.environment": os.getenv("ENVIRONMENT", "production"),
        }
    )


def setup_tracing(resource: Resource, endpoint: str) -> None:
    """Export spans to an OTLP collector.

    Args:
        resource: Service resource for trace identification
        endpoint: Base URL of the OTLP HTTP collector
    """
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces")
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    logger.info(f"Tracing exports to {endpoint}")


def setup_metrics(resource: Resource, endpoint: str, interval_ms: int = 60000) -> None:
    """Export order and backup metrics to an OTLP collector.

    Args:
        resource: Service resource for metric identification
        endpoint: Base URL of the OTLP HTTP collector
        interval_ms: Export interval in milliseconds
    """
    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics"),
        export_interval_millis=interval_ms,
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))

    logger.info(f"Metrics export to {endpoint} every {interval_ms}ms")


def instrument_libraries(app: Any = None) -> None:
    """Instrument the libraries the service talks through.

    Covers inbound FastAPI requests (health checks excluded), outbound
    httpx calls made by the ordering client, and the boto3 S3 calls made
    by backup uploads.

    Args:
        app: Optional FastAPI application to instrument
    """
    HTTPXClientInstrumentor().instrument()
    BotocoreInstrumentor().instrument()

    if app is not None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=UNTRACED_URLS)
        logger.info("FastAPI application instrumented")


def setup_observability(app: Any = None, enable_exporters: bool = True) -> None:
    """Initialize tracing, metrics and library instrumentation.

    Exporters are never started when ENVIRONMENT is "test"; spans and
    instruments still work against local providers.

    Args:
        app: Optional FastAPI application to instrument
        enable_exporters: Whether to ship telemetry to the OTLP collector
    """
    if os.getenv("ENVIRONMENT", "production") == "test":
        enable_exporters = False

    resource = get_service_resource()

    if enable_exporters:
        endpoint = _otlp_endpoint()
        setup_tracing(resource, endpoint)
        setup_metrics(resource, endpoint)
    else:
        trace.set_tracer_provider(TracerProvider(resource=resource))
        metrics.set_meter_provider(MeterProvider(resource=resource))

    instrument_libraries(app)

    logger.info(f"Observability configured (exporters {'on' if enable_exporters else 'off'})")


def configure_logging(log_level: str = "INFO") -> None:
    """Send all logs to stderr as JSON lines.

    Uvicorn's access log is raised to WARNING because the API already logs
    one line per request.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level_name = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        rename_fields={"levelname": "level"},
        static_fields={"service": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME)},
        timestamp=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger.info(f"JSON logging configured at {level_name} level")
