"""
OpenTelemetry configuration for prbot.

Configures the tracer provider, meter provider, and exporters for sending
telemetry data to the OTLP collector. When telemetry is not configured the
global no-op providers are used, so instrumented code runs unchanged.
"""

import logging
from functools import lru_cache
from typing import Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from prbot import __version__
from prbot.config.settings import get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Global state
_telemetry_configured = False
_tracer_provider: Optional[TracerProvider] = None
_meter_provider: Optional[MeterProvider] = None


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure root logging with the standard prbot format."""
    settings = get_settings()
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=fmt or settings.log_format or LOG_FORMAT,
    )


def configure_telemetry(
    service_name: Optional[str] = None,
    otlp_endpoint: Optional[str] = None,
    enable_logging: bool = True,
    additional_attributes: Optional[dict] = None,
) -> None:
    """
    Configure OpenTelemetry for the application.

    Should be called once at process startup (CLI or Celery worker).
    Does nothing unless otel_enabled is set.

    Args:
        service_name: Name of the service (e.g., "prbot-worker")
        otlp_endpoint: OTLP collector endpoint
        enable_logging: Whether to enable log correlation with traces
        additional_attributes: Additional resource attributes to include
    """
    global _telemetry_configured, _tracer_provider, _meter_provider

    settings = get_settings()
    if not settings.otel_enabled:
        logger.debug("Telemetry export disabled")
        return

    if _telemetry_configured:
        logger.warning("Telemetry already configured, skipping reconfiguration")
        return

    service_name = service_name or settings.otel_service_name
    otlp_endpoint = otlp_endpoint or settings.otel_exporter_otlp_endpoint

    logger.info(
        f"Configuring OpenTelemetry: service={service_name}, "
        f"version={__version__}, endpoint={otlp_endpoint}"
    )

    resource_attributes = {
        SERVICE_NAME: service_name,
        SERVICE_VERSION: __version__,
    }
    if additional_attributes:
        resource_attributes.update(additional_attributes)

    resource = Resource.create(resource_attributes)

    _tracer_provider = TracerProvider(resource=resource)
    _tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    )
    trace.set_tracer_provider(_tracer_provider)

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=otlp_endpoint, insecure=True),
        export_interval_millis=60000,
    )
    _meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(_meter_provider)

    if enable_logging:
        LoggingInstrumentor().instrument(set_logging_format=True)

    _telemetry_configured = True
    logger.info("OpenTelemetry configured successfully")


def shutdown_telemetry() -> None:
    """Flush and shut down telemetry providers."""
    global _telemetry_configured, _tracer_provider, _meter_provider

    if not _telemetry_configured:
        return

    logger.info("Shutting down OpenTelemetry...")

    if _tracer_provider:
        _tracer_provider.force_flush()
        _tracer_provider.shutdown()
        _tracer_provider = None

    if _meter_provider:
        _meter_provider.shutdown()
        _meter_provider = None

    _telemetry_configured = False


@lru_cache(maxsize=32)
def get_tracer(name: str = "prbot") -> trace.Tracer:
    """Get a tracer instance for creating spans."""
    return trace.get_tracer(name)


@lru_cache(maxsize=32)
def get_meter(name: str = "prbot") -> metrics.Meter:
    """Get a meter instance for creating metrics."""
    return metrics.get_meter(name)


def is_telemetry_configured() -> bool:
    return _telemetry_configured
