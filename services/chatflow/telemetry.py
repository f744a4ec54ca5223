"""OpenTelemetry instrumentation for the formula host.

Sets up tracing, metrics and structured logging. Exporters ship spans and
metrics to an OTLP collector; with ``TELEMETRY_ENABLED=false`` only logging is
configured and the global no-op providers are used.
"""

import os
from contextlib import contextmanager
from opentelemetry import trace, metrics
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_NAMESPACE
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from chatflow.logging_config import configure_logging


def telemetry_enabled() -> bool:
    return os.getenv("TELEMETRY_ENABLED", "true").lower() == "true"


def _create_resource(service_name: str, namespace: str) -> Resource:
    """Build the OTEL Resource describing this host."""
    attrs = {
        SERVICE_NAME: service_name,
        SERVICE_NAMESPACE: namespace,
        "service.version": os.getenv("SERVICE_VERSION", "0.1.0"),
        "service.instance.id": os.getenv("POD_UID", f"{service_name}-local"),
        "deployment.environment": os.getenv("ENVIRONMENT", "dev"),
        "flowise.deployment": os.getenv("FLOWISE_DEPLOYMENT", "public"),
        "lab.team": os.getenv("LAB_TEAM", namespace),
    }
    return Resource.create(attrs)


def setup_telemetry(app, service_name: str, namespace: str = "chatflow"):
    """Initialize OpenTelemetry and logging for a FastAPI application."""
    team = os.getenv("LAB_TEAM", namespace)
    configure_logging(service_name, team, os.getenv("LOG_LEVEL", "INFO"))

    if not telemetry_enabled():
        return trace.get_tracer(service_name), metrics.get_meter(service_name)

    resource = _create_resource(service_name, namespace)

    otlp_endpoint = os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT",
        "http://otel-collector.observability.svc.cluster.local:4317"
    )

    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    )
    trace.set_tracer_provider(trace_provider)

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=otlp_endpoint, insecure=True),
        export_interval_millis=30000
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)

    FastAPIInstrumentor.instrument_app(app)

    # Outbound calls to Flowise
    HTTPXClientInstrumentor().instrument()

    return trace.get_tracer(service_name), metrics.get_meter(service_name)


@contextmanager
def create_span(tracer, name: str, attributes: dict = None):
    """Create a custom span with attributes."""
    with tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)
        yield span
