"""
RadioManager Dialog Service - OpenTelemetry Tracing Module

Patterns Applied:
- One-time configure_tracing() at startup
- Minimal manual instrumentation: one span per outbound backend request
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

# Module-level flag for one-time configuration
_configured: bool = False

SERVICE_NAME = "radiomanager-dialog-service"


def configure_tracing(
    service_name: str = SERVICE_NAME,
    service_version: str = "0.1.0",
    console_export: bool = False,
) -> None:
    """Configure OpenTelemetry tracing for the application.

    Must be called once at application startup; later calls are no-ops.

    Args:
        service_name: Name of the service for trace attribution
        service_version: Version reported on the trace resource
        console_export: Whether to export spans to console (for development)
    """
    global _configured

    if _configured:
        return

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )

    provider = TracerProvider(resource=resource)

    if console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    _configured = True


def get_tracer(name: str) -> Any:
    """Get a tracer instance for creating spans.

    Falls back to the no-op tracer until configure_tracing() has run.

    Args:
        name: Tracer name (typically module name)

    Returns:
        OpenTelemetry Tracer instance
    """
    return trace.get_tracer(name)


def reset_tracing() -> None:
    """Reset tracing configuration for testing."""
    global _configured
    _configured = False
