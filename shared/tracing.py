"""OpenTelemetry tracing bootstrap shared by every service.

Calling :func:`configure_tracing` once at process start installs a tracer
provider that batches spans to an OTLP/gRPC collector and switches on
automatic instrumentation for the libraries the services talk through
(FastAPI, Redis). Database calls get their spans from
:func:`trace_operation`, opened around each repository operation.
"""

from typing import Optional, Dict, Any
import os
import threading
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.trace import Status, StatusCode

DEFAULT_OTLP_ENDPOINT = "http://localhost:4317"

_configure_lock = threading.Lock()
_tracer_provider: Optional[TracerProvider] = None


def _parse_headers(raw: Optional[str]) -> Optional[Dict[str, str]]:
    if not raw:
        return None
    headers: Dict[str, str] = {}
    for segment in raw.split(","):
        if not segment or "=" not in segment:
            continue
        key, value = segment.split("=", 1)
        key = key.strip()
        value = value.strip()
        if key:
            headers[key] = value
    return headers or None


def _build_otlp_exporter_kwargs(endpoint_override: Optional[str] = None) -> Dict[str, Any]:
    endpoint = (
        endpoint_override
        or os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
        or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        or DEFAULT_OTLP_ENDPOINT
    )
    headers = _parse_headers(os.getenv("OTEL_EXPORTER_OTLP_HEADERS"))

    kwargs: Dict[str, Any] = {"endpoint": endpoint}
    if headers:
        kwargs["headers"] = headers

    # Plain-text gRPC for http:// collectors, TLS otherwise.
    if endpoint.startswith("http://"):
        kwargs["insecure"] = True

    return kwargs


def configure_tracing(service_name: str, otel_exporter: Optional[str] = None,
                      enable_console: bool = False) -> TracerProvider:
    """Configure OpenTelemetry tracing for a service.

    Safe to call more than once; only the first call installs the provider
    and the instrumentors.
    """
    global _tracer_provider

    with _configure_lock:
        if _tracer_provider is not None:
            return _tracer_provider

        resource = Resource.create({
            "service.name": service_name,
            "service.version": "1.0.0",
            "service.namespace": "crud",
            "service.instance.id": os.getenv("HOSTNAME", "unknown"),
            "deployment.environment": os.getenv("CRUD_ENV", "local"),
        })

        provider = TracerProvider(resource=resource)
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(**_build_otlp_exporter_kwargs(otel_exporter)))
        )
        if enable_console:
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(provider)

        FastAPIInstrumentor().instrument()
        RedisInstrumentor().instrument()

        _tracer_provider = provider
        return provider


def shutdown_tracing() -> None:
    """Flush pending spans and drop the installed provider."""
    global _tracer_provider

    with _configure_lock:
        if _tracer_provider is not None:
            _tracer_provider.shutdown()
            _tracer_provider = None


def get_tracer(name: str):
    """Get a tracer instance."""
    return trace.get_tracer(name)


def current_trace_id() -> Optional[str]:
    """Hex trace id of the active span, if any."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span_context = span.get_span_context()
        if span_context.trace_id != 0:
            return f"{span_context.trace_id:032x}"
    return None


@contextmanager
def trace_operation(operation_name: str, **attributes):
    """Context manager to trace an operation."""
    tracer = get_tracer(__name__)
    with tracer.start_as_current_span(operation_name) as span:
        for key, value in attributes.items():
            span.set_attribute(key, value)

        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.set_attribute("error", True)
            span.set_attribute("error.message", str(exc))
            raise
