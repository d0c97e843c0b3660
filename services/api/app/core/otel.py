from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from app.core.config import settings
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

_tracer = trace.get_tracer("booktrack.ingestion")


def init_otel(app) -> None:
    if not settings.otel_enabled:
        return

    resource = Resource.create(
        {
            "service.name": settings.api_name,
            "deployment.environment": settings.env,
        }
    )
    provider = TracerProvider(resource=resource)

    # OTEL_EXPORTER_OTLP_ENDPOINT is honoured when no explicit endpoint is set.
    endpoint = settings.otel_otlp_endpoint
    exporter = OTLPSpanExporter(endpoint=endpoint) if endpoint else OTLPSpanExporter()

    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)
    # OCR, completion and cover calls all go through httpx.
    HTTPXClientInstrumentor().instrument()


@contextmanager
def stage_span(stage: str, **attributes) -> Iterator[None]:
    """Wrap one ingestion stage in a span; a no-op tracer when OTel is off."""
    with _tracer.start_as_current_span(f"ingestion.{stage}") as span:
        for key, value in attributes.items():
            span.set_attribute(f"booktrack.{key}", value)
        yield
