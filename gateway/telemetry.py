from typing import Dict

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from gateway.vars import OTLP_ENDPOINT, OTLP_HEADERS, SERVICE_NAME


def parse_otlp_headers(raw: str) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if not raw:
        return headers
    for entry in raw.split(","):
        entry = entry.strip()
        if "=" not in entry:
            continue
        key, val = entry.split("=", 1)
        key = key.strip()
        val = val.strip()
        if key and val:
            headers[key] = val
    return headers


def configure_tracing(
    *apps: FastAPI,
    service_name: str = SERVICE_NAME,
    otlp_endpoint: str = OTLP_ENDPOINT,
    otlp_headers: str = OTLP_HEADERS,
) -> TracerProvider:
    """Install a tracer provider, export over OTLP when configured, instrument the apps."""
    tracer_provider = TracerProvider(
        resource=Resource.create({"service.name": service_name})
    )
    trace.set_tracer_provider(tracer_provider)

    if otlp_endpoint:
        exporter = OTLPSpanExporter(
            endpoint=otlp_endpoint,
            headers=parse_otlp_headers(otlp_headers) or None,
        )
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    for app in apps:
        FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)

    return tracer_provider
