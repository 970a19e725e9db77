import logging
from typing import Sequence

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from fanout.config import ForwarderConfig

logger = logging.getLogger("uvicorn.error")

app_info = Info("fanout_app_info", "Application Info")

_tracer_provider_configured = False


class FilteringSpanExporter(SpanExporter):
    """
    Wrapper exporter that drops the per-chunk ASGI body spans, which would
    otherwise outnumber the fan-out spans.
    """

    def __init__(self, exporter: SpanExporter):
        self.exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        filtered_spans = [
            span
            for span in spans
            if not (
                span.attributes
                and span.attributes.get("asgi.event.type") == "http.response.body"
            )
        ]
        if filtered_spans:
            return self.exporter.export(filtered_spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return self.exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000):
        return self.exporter.force_flush(timeout_millis)


def parse_otlp_headers(raw: str) -> dict[str, str]:
    """Parse "key=value,key2=value2" into exporter headers."""
    headers: dict[str, str] = {}
    for entry in (raw or "").split(","):
        if "=" not in entry:
            continue
        key, value = entry.split("=", 1)
        if key.strip():
            headers[key.strip()] = value.strip()
    return headers


def configure_tracing(app: FastAPI, config: ForwarderConfig) -> None:
    """Install the tracer provider once per process and instrument the app."""
    global _tracer_provider_configured
    if not _tracer_provider_configured:
        provider = TracerProvider(
            resource=Resource.create({"service.name": config.service_name})
        )
        if config.otlp_endpoint:
            otlp_exporter = OTLPSpanExporter(
                endpoint=config.otlp_endpoint,
                headers=parse_otlp_headers(config.otlp_headers) or None,
            )
            provider.add_span_processor(
                BatchSpanProcessor(FilteringSpanExporter(otlp_exporter))
            )
            logger.debug(f"Exporting traces to {config.otlp_endpoint}")
        trace.set_tracer_provider(provider)
        _tracer_provider_configured = True

    FastAPIInstrumentor.instrument_app(app)


def configure_metrics(app: FastAPI, config: ForwarderConfig) -> None:
    """
    Instrument the app with Prometheus metrics. The scrape endpoint is only
    mounted when METRICS_PATH is set, since every other path is forwarded.
    """
    instrumentator = Instrumentator().instrument(app)
    if config.metrics_path:
        instrumentator.expose(app, endpoint=config.metrics_path, include_in_schema=False)
        logger.debug(f"Metrics exposed on {config.metrics_path}")
    app_info.info({"app_name": config.service_name})
