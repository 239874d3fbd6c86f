"""Tracing and log correlation for the career pages API."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import DEPLOYMENT_ENVIRONMENT, SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from career_pages.core.config import Settings

CORRELATED_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s trace_id=%(trace_id)s span_id=%(span_id)s %(message)s"
PLAIN_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
UNTRACED_URLS = "healthz"

_base_record_factory = logging.getLogRecordFactory()
_httpx_instrumentor = HTTPXClientInstrumentor()
logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TelemetryRuntime:
    provider: TracerProvider | None = None

    @property
    def enabled(self) -> bool:
        return self.provider is not None


def configure_api_logging(settings: Settings) -> None:
    if settings.otel_log_correlation:
        logging.setLogRecordFactory(_correlated_record)
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=logging.INFO,
        format=CORRELATED_LOG_FORMAT if settings.otel_log_correlation else PLAIN_LOG_FORMAT,
    )


def _correlated_record(*args: object, **kwargs: object) -> logging.LogRecord:
    record = _base_record_factory(*args, **kwargs)
    context = trace.get_current_span().get_span_context()
    record.trace_id = format(context.trace_id, "032x") if context.is_valid else "0" * 32
    record.span_id = format(context.span_id, "016x") if context.is_valid else "0" * 16
    return record


def setup_api_telemetry(app: FastAPI, settings: Settings) -> TelemetryRuntime:
    if not settings.otel_enabled:
        logger.info("tracing disabled service=%s", settings.otel_service_name)
        return TelemetryRuntime()

    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: settings.otel_service_name,
                DEPLOYMENT_ENVIRONMENT: settings.environment,
            }
        ),
        sampler=TraceIdRatioBased(settings.otel_trace_sample_ratio),
    )
    exporter = build_span_exporter(settings)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    # Outbound Supabase calls become httpx child spans.
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider, excluded_urls=UNTRACED_URLS)
    _httpx_instrumentor.instrument(tracer_provider=provider)
    return TelemetryRuntime(provider=provider)


def shutdown_api_telemetry(app: FastAPI, runtime: TelemetryRuntime) -> None:
    if runtime.provider is None:
        return
    FastAPIInstrumentor.uninstrument_app(app)
    _httpx_instrumentor.uninstrument()
    runtime.provider.force_flush()
    runtime.provider.shutdown()


def build_span_exporter(settings: Settings) -> OTLPSpanExporter | None:
    endpoint = (
        settings.otel_exporter_otlp_endpoint
        or os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
        or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    )
    if not endpoint:
        logger.info("no OTLP endpoint configured; spans stay in process service=%s", settings.otel_service_name)
        return None

    headers = parse_header_list(settings.otel_exporter_otlp_headers or os.getenv("OTEL_EXPORTER_OTLP_HEADERS"))
    return OTLPSpanExporter(endpoint=endpoint, headers=headers or None)


def parse_header_list(raw: str | None) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` as used by ``OTEL_EXPORTER_OTLP_HEADERS``."""
    pairs = (item.partition("=") for item in (raw or "").split(","))
    return {key.strip(): value.strip() for key, separator, value in pairs if separator and key.strip()}
