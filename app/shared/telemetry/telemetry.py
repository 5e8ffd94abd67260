"""OpenTelemetry setup for the API process.

Spans come from three places: FastAPI requests, SQLAlchemy statements (row
locks, version-checked status updates and ledger inserts appear as children
of the request span) and the @traced engine operations in tracing.py.
"""

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Liveness and readiness checks are polled constantly; keep them out of traces.
UNTRACED_URLS = "/api/v1/health"


def _span_exporter(kind: str, otlp_endpoint: str | None) -> SpanExporter | None:
    if kind == "none":
        return None
    if kind == "otlp":
        if otlp_endpoint:
            return OTLPSpanExporter(
                endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
            )
        logger.warning("TELEMETRY_EXPORTER=otlp without TELEMETRY_OTLP_ENDPOINT; using console")
    elif kind != "console":
        logger.warning("Unknown telemetry exporter %r; using console", kind)
    return ConsoleSpanExporter()


class TelemetryConfig:
    """Tracer provider plus the instrumentors attached to it."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.tracer_provider: TracerProvider | None = None

    @property
    def active(self) -> bool:
        return self.tracer_provider is not None

    def start(self, app: FastAPI, engine: AsyncEngine) -> bool:
        """Register the provider globally and instrument app, engine and logging.

        Telemetry never blocks startup: any failure is logged and the service
        runs untraced. Returns True when tracing is active.
        """
        s = self.settings
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: s.app_name,
                        SERVICE_VERSION: s.app_version,
                        "deployment.environment": s.telemetry_environment,
                    }
                ),
                sampler=ParentBased(TraceIdRatioBased(s.telemetry_sample_rate)),
            )
            exporter = _span_exporter(s.telemetry_exporter, s.telemetry_otlp_endpoint)
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
            self.tracer_provider = provider

            FastAPIInstrumentor.instrument_app(
                app, tracer_provider=provider, excluded_urls=UNTRACED_URLS
            )
            SQLAlchemyInstrumentor().instrument(
                engine=engine.sync_engine, tracer_provider=provider, enable_commenter=True
            )
            LoggingInstrumentor().instrument(tracer_provider=provider, set_logging_format=True)
        except Exception:
            logger.exception("Telemetry setup failed; continuing without tracing")
            return self.active
        logger.info(
            "Tracing enabled: exporter=%s sample_rate=%s",
            s.telemetry_exporter,
            s.telemetry_sample_rate,
        )
        return True

    def shutdown(self) -> None:
        """Flush pending spans."""
        if self.tracer_provider is None:
            return
        try:
            self.tracer_provider.shutdown()
        except Exception:
            logger.exception("Error flushing spans on shutdown")
        self.tracer_provider = None


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the telemetry started by the lifespan, if any."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
