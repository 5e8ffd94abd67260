"""Shared telemetry: logging setup, OpenTelemetry tracer provider and span helpers."""

from app.shared.telemetry.logging import setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry
from app.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    get_trace_id,
    set_span_error,
    traced,
)

__all__ = [
    "TelemetryConfig",
    "TracedOperation",
    "add_span_attributes",
    "get_telemetry",
    "get_trace_id",
    "set_span_error",
    "set_telemetry",
    "setup_logging",
    "traced",
]
