"""Shared telemetry: logging setup and tracing helpers."""

from procurement.shared.telemetry.logging import get_logger, setup_logging
from procurement.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "add_span_attributes",
    "get_logger",
    "setup_logging",
    "traced",
]
