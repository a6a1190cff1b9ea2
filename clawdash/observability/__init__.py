"""Observability helpers."""

from clawdash.observability.otel import (
    initialize,
    shutdown,
    start_span,
    record_source_fetch,
    record_snapshot_sections,
)

__all__ = [
    "initialize",
    "shutdown",
    "start_span",
    "record_source_fetch",
    "record_snapshot_sections",
]
