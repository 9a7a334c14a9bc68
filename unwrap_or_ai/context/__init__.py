"""Context capture for recovery sites."""

from .call_context import CallContext, call_context_factory, format_arguments
from .capture import capture_source, clear_registry, recoverable, snapshot_of, source_of

__all__ = [
    "CallContext",
    "call_context_factory",
    "format_arguments",
    "recoverable",
    "source_of",
    "snapshot_of",
    "capture_source",
    "clear_registry",
]
