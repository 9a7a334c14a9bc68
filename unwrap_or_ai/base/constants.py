"""Shared constants for the recovery library.

Central location to avoid scattering magic strings and default numbers.
"""
from __future__ import annotations

# Default transport timeouts (seconds)
DEFAULT_HTTP_TIMEOUT = 60.0
DEFAULT_CONNECT_TIMEOUT = 10.0

CHAT_COMPLETIONS_PATH = "/chat/completions"

# Schema name used when a target type has no usable name.
DEFAULT_SCHEMA_NAME = "response"

# Property name used to wrap non-object targets (e.g. ``int``).
WRAPPED_VALUE_KEY = "value"

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are an AI error recovery assistant. When given an error message and program "
    "context, your task is to infer the most likely intended response or output. Do not "
    "explain the error; directly provide the corrected or plausible output as if the "
    "error had not occurred."
)

__all__ = [
    "DEFAULT_HTTP_TIMEOUT",
    "DEFAULT_CONNECT_TIMEOUT",
    "CHAT_COMPLETIONS_PATH",
    "DEFAULT_SCHEMA_NAME",
    "WRAPPED_VALUE_KEY",
    "DEFAULT_SYSTEM_INSTRUCTION",
]
