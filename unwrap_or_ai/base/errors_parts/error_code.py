"""
Normalized recovery error codes (taxonomy).

Defines the `ErrorCode` enumeration used by the backend client, the recovery
resolver and the structured logging layer. Values are lowercase snake_case and
are considered a stable public contract for logs and diagnostics. Control flow
never branches on the code of a backend failure; codes exist for diagnostics.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSIENT = "transient"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    CONFIGURATION = "configuration"
    EMPTY_RESPONSE = "empty_response"
    DESERIALIZATION = "deserialization"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
