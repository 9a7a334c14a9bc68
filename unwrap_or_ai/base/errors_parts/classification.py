"""Map arbitrary exceptions onto :class:`ErrorCode`.

Order of checks in :func:`classify_exception`:

1. our own ``BackendError`` / ``ConfigurationError`` keep their code
2. cancellation, then timeouts (stdlib, asyncio, httpx)
3. other httpx transport failures are transient
4. an HTTP status found on the exception or its ``response``
5. keywords in the message
6. ``UNKNOWN``
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional, Tuple

import httpx

from .backend_error import BackendError
from .configuration_error import ConfigurationError
from .error_code import ErrorCode

_TIMEOUT_TYPES = (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)

HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

# checked in order; the first group with a matching keyword wins
_MESSAGE_KEYWORDS: Tuple[Tuple[ErrorCode, Tuple[str, ...]], ...] = (
    (ErrorCode.RATE_LIMIT, ("rate limit", "rate-limit", "too many requests")),
    (ErrorCode.TIMEOUT, ("timeout", "timed out")),
    (ErrorCode.AUTH, ("unauthorized", "forbidden", "api key")),
    (ErrorCode.NOT_FOUND, ("not found", "does not exist")),
    (ErrorCode.UNAVAILABLE, ("unavailable", "temporarily down")),
    (ErrorCode.VALIDATION, ("validation", "invalid", "malformed")),
    (ErrorCode.SERVER_ERROR, ("server error", "internal error")),
)


def _as_status(value: object) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool) and 100 <= value <= 599:
        return value
    return None


def extract_status(exc: object) -> Optional[int]:
    """Find an HTTP status on ``exc`` (``status_code``, ``status``) or on ``exc.response``."""
    candidates = [getattr(exc, "status_code", None), getattr(exc, "status", None)]
    response = getattr(exc, "response", None)
    if response is not None:
        candidates.append(getattr(response, "status_code", None))
    for candidate in candidates:
        status = _as_status(candidate)
        if status is not None:
            return status
    return None


def status_to_code(status: int) -> ErrorCode:
    """Known statuses from ``HTTP_STATUS_MAP``; other 5xx are server errors."""
    code = HTTP_STATUS_MAP.get(status)
    if code is not None:
        return code
    return ErrorCode.SERVER_ERROR if status >= 500 else ErrorCode.UNKNOWN


def code_from_message(message: str) -> Optional[ErrorCode]:
    text = message.lower()
    for code, keywords in _MESSAGE_KEYWORDS:
        if any(word in text for word in keywords):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    if isinstance(exc, (BackendError, ConfigurationError)):
        return exc.code
    if isinstance(exc, asyncio.CancelledError):
        return ErrorCode.CANCELLED
    if isinstance(exc, _TIMEOUT_TYPES):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    status = extract_status(exc)
    if status is not None:
        return status_to_code(status)
    return code_from_message(str(exc)) or ErrorCode.UNKNOWN


__all__ = [
    "classify_exception",
    "code_from_message",
    "extract_status",
    "status_to_code",
    "HTTP_STATUS_MAP",
]
