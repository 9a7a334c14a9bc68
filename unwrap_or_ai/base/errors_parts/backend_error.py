"""
Structured backend error exception type.

Wraps transport, HTTP and decoding failures of a chat-completion backend with a
normalized `ErrorCode` for consistent structured logging. The recovery layer
treats every `BackendError` alike; the code is diagnostic only.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class BackendError(Exception):
    """Represents a failed backend request with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message. For non-2xx responses this is
            the response body.
        backend: Backend key where the error originated (e.g., ``"groq"``).
        model: Optional model name associated with the failure.
        status: HTTP status code when the backend answered.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    backend: str
    model: Optional[str] = None
    status: Optional[int] = None
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining backend, model, code, and message."""
        return f"{self.backend}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["BackendError"]
