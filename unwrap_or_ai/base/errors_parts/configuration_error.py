"""
Configuration error raised before any backend request is attempted.

A missing API key is reported as its own exception type so that diagnostics
can tell "recovery was never possible" apart from "the backend failed".
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode


class ConfigurationError(Exception):
    """Raised when the backend cannot be used because configuration is missing.

    Attributes:
        variable: Environment variable expected to hold the API key.
        backend: Backend key the configuration belongs to.
        code: Always :attr:`ErrorCode.CONFIGURATION`.
    """

    code = ErrorCode.CONFIGURATION

    def __init__(self, variable: Optional[str], backend: str, message: Optional[str] = None) -> None:
        self.variable = variable
        self.backend = backend
        if message is None:
            if variable:
                message = f"{variable} environment variable not set"
            else:
                message = f"no API key configured for backend '{backend}'"
        self.message = message
        super().__init__(message)


__all__ = ["ConfigurationError"]
