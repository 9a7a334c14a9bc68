"""Unified recovery error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``unwrap_or_ai.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.backend_error import BackendError
from .errors_parts.configuration_error import ConfigurationError
from .errors_parts.recovery_errors import (
    OriginalFailureError,
    RecoveryAbortedError,
    SchemaDerivationError,
)
from .errors_parts.classification import classify_exception, status_to_code

__all__ = [
    "ErrorCode",
    "BackendError",
    "ConfigurationError",
    "RecoveryAbortedError",
    "OriginalFailureError",
    "SchemaDerivationError",
    "classify_exception",
    "status_to_code",
]
