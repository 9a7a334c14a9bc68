"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `unwrap_or_ai.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .backend_error import BackendError
from .configuration_error import ConfigurationError
from .recovery_errors import OriginalFailureError, RecoveryAbortedError, SchemaDerivationError
from .classification import classify_exception

__all__ = [
    "ErrorCode",
    "BackendError",
    "ConfigurationError",
    "RecoveryAbortedError",
    "OriginalFailureError",
    "SchemaDerivationError",
    "classify_exception",
]
