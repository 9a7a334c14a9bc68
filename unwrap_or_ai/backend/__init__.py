"""Chat-completions backend client, factory and model identifiers."""

from .client import BackendClient
from .factory import UnknownBackendError, create_backend, supported_backends
from . import models

__all__ = [
    "BackendClient",
    "UnknownBackendError",
    "create_backend",
    "supported_backends",
    "models",
]
