"""Backend factory.

Purpose
-------
Create a :class:`BackendClient` from a canonical backend name. Every known
backend speaks the same OpenAI-compatible chat-completions protocol, so the
factory only selects configuration (base URL, default model, key variable);
it never imports vendor code.

Timeout and fallback semantics
------------------------------
- No timeouts, retries or fallbacks here. The factory either returns a
  client or raises a clear error.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from ..config import DEFAULTS, get_default_backend
from .client import BackendClient


class UnknownBackendError(Exception):
    """Raised when a backend name is not registered or its client cannot be built.

    Failure modes include:
    - The backend name is not one of :func:`supported_backends`.
    - The client constructor rejected the supplied overrides.
    """


def supported_backends() -> Tuple[str, ...]:
    """Return the canonical backend names in deterministic order."""
    return tuple(DEFAULTS.keys())


def create_backend(name: Optional[str] = None, **overrides: Any) -> BackendClient:
    """Return a client for ``name`` (default: ``UNWRAP_OR_AI_BACKEND`` or ``groq``).

    Parameters
    ----------
    name:
        Canonical backend name (``groq``, ``cerebras``, ``openai``).
    **overrides:
        Forwarded to :class:`BackendClient` (``base_url``, ``model``,
        ``key_provider``, ``http_client``, ``async_http_client``).

    Raises
    ------
    UnknownBackendError
        If the backend is unknown or the constructor arguments are invalid.
    """
    backend = (name or get_default_backend()).lower().strip()
    if backend not in DEFAULTS:
        raise UnknownBackendError(f"Unknown backend '{name or backend}'")
    try:
        return BackendClient(backend, **overrides)
    except TypeError as exc:
        raise UnknownBackendError(f"Invalid arguments for '{backend}' backend client: {exc}") from exc


__all__ = ["UnknownBackendError", "create_backend", "supported_backends"]
