"""API key providers supplied to backend clients at construction.

The backend client never reads ``os.environ`` directly. It asks a
:class:`KeyProvider` for the key, so tests can substitute deterministic
configuration (``StaticKeyProvider``) without mutating process state.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol, runtime_checkable

from ..base.errors import ConfigurationError
from .env import get_env_var_name, is_placeholder, resolve_backend_key


@runtime_checkable
class KeyProvider(Protocol):
    """Capability returning the API key for a backend."""

    @property
    def variable(self) -> Optional[str]:
        """Name of the setting the key is read from (for error messages)."""
        ...

    def get_api_key(self) -> Optional[str]:
        """Return the API key, or ``None`` when it is not configured."""
        ...


class EnvKeyProvider:
    """Reads the key from environment variables mapped in ``config.env``.

    The lookup happens on every call, so a key exported after construction is
    still picked up.
    """

    def __init__(self, backend: str, environ: Optional[Mapping[str, str]] = None) -> None:
        self._backend = backend
        self._environ = environ

    @property
    def variable(self) -> Optional[str]:
        return get_env_var_name(self._backend)

    def get_api_key(self) -> Optional[str]:
        value, _ = resolve_backend_key(self._backend, self._environ)
        return value


class StaticKeyProvider:
    """Holds a fixed key (or ``None`` to simulate a missing key)."""

    def __init__(self, api_key: Optional[str], variable: Optional[str] = None) -> None:
        self._api_key = api_key
        self._variable = variable

    @property
    def variable(self) -> Optional[str]:
        return self._variable

    def get_api_key(self) -> Optional[str]:
        if not self._api_key or is_placeholder(self._api_key):
            return None
        return self._api_key


def require_api_key(provider: KeyProvider, backend: str) -> str:
    """Return the key from ``provider`` or raise :class:`ConfigurationError`."""
    key = provider.get_api_key()
    if not key:
        raise ConfigurationError(provider.variable, backend)
    return key


__all__ = ["KeyProvider", "EnvKeyProvider", "StaticKeyProvider", "require_api_key"]
