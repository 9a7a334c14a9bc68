"""Transport timeout configuration.

The recovery core imposes no timeout of its own: the backend call suspends
until the request completes or fails. The only timeout in play is the one the
pooled ``httpx`` transport is created with, which this module centralizes.

Supported environment variables (all optional):
    UNWRAP_OR_AI_HTTP_TIMEOUT_SECONDS
    UNWRAP_OR_AI_CONNECT_TIMEOUT_SECONDS
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_HTTP_TIMEOUT

HTTP_TIMEOUT_ENV = "UNWRAP_OR_AI_HTTP_TIMEOUT_SECONDS"
CONNECT_TIMEOUT_ENV = "UNWRAP_OR_AI_CONNECT_TIMEOUT_SECONDS"


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized transport timeout values (seconds).

    Attributes:
        http_timeout_seconds: Read/write/pool timeout for a single request.
        connect_timeout_seconds: Timeout for establishing the connection.
    """

    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT


_CACHED: Optional[TimeoutConfig] = None
_CACHE_KEY: Optional[Tuple[str, str]] = None


def _parse_env_float(name: str, default: float) -> float:
    """Parse a positive float from the environment, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`.

    The cache is refreshed when the relevant environment variables change so
    tests can adjust values with ``monkeypatch.setenv``.
    """
    global _CACHED, _CACHE_KEY  # noqa: PLW0603 - module cache
    key = (os.getenv(HTTP_TIMEOUT_ENV, ""), os.getenv(CONNECT_TIMEOUT_ENV, ""))
    if _CACHED is not None and key == _CACHE_KEY:
        return _CACHED
    _CACHED = TimeoutConfig(
        http_timeout_seconds=_parse_env_float(HTTP_TIMEOUT_ENV, DEFAULT_HTTP_TIMEOUT),
        connect_timeout_seconds=_parse_env_float(CONNECT_TIMEOUT_ENV, DEFAULT_CONNECT_TIMEOUT),
    )
    _CACHE_KEY = key
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
