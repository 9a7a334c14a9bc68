"""Where each backend's API key lives in the environment.

``KEY_VARIABLES`` lists the accepted variable names per backend, the
preferred one first. Lookups return ``None`` instead of raising; whether a
missing key is an error is decided by ``config.keys.require_api_key``.
"""

from __future__ import annotations

import os
from typing import Dict, Iterator, Mapping, Optional, Tuple

KEY_VARIABLES: Dict[str, Tuple[str, ...]] = {
    "groq": ("GROQ_API", "GROQ_API_KEY"),
    "cerebras": ("CEREBRAS_API", "CEREBRAS_API_KEY"),
    "openai": ("OPENAI_API_KEY",),
}

# values copied from templates rather than real secrets
_PLACEHOLDER_MARKERS = ("placeholder", "changeme", "your_api_key", "example")


def is_placeholder(value: Optional[str]) -> bool:
    """True when ``value`` looks like a template value such as ``changeme``."""
    if value is None:
        return False
    lowered = str(value).strip().lower()
    return any(marker in lowered for marker in _PLACEHOLDER_MARKERS)


def get_env_var_candidates(backend: str) -> Iterator[str]:
    """Yield the variable names checked for ``backend``, preferred first."""
    yield from KEY_VARIABLES.get((backend or "").lower(), ())


def get_env_var_name(backend: str) -> Optional[str]:
    return next(get_env_var_candidates(backend), None)


def resolve_backend_key(
    backend: str, environ: Optional[Mapping[str, str]] = None
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(key, variable)`` for the first usable variable, else ``(None, None)``.

    Empty values and placeholders are skipped. ``environ`` defaults to
    ``os.environ``.
    """
    source = os.environ if environ is None else environ
    for name in get_env_var_candidates(backend):
        raw = source.get(name)
        if raw and raw.strip() and not is_placeholder(raw):
            return raw.strip(), name
    return None, None


__all__ = [
    "KEY_VARIABLES",
    "is_placeholder",
    "get_env_var_name",
    "get_env_var_candidates",
    "resolve_backend_key",
]
