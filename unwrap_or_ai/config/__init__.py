"""Layered configuration for recovery backends.

Sources, later ones winning:

1. built-in defaults (``config.defaults``)
2. an optional JSON or YAML file named by ``UNWRAP_OR_AI_CONFIG_FILE``
3. ``<BACKEND>_MODEL`` / ``<BACKEND>_BASE_URL`` environment variables
4. keyword overrides passed by the caller

A ``.env`` file (``DOTENV_FILE``, default ``./.env``) is read once before the
environment is consulted. YAML files are only understood when PyYAML is
installed; JSON always works.

Config file layout::

    groq:
      model: openai/gpt-oss-120b
    cerebras:
      base_url: https://api.cerebras.ai/v1
    recovery:
      backend: groq
      policy: abort

API keys are not part of this layer; see ``config.env`` and ``config.keys``.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .defaults import (
    CEREBRAS_DEFAULT_BASE_URL,
    CEREBRAS_DEFAULT_MODEL,
    DEFAULT_BACKEND,
    DEFAULT_POLICY,
    GROQ_DEFAULT_BASE_URL,
    GROQ_DEFAULT_MODEL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
)
from .env import is_placeholder

try:
    import yaml  # type: ignore
except ImportError:  # pragma: no cover - PyYAML is a declared dependency
    yaml = None  # type: ignore

CONFIG_FILE_ENV = "UNWRAP_OR_AI_CONFIG_FILE"
BACKEND_ENV = "UNWRAP_OR_AI_BACKEND"
POLICY_ENV = "UNWRAP_OR_AI_POLICY"
DOTENV_ENV = "DOTENV_FILE"

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "groq": {"model": GROQ_DEFAULT_MODEL, "base_url": GROQ_DEFAULT_BASE_URL},
    "cerebras": {"model": CEREBRAS_DEFAULT_MODEL, "base_url": CEREBRAS_DEFAULT_BASE_URL},
    "openai": {"model": OPENAI_DEFAULT_MODEL, "base_url": OPENAI_DEFAULT_BASE_URL},
}

# config key -> environment suffix
ENV_FIELD_MAP = {"model": "MODEL", "base_url": "BASE_URL"}

_file_config: Optional[Dict[str, Any]] = None
_dotenv_done = False


def _parse_dotenv_line(line: str) -> Optional[tuple]:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    name, raw = line.split("=", 1)
    name = name.strip()
    if name.startswith("export "):
        name = name[len("export "):].strip()
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        value = value[1:-1]
    return (name, value) if name else None


def load_dotenv_once() -> None:
    """Copy ``KEY=VALUE`` lines from the ``.env`` file into ``os.environ``.

    Runs at most once per process (``reset_config_cache`` re-arms it). A
    variable that is already set is only replaced when its value looks like
    a placeholder.
    """
    global _dotenv_done
    if _dotenv_done:
        return
    _dotenv_done = True
    path = Path(os.getenv(DOTENV_ENV, ".env"))
    if not path.is_file():
        return
    for line in path.read_text(encoding="utf-8").splitlines():
        parsed = _parse_dotenv_line(line)
        if parsed is None:
            continue
        name, value = parsed
        current = os.environ.get(name)
        if current is None or is_placeholder(current):
            os.environ[name] = value


def _parse_config_text(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except ValueError:
        if yaml is None:
            return {}
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError:
            return {}
    return data if isinstance(data, dict) else {}


def _load_external_config() -> Dict[str, Any]:
    global _file_config
    if _file_config is None:
        location = os.getenv(CONFIG_FILE_ENV)
        path = Path(location) if location else None
        _file_config = _parse_config_text(path.read_text(encoding="utf-8")) if path and path.is_file() else {}
    return _file_config


def reset_config_cache() -> None:
    """Forget the parsed config file and re-arm ``.env`` loading (tests)."""
    global _file_config, _dotenv_done
    _file_config = None
    _dotenv_done = False


def _env_overrides(backend: str) -> Dict[str, Any]:
    prefix = backend.upper()
    found = {key: os.getenv(f"{prefix}_{suffix}") for key, suffix in ENV_FIELD_MAP.items()}
    return {key: value for key, value in found.items() if value}


def get_backend_config(backend: str, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return the merged ``{"model", "base_url", ...}`` settings for ``backend``.

    ``None`` values in ``overrides`` are ignored so callers can pass optional
    arguments straight through.
    """
    load_dotenv_once()
    name = (backend or "").strip().lower()
    merged: Dict[str, Any] = dict(DEFAULTS.get(name, {}))
    section = _load_external_config().get(name)
    if isinstance(section, dict):
        merged.update(section)
    merged.update(_env_overrides(name))
    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})
    return merged


def _recovery_setting(key: str, env_name: str, default: str) -> str:
    load_dotenv_once()
    from_env = os.getenv(env_name)
    if from_env:
        return from_env.strip().lower()
    section = _load_external_config().get("recovery")
    if isinstance(section, dict) and section.get(key):
        return str(section[key]).strip().lower()
    return default


def get_default_backend() -> str:
    """Backend used when none is named: env, then config file, then ``groq``."""
    return _recovery_setting("backend", BACKEND_ENV, DEFAULT_BACKEND)


def get_default_policy_name() -> str:
    """Recovery policy name: env, then config file, then ``propagate``."""
    return _recovery_setting("policy", POLICY_ENV, DEFAULT_POLICY)


def get_model(backend: str) -> Optional[str]:
    return get_backend_config(backend).get("model")


__all__ = [
    "get_backend_config",
    "get_default_backend",
    "get_default_policy_name",
    "get_model",
    "load_dotenv_once",
    "reset_config_cache",
    "DEFAULTS",
]
