"""Pytest configuration for the unwrap_or_ai test suite.

Every test runs with a scrubbed environment (no API keys, no config file, no
``.env``) so results never depend on the developer's machine. Backends are
exercised through ``httpx.MockTransport``; no test touches the network.
"""

from __future__ import annotations

import os
from typing import Callable, Iterator

import pytest

from unwrap_or_ai.backend import BackendClient
from unwrap_or_ai.base.http import close_all_clients
from unwrap_or_ai.base.logging import BASE_LOGGER_NAME, get_logger
from unwrap_or_ai.config import reset_config_cache
from unwrap_or_ai.config.keys import StaticKeyProvider
from unwrap_or_ai.recovery import set_default_resolver
from unwrap_or_ai.tests.helpers import CallRecorder, ListHandler

_SCRUBBED_PREFIXES = ("GROQ_", "CEREBRAS_", "OPENAI_", "UNWRAP_OR_AI_")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Remove backend and library settings from the environment for one test."""
    for name in list(os.environ):
        if name.startswith(_SCRUBBED_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    reset_config_cache()
    set_default_resolver(None)
    yield
    reset_config_cache()
    set_default_resolver(None)
    close_all_clients()


@pytest.fixture()
def recorder() -> CallRecorder:
    return CallRecorder()


@pytest.fixture()
def make_client(recorder: CallRecorder) -> Callable[..., BackendClient]:
    """Factory for a ``BackendClient`` wired to the recorder's mock transport."""

    def _make(api_key: str | None = "test-key", backend: str = "groq", **overrides) -> BackendClient:
        kwargs = {
            "key_provider": StaticKeyProvider(api_key, variable="GROQ_API"),
            "http_client": recorder.sync_client(),
            "async_http_client": recorder.async_client(),
        }
        kwargs.update(overrides)
        return BackendClient(backend, **kwargs)

    return _make


@pytest.fixture()
def log_records(monkeypatch: pytest.MonkeyPatch) -> Iterator[ListHandler]:
    """Collect every structured event emitted under the library logger.

    The level comes from the environment because ``get_logger`` re-applies it
    on every call.
    """
    monkeypatch.setenv("UNWRAP_OR_AI_LOG_LEVEL", "DEBUG")
    base = get_logger(BASE_LOGGER_NAME)
    handler = ListHandler()
    base.addHandler(handler)
    yield handler
    base.removeHandler(handler)
