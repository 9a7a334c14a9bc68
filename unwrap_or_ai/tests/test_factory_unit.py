from __future__ import annotations

import pytest

from unwrap_or_ai.backend import BackendClient, UnknownBackendError, create_backend, supported_backends


def test_supported_backends():
    assert supported_backends() == ("groq", "cerebras", "openai")  # nosec B101


def test_default_backend_is_groq():
    client = create_backend()
    assert isinstance(client, BackendClient)  # nosec B101
    assert client.backend_name == "groq"  # nosec B101
    assert client.endpoint == "https://api.groq.com/openai/v1/chat/completions"  # nosec B101


def test_backend_selected_by_environment(monkeypatch):
    monkeypatch.setenv("UNWRAP_OR_AI_BACKEND", "cerebras")
    client = create_backend()
    assert client.backend_name == "cerebras"  # nosec B101
    assert client.default_model() == "qwen-3-coder-480b"  # nosec B101


def test_overrides_are_forwarded():
    client = create_backend("OpenAI", model="gpt-4.1")
    assert client.backend_name == "openai"  # nosec B101
    assert client.default_model() == "gpt-4.1"  # nosec B101


def test_unknown_backend():
    with pytest.raises(UnknownBackendError):
        create_backend("nope")


def test_invalid_constructor_arguments():
    with pytest.raises(UnknownBackendError):
        create_backend("groq", temperature=0.2)
