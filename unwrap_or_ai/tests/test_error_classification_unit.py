from __future__ import annotations

import asyncio
import types

import httpx

from unwrap_or_ai.base.errors import (
    BackendError,
    ConfigurationError,
    ErrorCode,
    RecoveryAbortedError,
    classify_exception,
    status_to_code,
)


def test_classify_backend_and_configuration_errors_passthrough():
    e = BackendError(code=ErrorCode.AUTH, message="nope", backend="groq")
    assert classify_exception(e) is ErrorCode.AUTH  # nosec B101
    assert classify_exception(ConfigurationError("GROQ_API", "groq")) is ErrorCode.CONFIGURATION  # nosec B101


def test_classify_cancellation_timeouts_and_transport():
    assert classify_exception(asyncio.CancelledError()) is ErrorCode.CANCELLED  # nosec B101
    assert classify_exception(TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ConnectTimeout("slow")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.RemoteProtocolError("eof")) is ErrorCode.TRANSIENT  # nosec B101


def test_classify_http_status_mapping():
    e1 = types.SimpleNamespace(status_code=404)
    assert classify_exception(e1) is ErrorCode.NOT_FOUND  # nosec B101
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))
    assert classify_exception(e2) is ErrorCode.UNAVAILABLE  # nosec B101


def test_status_to_code_fallbacks():
    assert status_to_code(429) is ErrorCode.RATE_LIMIT  # nosec B101
    assert status_to_code(599) is ErrorCode.SERVER_ERROR  # nosec B101
    assert status_to_code(418) is ErrorCode.UNKNOWN  # nosec B101


def test_classify_heuristics():
    assert classify_exception(Exception("rate limit exceeded")) is ErrorCode.RATE_LIMIT  # nosec B101
    assert classify_exception(Exception("timed out waiting")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(Exception("invalid api key")) is ErrorCode.AUTH  # nosec B101
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN  # nosec B101


def test_error_messages():
    err = BackendError(code=ErrorCode.SERVER_ERROR, message="API request failed: boom", backend="groq", model="m", status=500)
    assert str(err) == "groq:m server_error: API request failed: boom"  # nosec B101

    aborted = RecoveryAbortedError("User with id 999 not found", function="fetch_user", recovery_error=err)
    assert str(aborted).startswith("AI recovery failed in fetch_user: groq:m server_error")  # nosec B101
    assert str(aborted).endswith("(original failure: User with id 999 not found)")  # nosec B101
    assert "value absent" in str(RecoveryAbortedError(None, recovery_error=err))  # nosec B101
