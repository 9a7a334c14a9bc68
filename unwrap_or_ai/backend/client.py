"""OpenAI-compatible chat-completions backend client.

Purpose:
        Issue one ``POST {base_url}/chat/completions`` per call carrying a
        system instruction, a user prompt and, for typed requests, a
        ``response_format`` JSON schema. Returns the raw text of the first
        choice, or that text strictly deserialized into the target type.

External dependencies:
        - ``httpx`` only (pooled clients from ``base.http``). No vendor SDK.

Timeout strategy:
        - No timeout beyond the transport timeout the pooled client was created
          with (``get_timeout_config()``).

Retries and error handling:
        - No retries and no caching: exactly one outbound request per call.
        - A missing API key raises ``ConfigurationError`` before the request is
          built.
        - Transport failures, non-2xx statuses, malformed envelopes, empty
          choices and schema mismatches all raise ``BackendError``.
        - Structured logging uses ``normalized_log_event``.

Cancellation:
        - ``acomplete`` awaits ``httpx.AsyncClient.post``; cancelling the task
          abandons the in-flight request. Nothing is compensated.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from ..base.constants import CHAT_COMPLETIONS_PATH
from ..base.errors import BackendError, ConfigurationError
from ..base.http import get_async_httpx_client, get_httpx_client
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import RecoveryRequest
from ..config import get_backend_config
from ..config.keys import EnvKeyProvider, KeyProvider, require_api_key
from ..schema import TargetSchema, derive_schema
from .helpers import build_headers, decode_response, transport_error, usage_tokens


class BackendClient:
    """Narrow client for one OpenAI-compatible chat-completions backend."""

    def __init__(
        self,
        backend: str = "groq",
        *,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        key_provider: Optional[KeyProvider] = None,
        http_client: Optional[httpx.Client] = None,
        async_http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the client from layered configuration.

        Parameters
        ----------
        backend:
            Backend key (``groq``, ``cerebras``, ``openai`` or any name whose
            base URL is supplied explicitly or by configuration).
        base_url:
            Overrides the configured API base URL.
        model:
            Overrides the configured default model.
        key_provider:
            Source of the API key. Defaults to :class:`EnvKeyProvider` for
            ``backend``.
        http_client / async_http_client:
            Injected transports (tests use ``httpx.MockTransport``). When
            omitted, pooled clients from ``base.http`` are used.
        """
        cfg = get_backend_config(backend, overrides={"base_url": base_url, "model": model})
        resolved_base = cfg.get("base_url")
        if not resolved_base:
            raise ConfigurationError(f"{backend.upper()}_BASE_URL", backend, f"no base URL configured for backend '{backend}'")
        self._backend = backend
        self._base_url = str(resolved_base).rstrip("/")
        self._model = cfg.get("model")
        self._keys: KeyProvider = key_provider or EnvKeyProvider(backend)
        self._http = http_client
        self._ahttp = async_http_client
        self._logger = get_logger(f"backend.{backend}")

    @property
    def backend_name(self) -> str:
        return self._backend

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}{CHAT_COMPLETIONS_PATH}"

    def default_model(self) -> Optional[str]:
        return self._model

    def has_api_key(self) -> bool:
        """Return True when the key provider currently yields a key."""
        return bool(self._keys.get_api_key())

    # ----- request construction -----

    def build_request(
        self,
        system_instruction: str,
        user_prompt: str,
        model: Optional[str] = None,
        schema: Optional[TargetSchema] = None,
    ) -> RecoveryRequest:
        chosen = (model or "").strip() or self._model
        if not chosen:
            raise ConfigurationError(
                f"{self._backend.upper()}_MODEL",
                self._backend,
                f"no model configured for backend '{self._backend}'; pass model= or set {self._backend.upper()}_MODEL",
            )
        return RecoveryRequest(
            system_instruction=system_instruction,
            user_prompt=user_prompt,
            model=chosen,
            schema=schema,
        )

    # ----- sync -----

    def complete(
        self,
        system_instruction: str,
        user_prompt: str,
        model: Optional[str] = None,
        schema: Optional[TargetSchema] = None,
    ) -> Any:
        """Return raw text (no schema) or the schema-validated value.

        Raises:
            ConfigurationError: the API key or model is not configured. No
                request is sent.
            BackendError: the request failed or its answer could not be decoded.
        """
        return self.send(self.build_request(system_instruction, user_prompt, model, schema))

    def complete_typed(self, target: Any, system_instruction: str, user_prompt: str, model: Optional[str] = None) -> Any:
        """Derive the schema for ``target`` and return a value of that type."""
        return self.complete(system_instruction, user_prompt, model, derive_schema(target))

    def send(self, request: RecoveryRequest) -> Any:
        """Perform exactly one request for ``request`` and decode the answer."""
        api_key = require_api_key(self._keys, self._backend)
        ctx = LogContext(backend=self._backend, model=request.model)
        self._log_start(ctx, request)
        client = self._http or get_httpx_client(self._base_url, purpose=f"{self._backend}.chat")
        t0 = time.perf_counter()
        try:
            try:
                response = client.post(self.endpoint, json=request.to_payload(), headers=build_headers(api_key))
            except httpx.HTTPError as exc:
                raise transport_error(exc, backend=self._backend, model=request.model) from exc
            value, envelope = decode_response(response, request, backend=self._backend)
        except BackendError as err:
            self._log_error(ctx, err)
            raise
        self._log_end(ctx, envelope, t0)
        return value

    # ----- async -----

    async def acomplete(
        self,
        system_instruction: str,
        user_prompt: str,
        model: Optional[str] = None,
        schema: Optional[TargetSchema] = None,
    ) -> Any:
        """Async variant of :meth:`complete` on ``httpx.AsyncClient``."""
        return await self.asend(self.build_request(system_instruction, user_prompt, model, schema))

    async def acomplete_typed(self, target: Any, system_instruction: str, user_prompt: str, model: Optional[str] = None) -> Any:
        return await self.acomplete(system_instruction, user_prompt, model, derive_schema(target))

    async def asend(self, request: RecoveryRequest) -> Any:
        api_key = require_api_key(self._keys, self._backend)
        ctx = LogContext(backend=self._backend, model=request.model)
        self._log_start(ctx, request)
        client = self._ahttp or get_async_httpx_client(self._base_url, purpose=f"{self._backend}.chat")
        t0 = time.perf_counter()
        try:
            try:
                response = await client.post(self.endpoint, json=request.to_payload(), headers=build_headers(api_key))
            except httpx.HTTPError as exc:
                raise transport_error(exc, backend=self._backend, model=request.model) from exc
            value, envelope = decode_response(response, request, backend=self._backend)
        except BackendError as err:
            self._log_error(ctx, err)
            raise
        self._log_end(ctx, envelope, t0)
        return value

    # ----- logging helpers -----

    def _log_start(self, ctx: LogContext, request: RecoveryRequest) -> None:
        normalized_log_event(
            self._logger,
            "backend.request.start",
            ctx,
            phase="start",
            structured=request.schema is not None,
            schema_name=request.schema.name if request.schema is not None else None,
        )

    def _log_end(self, ctx: LogContext, envelope: Any, t0: float) -> None:
        latency_ms = (time.perf_counter() - t0) * 1000.0
        finish_reason = envelope.choices[0].finish_reason if envelope.choices else None
        ctx.response_id = envelope.id
        normalized_log_event(
            self._logger,
            "backend.request.end",
            ctx,
            phase="finalize",
            emitted=True,
            latency_ms=round(latency_ms, 3),
            finish_reason=finish_reason,
            tokens=usage_tokens(envelope),
        )

    def _log_error(self, ctx: LogContext, err: BackendError) -> None:
        normalized_log_event(
            self._logger,
            "backend.request.error",
            ctx,
            phase="finalize",
            emitted=False,
            error_code=err.code.value,
            status=err.status,
            error=err.message,
            level=logging.ERROR,
        )


__all__ = ["BackendClient"]
