"""Backend helpers: request headers and response decoding.

Purpose:
- Keep ``client.py`` focused on orchestration (key lookup, one request,
  logging) by moving the pure request/response translation here.

Failure semantics:
- Every decoding failure raises ``BackendError``: non-2xx status (the body
  becomes the message), malformed envelope, empty choice list, missing
  content, and content that does not validate against the target schema.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from ..base.dto import ChatCompletionDTO
from ..base.errors import BackendError, ErrorCode, classify_exception, status_to_code
from ..base.models import RecoveryRequest


def build_headers(api_key: str) -> Dict[str, str]:
    """Return the bearer-authenticated JSON headers for a completion request."""
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def transport_error(exc: httpx.HTTPError, *, backend: str, model: str) -> BackendError:
    """Wrap an ``httpx`` transport exception as a ``BackendError``."""
    return BackendError(
        code=classify_exception(exc),
        message=str(exc) or exc.__class__.__name__,
        backend=backend,
        model=model,
        raw=exc,
    )


def parse_envelope(response: httpx.Response, *, backend: str, model: str) -> ChatCompletionDTO:
    """Check the status and validate the top-level completion envelope."""
    if not response.is_success:
        raise BackendError(
            code=status_to_code(response.status_code),
            message=f"API request failed: {response.text}",
            backend=backend,
            model=model,
            status=response.status_code,
        )
    try:
        return ChatCompletionDTO.model_validate_json(response.content)
    except ValidationError as exc:
        raise BackendError(
            code=ErrorCode.DESERIALIZATION,
            message=f"malformed completion envelope: {exc}",
            backend=backend,
            model=model,
            status=response.status_code,
            raw=exc,
        ) from exc


def extract_content(envelope: ChatCompletionDTO, *, backend: str, model: str) -> str:
    """Return ``choices[0].message.content`` or raise for an empty answer."""
    if not envelope.choices:
        raise BackendError(
            code=ErrorCode.EMPTY_RESPONSE,
            message="No choices in response",
            backend=backend,
            model=model,
        )
    content = envelope.first_content()
    if content is None:
        raise BackendError(
            code=ErrorCode.EMPTY_RESPONSE,
            message="First choice carries no message content",
            backend=backend,
            model=model,
        )
    return content


def decode_content(content: str, request: RecoveryRequest, *, backend: str) -> Any:
    """Return raw text, or the strictly validated target value for typed requests."""
    if request.schema is None:
        return content
    try:
        return request.schema.validate_json(content)
    except ValidationError as exc:
        raise BackendError(
            code=ErrorCode.DESERIALIZATION,
            message=f"response does not match schema '{request.schema.name}': {exc}",
            backend=backend,
            model=request.model,
            raw=exc,
        ) from exc


def usage_tokens(envelope: ChatCompletionDTO) -> Optional[Dict[str, Any]]:
    """Return the usage block as a plain dict for logging."""
    if envelope.usage is None:
        return None
    return envelope.usage.model_dump(exclude_none=True) or None


def decode_response(response: httpx.Response, request: RecoveryRequest, *, backend: str) -> tuple[Any, ChatCompletionDTO]:
    """Full decoding pipeline: status, envelope, first choice, optional schema."""
    envelope = parse_envelope(response, backend=backend, model=request.model)
    content = extract_content(envelope, backend=backend, model=request.model)
    return decode_content(content, request, backend=backend), envelope


__all__ = [
    "build_headers",
    "transport_error",
    "parse_envelope",
    "extract_content",
    "decode_content",
    "decode_response",
    "usage_tokens",
]
