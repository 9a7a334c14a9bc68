"""Shared test helpers: canned completion envelopes and an outbound-call recorder."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Union

import httpx

Responder = Callable[[httpx.Request], httpx.Response]


def completion_body(
    content: Optional[str],
    *,
    finish_reason: str = "stop",
    response_id: str = "chatcmpl-test",
    usage: Optional[Dict[str, int]] = None,
) -> Dict[str, Any]:
    """Return an OpenAI-compatible chat-completions envelope."""
    return {
        "id": response_id,
        "object": "chat.completion",
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": finish_reason,
            }
        ],
        "usage": usage or {"prompt_tokens": 12, "completion_tokens": 7, "total_tokens": 19},
    }


def json_completion(value: Any, **kwargs: Any) -> Dict[str, Any]:
    """Envelope whose message content is ``value`` serialized as JSON text."""
    return completion_body(json.dumps(value), **kwargs)


class CallRecorder:
    """``httpx.MockTransport`` handler that records every outbound request.

    Responses are served in order; the last one is repeated when the queue
    runs out. A queued ``Exception`` is raised instead of answered.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._queue: List[Union[httpx.Response, Exception, Responder]] = []

    @property
    def count(self) -> int:
        return len(self.requests)

    def reply_json(self, body: Any, status: int = 200) -> "CallRecorder":
        self._queue.append(httpx.Response(status, json=body))
        return self

    def reply_text(self, text: str, status: int) -> "CallRecorder":
        self._queue.append(httpx.Response(status, text=text))
        return self

    def raise_error(self, exc: Exception) -> "CallRecorder":
        self._queue.append(exc)
        return self

    def last_json(self) -> Dict[str, Any]:
        assert self.requests, "no request was recorded"  # nosec B101
        return json.loads(self.requests[-1].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            return httpx.Response(500, text="no response queued")
        item = self._queue.pop(0) if len(self._queue) > 1 else self._queue[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return httpx.Response(item.status_code, headers=item.headers, content=item.content)
        return item(request)

    def sync_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class ListHandler(logging.Handler):
    """Capture log messages into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())

    def events(self) -> List[Dict[str, Any]]:
        out = []
        for msg in self.messages:
            try:
                payload = json.loads(msg)
            except ValueError:
                continue
            if isinstance(payload, dict):
                out.append(payload)
        return out

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.events() if e.get("event") == event]
