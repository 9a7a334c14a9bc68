"""
Pydantic DTOs for the chat-completions response envelope.

Purpose
-------
Validate the top-level JSON envelope returned by an OpenAI-compatible
``/chat/completions`` endpoint before the first choice's message content is
extracted. Only the fields the recovery flow reads are modeled strictly;
unknown keys are ignored so that backend-specific additions do not break
parsing.

Fallback semantics: none. Validation either succeeds or raises
``pydantic.ValidationError``; the backend client converts that into a
``BackendError``.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ChoiceMessageDTO(_Envelope):
    """Assistant message of a completion choice."""

    role: str = "assistant"
    content: Optional[str] = None


class ChoiceDTO(_Envelope):
    """One completion choice."""

    index: int = 0
    message: ChoiceMessageDTO
    finish_reason: Optional[str] = None


class UsageDTO(_Envelope):
    """Token accounting reported by the backend."""

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ChatCompletionDTO(_Envelope):
    """Top-level chat-completions response envelope.

    Attributes:
        id: Backend response id, when reported.
        model: Model that served the request, when reported.
        choices: Completion choices; the recovery flow reads ``choices[0]``.
        usage: Optional token usage block.
    """

    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[ChoiceDTO]
    usage: Optional[UsageDTO] = None

    def first_content(self) -> Optional[str]:
        """Return ``choices[0].message.content`` or ``None`` when there are no choices."""
        if not self.choices:
            return None
        return self.choices[0].message.content


__all__ = ["ChoiceMessageDTO", "ChoiceDTO", "UsageDTO", "ChatCompletionDTO"]
