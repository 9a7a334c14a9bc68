"""
RecoveryRequest DTO: one structured-generation request.

Constructed fresh per recovery attempt and handed to the backend client. It
carries the system instruction, the user prompt, the model identifier and,
for typed requests, the target schema describing the expected result.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .message import Message

if TYPE_CHECKING:
    from ...schema import TargetSchema


@dataclass(frozen=True)
class RecoveryRequest:
    """Normalized request sent to a chat-completion backend.

    Attributes:
        system_instruction: Text of the leading ``system`` message.
        user_prompt: Text of the ``user`` message.
        model: Target model identifier.
        schema: Optional :class:`TargetSchema`; when present the request asks
            for structured output conforming to it.

    Methods:
        messages: Ordered ``Message`` list (system first, then user).
        to_payload: JSON body for ``POST /chat/completions``.
    """

    system_instruction: str
    user_prompt: str
    model: str
    schema: Optional["TargetSchema"] = None

    def messages(self) -> List[Message]:
        msgs: List[Message] = []
        if self.system_instruction:
            msgs.append(Message(role="system", content=self.system_instruction))
        msgs.append(Message(role="user", content=self.user_prompt))
        return msgs

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON request body for the chat-completions endpoint."""
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages()],
        }
        if self.schema is not None:
            payload["response_format"] = self.schema.response_format()
        return payload


__all__ = ["RecoveryRequest"]
