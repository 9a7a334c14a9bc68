"""
Message DTO used in backend requests.

Defines the `Message` dataclass and the `Role` literal representing the sender
role of a chat message.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Message:
    """A chat message sent to a chat-completion backend.

    Attributes:
        role: The role of the message author.
        content: Plain text content.
    """

    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


__all__ = ["Message", "Role"]
