"""ChatMessage value object."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class MessageRole(str, Enum):
    """Roles accepted by chat-completion providers."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """A single message of a conversation.

    Ordered sequences of messages form a history, oldest first.
    """

    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.ASSISTANT, content=content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the provider wire format."""
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        return cls(role=MessageRole(data["role"]), content=data.get("content") or "")
