"""ModelDescriptor value object."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class LlmProviderType(str, Enum):
    """Supported chat-completion provider families."""

    OPENAI = "openai"
    PERPLEXITY = "perplexity"
    GROQ = "groq"


@dataclass(frozen=True)
class ModelDescriptor:
    """Static facts about a model: who serves it and how large its window is.

    The credential is never rendered by repr() nor serialized.
    """

    name: str
    provider: LlmProviderType
    context_window: int
    credential: str = field(default="", repr=False)

    @property
    def supports_tools(self) -> bool:
        """Only the OpenAI family accepts a tool catalog."""
        return self.provider == LlmProviderType.OPENAI

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "provider": self.provider.value,
            "context_window": self.context_window,
            "supports_tools": self.supports_tools,
        }
