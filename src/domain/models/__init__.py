"""Domain value objects for the RIM Agent Host.

These are small immutable values passed between the resolver, the
dispatcher and the composer. None of them is persisted.
"""

from .action_result import ActionResult
from .chat_message import ChatMessage, MessageRole
from .model_descriptor import LlmProviderType, ModelDescriptor
from .tool import ToolCall, ToolDefinition

__all__ = [
    "ActionResult",
    "ChatMessage",
    "LlmProviderType",
    "MessageRole",
    "ModelDescriptor",
    "ToolCall",
    "ToolDefinition",
]
