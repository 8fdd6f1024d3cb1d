"""Completion abstraction for the RIM Agent Host.

Services depend on these types only; the HTTP implementation lives in
``infrastructure.adapters.completion_client``. Tests substitute fakes for
``CompletionProvider`` without touching the network.

Design Principles:
- One request type for buffered and streaming calls
- Buffered calls return the parsed provider body untouched
- Streaming calls return a handle over the live upstream response
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Mapping, Optional, Union

from domain.models import ChatMessage, ToolDefinition


@dataclass
class CompletionRequest:
    """A chat-completion request.

    Sampling fields left as None are omitted from the provider body.
    When ``max_tokens`` is None the client derives it from the model's
    context window.
    """

    model: str
    messages: list[ChatMessage]
    stream: bool = False
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    stop: Optional[Union[str, list[str]]] = None
    tools: list[ToolDefinition] = field(default_factory=list)
    tool_choice: Optional[str] = None


class CompletionResponse:
    """Parsed body of a buffered completion."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.data = data

    @property
    def message(self) -> dict[str, Any]:
        choices = self.data.get("choices") or [{}]
        return choices[0].get("message") or {}

    @property
    def content(self) -> str:
        return self.message.get("content") or ""

    @property
    def tool_calls(self) -> list[dict[str, Any]]:
        """Raw tool calls in provider order (``{"function": {"name", "arguments"}}``)."""
        return list(self.message.get("tool_calls") or [])


class CompletionStream(ABC):
    """Handle over a live streaming completion.

    The bytes yielded by ``iter_bytes`` are the provider's own event
    stream, unmodified. Closing the handle aborts the upstream request.
    """

    @property
    @abstractmethod
    def status_code(self) -> int:
        """Upstream HTTP status."""
        ...

    @property
    @abstractmethod
    def media_type(self) -> str:
        """Upstream content type."""
        ...

    @property
    @abstractmethod
    def headers(self) -> Mapping[str, str]:
        """Upstream response headers."""
        ...

    @abstractmethod
    def iter_bytes(self) -> AsyncIterator[bytes]:
        """Relay the upstream body chunk by chunk."""
        ...

    @abstractmethod
    async def aclose(self) -> None:
        """Abort the upstream request. Safe to call more than once."""
        ...


class CompletionProvider(ABC):
    """Sends completion requests to whichever provider serves the model."""

    @abstractmethod
    async def send(self, request: CompletionRequest) -> Union[CompletionResponse, CompletionStream]:
        """Send a request; a ``CompletionStream`` when ``request.stream`` is set."""
        ...
