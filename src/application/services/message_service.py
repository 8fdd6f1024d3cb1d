"""Message Service: the plain chat-completion path (``POST /message``)."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, AsyncIterator, Optional, Sequence, Union

from application.exceptions import RequestValidationError, RimHostError
from application.llm import CompletionProvider, CompletionRequest, CompletionResponse, CompletionStream
from application.services.budget_allocator import BudgetAllocator
from application.services.rim_service import error_event
from domain.models import ChatMessage

if TYPE_CHECKING:
    from infrastructure.model_registry import ModelRegistry

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."

# Connection-scoped or body-framing headers the relay recomputes.
NON_FORWARDED_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "transfer-encoding",
        "content-length",
        "content-encoding",
        "content-type",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "upgrade",
    }
)


@dataclass
class MessageOptions:
    """Caller-chosen sampling for one message."""

    stream: bool = True
    temperature: float = 0.5
    max_tokens: int = 1024
    top_p: float = 1.0
    frequency_penalty: float = 0.0001
    presence_penalty: float = 0.0
    stop: Optional[Union[str, list[str]]] = None
    mode: Optional[str] = None


class MessageService:
    """Trims the conversation to the model's window and forwards it."""

    def __init__(
        self,
        completion: CompletionProvider,
        registry: "ModelRegistry",
        allocator: BudgetAllocator,
        default_system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._completion = completion
        self._registry = registry
        self._allocator = allocator
        self._default_system_prompt = default_system_prompt

    async def send_message(
        self,
        model: Optional[str],
        prompt: Optional[str],
        system: Optional[str] = None,
        history: Sequence[ChatMessage] = (),
        options: Optional[MessageOptions] = None,
    ) -> Union[CompletionResponse, CompletionStream]:
        """Send one message with its history.

        The reply budget (``max_tokens``) is reserved before trimming.

        Raises:
            RequestValidationError: If model or prompt is missing
        """
        missing = [name for name, value in (("model", model), ("prompt", prompt)) if not value]
        if missing:
            raise RequestValidationError.for_missing(*missing)

        options = options or MessageOptions()
        descriptor = self._registry.resolve(model)
        system, trimmed_history, prompt = self._allocator.trim(
            system or self._default_system_prompt,
            history,
            prompt,
            descriptor.context_window,
            options.max_tokens,
        )
        if options.mode:
            logger.debug(f"Message mode '{options.mode}' requested")

        return await self._completion.send(
            CompletionRequest(
                model=descriptor.name,
                messages=[ChatMessage.system(system), *trimmed_history, ChatMessage.user(prompt)],
                stream=options.stream,
                temperature=options.temperature,
                max_tokens=options.max_tokens,
                top_p=options.top_p,
                frequency_penalty=options.frequency_penalty,
                presence_penalty=options.presence_penalty,
                stop=options.stop,
            )
        )

    @staticmethod
    def forwarded_headers(stream: CompletionStream) -> dict[str, str]:
        """Upstream headers safe to send to the caller alongside the relayed body."""
        return {name: value for name, value in stream.headers.items() if name.lower() not in NON_FORWARDED_HEADERS}

    @staticmethod
    async def relay(stream: CompletionStream) -> AsyncIterator[bytes]:
        """Relay a provider stream; a mid-stream failure ends it with an error event."""
        try:
            async for chunk in stream.iter_bytes():
                yield chunk
        except RimHostError as e:
            logger.error(f"❌ Message stream failed: {e.message}")
            yield error_event(e)
        finally:
            await stream.aclose()
