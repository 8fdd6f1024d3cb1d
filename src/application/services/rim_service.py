"""RIM Service: the streaming gateway for rich-interactive-message replies.

One request walks ``RECEIVED -> RESOLVING -> EXECUTING -> COMPOSING ->
STREAMING -> CLOSED``. Resolution happens in ``open()`` so a
classification failure surfaces before any byte reaches the caller.
Everything after that is emitted as server-sent events:

1. ``actionsSolved`` with the resolved calls
2. ``rims`` with the action results
3. the provider's own event stream, relayed byte for byte

A failure after the first event ends the stream with an ``error`` event.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Optional

from opentelemetry import trace

from application.actions.base import ActionContext
from application.exceptions import RequestValidationError, RimHostError, StreamTerminatedEarlyError
from application.llm import CompletionProvider, CompletionRequest, CompletionStream
from application.services.action_dispatcher import ActionDispatcher
from application.services.action_resolver import ActionResolver
from application.services.conversation_composer import ConversationComposer
from domain.models import ToolCall
from observability.metrics import rim_requests, rim_stream_duration, rim_stream_errors

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def format_sse_event(payload: dict[str, Any]) -> bytes:
    """Encode one server-sent event frame."""
    return f"data: {json.dumps(payload)}\n\n".encode("utf-8")


def error_event(error: RimHostError) -> bytes:
    return format_sse_event({"type": "error", "message": error.message, "status": error.status_code})


class RimState(str, Enum):
    RECEIVED = "received"
    RESOLVING = "resolving"
    EXECUTING = "executing"
    COMPOSING = "composing"
    STREAMING = "streaming"
    CLOSED = "closed"


@dataclass(frozen=True)
class AnswerSampling:
    """Sampling used for the final streaming answer."""

    model: str = "gpt-4"
    temperature: float = 0.5
    max_tokens: int = 1024
    top_p: float = 1.0
    frequency_penalty: float = 0.0001
    presence_penalty: float = 0.0


class RimSession:
    """One RIM request after resolution succeeded."""

    def __init__(self, service: "RimService", prompt: str, context: ActionContext, tool_calls: list[ToolCall]) -> None:
        self._service = service
        self.prompt = prompt
        self.context = context
        self.tool_calls = tool_calls
        self.state = RimState.RESOLVING
        self._stream: Optional[CompletionStream] = None

    def _transition(self, state: RimState) -> None:
        logger.debug(f"RIM {self.state.value} -> {state.value}")
        self.state = state

    async def events(self) -> AsyncIterator[bytes]:
        """Yield the SSE frames of this request, in order."""
        service = self._service
        start_time = time.time()
        outcome = "completed"
        try:
            self._transition(RimState.EXECUTING)
            yield format_sse_event({"type": "actionsSolved", "actions": [call.to_dict() for call in self.tool_calls]})

            results = await service.dispatcher.execute(self.tool_calls, self.context)
            yield format_sse_event({"type": "rims", "rims": [result.to_dict() for result in results]})

            self._transition(RimState.COMPOSING)
            messages = service.composer.compose(self.prompt, results)
            sampling = service.sampling
            self._stream = await service.completion.send(
                CompletionRequest(
                    model=sampling.model,
                    messages=messages,
                    stream=True,
                    temperature=sampling.temperature,
                    max_tokens=sampling.max_tokens,
                    top_p=sampling.top_p,
                    frequency_penalty=sampling.frequency_penalty,
                    presence_penalty=sampling.presence_penalty,
                )
            )

            self._transition(RimState.STREAMING)
            async for chunk in self._stream.iter_bytes():
                yield chunk

        except (asyncio.CancelledError, GeneratorExit):
            outcome = "cancelled"
            terminated = StreamTerminatedEarlyError(f"Caller disconnected while {self.state.value}")
            logger.info(f"🛑 {terminated.message}")
            raise

        except RimHostError as e:
            outcome = "error"
            logger.error(f"❌ RIM stream failed while {self.state.value}: {e.message}")
            rim_stream_errors.add(1, {"error_code": e.error_code})
            yield error_event(e)

        except Exception as e:
            outcome = "error"
            logger.error(f"❌ Unexpected error in RIM stream while {self.state.value}: {e}", exc_info=True)
            rim_stream_errors.add(1, {"error_code": "internal_error"})
            yield error_event(RimHostError("An unexpected error occurred while answering"))

        finally:
            if self._stream is not None:
                await self._stream.aclose()
            self._transition(RimState.CLOSED)
            rim_stream_duration.record((time.time() - start_time) * 1000, {"outcome": outcome})


class RimService:
    """Resolves, executes and answers one prompt as a RIM event stream."""

    def __init__(
        self,
        resolver: ActionResolver,
        dispatcher: ActionDispatcher,
        composer: ConversationComposer,
        completion: CompletionProvider,
        sampling: AnswerSampling = AnswerSampling(),
    ) -> None:
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.composer = composer
        self.completion = completion
        self.sampling = sampling

    async def open(self, prompt: str, context: Optional[ActionContext] = None) -> RimSession:
        """Resolve the prompt's actions and return a session ready to stream.

        Raises:
            RequestValidationError: If the prompt is empty
            RimHostError: If classification fails (nothing has been sent yet)
        """
        if not prompt:
            raise RequestValidationError.for_missing("prompt")

        rim_requests.add(1)
        with tracer.start_as_current_span("rim.open") as span:
            tool_calls = await self.resolver.resolve_actions(prompt)
            span.set_attribute("rim.tool_calls", len(tool_calls))

        logger.info(f"📨 RIM request resolved to {len(tool_calls)} actions")
        return RimSession(self, prompt, context or ActionContext(), tool_calls)

    async def handle(self, prompt: str, context: Optional[ActionContext] = None) -> AsyncIterator[bytes]:
        """Open a session and yield its frames."""
        session = await self.open(prompt, context)
        async for frame in session.events():
            yield frame
