"""AI controller: chat messages, RIM streams and catalog endpoints."""

import logging
from typing import Any, Literal, Optional, Union

from classy_fastapi.decorators import get, post
from fastapi.responses import JSONResponse, StreamingResponse
from neuroglia.dependency_injection import ServiceProviderBase
from neuroglia.mapping import Mapper
from neuroglia.mediation import Mediator
from neuroglia.mvc import ControllerBase
from opentelemetry import trace
from pydantic import BaseModel, ConfigDict, Field

from application.actions import ActionContext, ToolCatalog
from application.exceptions import RimHostError
from application.llm import CompletionStream
from application.services import MessageOptions, MessageService, RimService
from domain.models import ChatMessage
from infrastructure.model_registry import ModelRegistry

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class HistoryMessage(BaseModel):
    """One prior message of the conversation."""

    role: Literal["system", "user", "assistant"]
    content: str = ""


class SendMessageRequest(BaseModel):
    """Request body for a plain chat message.

    ``model`` and ``prompt`` are optional here so that their absence is
    reported as a 400 naming the missing fields.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model: Optional[str] = Field(None, description="Model name, e.g. gpt-4")
    system: Optional[str] = Field(None, description="System instruction")
    prompt: Optional[str] = Field(None, description="The user's message")
    stream: bool = True
    history: list[HistoryMessage] = Field(default_factory=list)
    mode: Optional[str] = None
    temperature: float = 0.5
    max_tokens: int = Field(1024, alias="maxTokens")
    top_p: float = Field(1.0, alias="topP")
    frequency_penalty: float = Field(0.0001, alias="frequencyPenalty")
    presence_penalty: float = Field(0.0, alias="presencePenalty")
    stop: Optional[Union[str, list[str]]] = None


class RimMessageRequest(BaseModel):
    """Request body for a RIM stream."""

    prompt: Optional[str] = Field(None, description="The user's message")
    properties: dict[str, Any] = Field(default_factory=dict, description="Request-scoped data handed to actions (e.g. wallet)")


def error_response(error: RimHostError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


class AiController(ControllerBase):
    """Controller for the ``/ai`` endpoints."""

    def __init__(self, service_provider: ServiceProviderBase, mapper: Mapper, mediator: Mediator):
        super().__init__(service_provider, mapper, mediator)

    @post("/message")
    async def send_message(self, body: SendMessageRequest) -> Any:
        """
        Send one chat message to a language model.

        The system/history/prompt triple is trimmed to the model's context
        window (reserving `maxTokens` for the reply) before it is sent.

        **Output:**
        - `stream=true`: the provider's raw event stream, with its status and content type
        - `stream=false`: `{data, message}` with the provider's parsed body
        - on failure: `{status, message}` with the upstream status where known
        """
        message_service = self.service_provider.get_required_service(MessageService)
        options = MessageOptions(
            stream=body.stream,
            temperature=body.temperature,
            max_tokens=body.max_tokens,
            top_p=body.top_p,
            frequency_penalty=body.frequency_penalty,
            presence_penalty=body.presence_penalty,
            stop=body.stop,
            mode=body.mode,
        )
        try:
            result = await message_service.send_message(
                model=body.model,
                prompt=body.prompt,
                system=body.system,
                history=[ChatMessage.from_dict(item.model_dump()) for item in body.history],
                options=options,
            )
        except RimHostError as e:
            logger.warning(f"⚠️ Message request failed: {e!r}")
            return error_response(e)

        if isinstance(result, CompletionStream):
            return StreamingResponse(
                MessageService.relay(result),
                status_code=result.status_code,
                media_type=result.media_type,
                headers={**SSE_HEADERS, **MessageService.forwarded_headers(result)},
            )
        return {"data": result.data, "message": "Message sent successfully"}

    @post("/message/rim")
    async def send_rim_message(self, body: RimMessageRequest) -> Any:
        """
        Answer a message with rich interactive messages (RIMs), streamed as SSE.

        **Events, in order:**
        1. `{"type": "actionsSolved", "actions": [...]}`: the actions selected for the prompt
        2. `{"type": "rims", "rims": [...]}`: one RIM per action that succeeded
        3. the language model's own token stream
        4. `{"type": "error", ...}` only if the answer fails after streaming began
        """
        rim_service = self.service_provider.get_required_service(RimService)
        with tracer.start_as_current_span("ai.message.rim"):
            try:
                session = await rim_service.open(body.prompt or "", ActionContext(properties=body.properties))
            except RimHostError as e:
                logger.warning(f"⚠️ RIM request failed before streaming: {e!r}")
                return error_response(e)

        return StreamingResponse(session.events(), media_type="text/event-stream", headers=SSE_HEADERS)

    @get("/models")
    async def list_models(self) -> list[dict[str, Any]]:
        """List the known models with their provider and context window."""
        registry = self.service_provider.get_required_service(ModelRegistry)
        return [descriptor.to_dict() for descriptor in registry.list_models()]

    @get("/actions")
    async def list_actions(self) -> list[dict[str, Any]]:
        """List the tools the action resolver can select."""
        catalog = self.service_provider.get_required_service(ToolCatalog)
        return [tool.to_dict() for tool in catalog.tools]
