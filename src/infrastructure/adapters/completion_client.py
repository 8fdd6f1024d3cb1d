"""Completion Client: HTTP adapter for OpenAI-compatible chat-completion APIs.

All three provider families (OpenAI, Perplexity, Groq) speak the OpenAI
chat-completions wire format; they differ in endpoint, credential and
whether a tool catalog is accepted. The registry supplies all three.

Features:
- Buffered completions returning the parsed provider body
- Streaming completions relayed as raw bytes
- Bearer-token authentication per provider
- max_tokens derived from the context window when not given
- OpenTelemetry tracing and metrics
"""

import json
import logging
import time
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional, Union

import httpx
from opentelemetry import trace

from application.exceptions import RequestValidationError, UpstreamRejectedError, UpstreamUnreachableError
from application.llm import CompletionProvider, CompletionRequest, CompletionResponse, CompletionStream
from application.services.budget_allocator import TokenEstimator, estimate_tokens
from application.settings import Settings
from domain.models import ModelDescriptor
from infrastructure.model_registry import ModelRegistry
from observability.metrics import llm_request_count, llm_request_errors, llm_request_time

if TYPE_CHECKING:
    from neuroglia.hosting.web import WebApplicationBuilder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class HttpCompletionStream(CompletionStream):
    """CompletionStream over an open ``httpx.Response``."""

    def __init__(self, response: httpx.Response, model: str) -> None:
        self._response = response
        self._model = model
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def media_type(self) -> str:
        return self._response.headers.get("content-type", "text/event-stream")

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.TransportError as e:
            logger.error(f"❌ Completion stream for {self._model} interrupted: {e}")
            llm_request_errors.add(1, {"model": self._model, "reason": "stream_interrupted"})
            raise UpstreamUnreachableError("The language model stream was interrupted") from e
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()
        logger.debug(f"🔌 Completion stream for {self._model} closed")


class CompletionClient(CompletionProvider):
    """Sends chat-completion requests to the provider that serves the model.

    Usage:
        client = CompletionClient(registry, httpx.AsyncClient(timeout=120))
        response = await client.send(CompletionRequest(model="gpt-4", messages=[...]))
    """

    def __init__(
        self,
        registry: ModelRegistry,
        http_client: httpx.AsyncClient,
        reserved_tool_overhead: int = 0,
        estimator: TokenEstimator = estimate_tokens,
    ) -> None:
        self._registry = registry
        self._client = http_client
        self._reserved_tool_overhead = reserved_tool_overhead
        self._estimator = estimator

    async def send(self, request: CompletionRequest) -> Union[CompletionResponse, CompletionStream]:
        """Send a completion request.

        Raises:
            RequestValidationError: If model or messages are missing (nothing is sent)
            ConfigurationError: If the model or its credential is unknown
            UpstreamRejectedError: If the provider answers with a non-2xx status
            UpstreamUnreachableError: If the provider cannot be reached
        """
        missing = [name for name, value in (("model", request.model), ("messages", request.messages)) if not value]
        if missing:
            raise RequestValidationError.for_missing(*missing)

        descriptor = self._registry.resolve(request.model)
        url = self._registry.endpoint_for(descriptor.provider)
        body = self._build_request_body(request, descriptor)
        headers = {
            "Authorization": f"Bearer {descriptor.credential}",
            "Content-Type": "application/json",
        }
        if request.stream:
            headers["Accept"] = "text/event-stream"

        attributes = {"model": descriptor.name, "provider": descriptor.provider.value, "stream": str(request.stream)}
        llm_request_count.add(1, attributes)
        start_time = time.time()

        with tracer.start_as_current_span("completion.send") as span:
            span.set_attribute("llm.model", descriptor.name)
            span.set_attribute("llm.provider", descriptor.provider.value)
            span.set_attribute("llm.message_count", len(request.messages))
            span.set_attribute("llm.stream", request.stream)
            span.set_attribute("llm.max_tokens", body["max_tokens"])

            logger.info(f"🔧 Completion request: model={descriptor.name}, provider={descriptor.provider.value}, messages={len(request.messages)}, tools={len(body.get('tools', []))}, stream={request.stream}")

            http_request = self._client.build_request("POST", url, json=body, headers=headers)
            try:
                response = await self._client.send(http_request, stream=request.stream)
            except httpx.TimeoutException as e:
                logger.error(f"❌ Completion request to {descriptor.provider.value} timed out: {e}")
                llm_request_errors.add(1, {**attributes, "reason": "timeout"})
                raise UpstreamUnreachableError("The language model provider timed out") from e
            except httpx.RequestError as e:
                logger.error(f"❌ Cannot reach {descriptor.provider.value} at {url}: {e}")
                llm_request_errors.add(1, {**attributes, "reason": "unreachable"})
                raise UpstreamUnreachableError() from e

            duration_ms = (time.time() - start_time) * 1000
            llm_request_time.record(duration_ms, attributes)
            span.set_attribute("http.status_code", response.status_code)

            if not response.is_success:
                error_content = await response.aread()
                await response.aclose()
                llm_request_errors.add(1, {**attributes, "reason": str(response.status_code)})
                raise self._handle_http_error_from_status(response.status_code, error_content.decode("utf-8", errors="replace"), descriptor)

            if request.stream:
                return HttpCompletionStream(response, descriptor.name)

            try:
                data = response.json()
            except json.JSONDecodeError as e:
                logger.error(f"❌ {descriptor.provider.value} returned a non-JSON body: {e}")
                raise UpstreamRejectedError("The language model provider returned an invalid response", status_code=502) from e

            logger.debug(f"✅ Completion received from {descriptor.name} in {duration_ms:.0f}ms")
            return CompletionResponse(data)

    def _build_request_body(self, request: CompletionRequest, descriptor: ModelDescriptor) -> dict[str, Any]:
        """Build the provider body. Tools are only sent to tool-capable providers."""
        body: dict[str, Any] = {
            "model": descriptor.name,
            "messages": [message.to_dict() for message in request.messages],
            "stream": request.stream,
            "max_tokens": self._resolve_max_tokens(request, descriptor),
        }

        for key in ("temperature", "top_p", "frequency_penalty", "presence_penalty", "stop"):
            value = getattr(request, key)
            if value is not None:
                body[key] = value

        if request.tools:
            if descriptor.supports_tools:
                body["tools"] = [tool.to_openai_format() for tool in request.tools]
                if request.tool_choice:
                    body["tool_choice"] = request.tool_choice
            else:
                logger.debug(f"Provider {descriptor.provider.value} does not accept tools; omitting {len(request.tools)} tools")

        return body

    def _resolve_max_tokens(self, request: CompletionRequest, descriptor: ModelDescriptor) -> int:
        if request.max_tokens is not None:
            return request.max_tokens
        available = descriptor.context_window - self._estimator(request.messages) - self._reserved_tool_overhead
        return max(1, available)

    def _handle_http_error_from_status(self, status_code: int, error_text: str, descriptor: ModelDescriptor) -> UpstreamRejectedError:
        """Convert a provider error body into an UpstreamRejectedError.

        The structured ``error.message`` is forwarded when present.
        """
        error_detail = ""
        try:
            error_json = json.loads(error_text)
            error = error_json.get("error") if isinstance(error_json, dict) else None
            if isinstance(error, dict):
                error_detail = error.get("message") or ""
            elif isinstance(error, str):
                error_detail = error
        except json.JSONDecodeError:
            pass

        if not error_detail:
            error_detail = error_text[:200] or f"{descriptor.provider.value} rejected the request"

        logger.error(f"❌ {descriptor.provider.value} HTTP error: {status_code} - {error_detail}")
        return UpstreamRejectedError(
            error_detail,
            status_code=status_code,
            details={"provider": descriptor.provider.value, "model": descriptor.name},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if not self._client.is_closed:
            await self._client.aclose()

    @staticmethod
    def configure(builder: "WebApplicationBuilder", registry: ModelRegistry, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "CompletionClient":
        """Build the client and register it as the CompletionProvider singleton."""
        client = CompletionClient(
            registry=registry,
            http_client=http_client or httpx.AsyncClient(timeout=settings.completion_timeout),
            reserved_tool_overhead=settings.reserved_tool_overhead,
        )
        builder.services.add_singleton(CompletionProvider, singleton=client)
        builder.services.add_singleton(CompletionClient, singleton=client)
        logger.info(f"✅ CompletionClient configured (timeout={settings.completion_timeout}s, reserved_tool_overhead={settings.reserved_tool_overhead})")
        return client
