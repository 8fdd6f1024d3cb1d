"""Shared fixtures for the RIM Agent Host test suite.

Provides fake completion providers and streams so services can be tested
without the network, plus a registry with credentials for every provider.
"""

import json
from typing import Any, AsyncIterator, Optional, Union

import pytest

from application.actions import build_default_catalog
from application.llm import CompletionProvider, CompletionRequest, CompletionResponse, CompletionStream
from application.services import BudgetAllocator
from domain.models import LlmProviderType
from infrastructure.model_registry import ModelRegistry


class FakeCompletionStream(CompletionStream):
    """A CompletionStream replaying canned chunks, optionally failing at the end."""

    def __init__(
        self,
        chunks: list[bytes],
        error: Optional[BaseException] = None,
        status_code: int = 200,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self._chunks = chunks
        self._headers = headers or {"content-type": "text/event-stream"}
        self._error = error
        self._status_code = status_code
        self.closed = False
        self.close_count = 0

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def media_type(self) -> str:
        return "text/event-stream"

    @property
    def headers(self) -> dict[str, str]:
        return self._headers

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error

    async def aclose(self) -> None:
        self.closed = True
        self.close_count += 1


class FakeCompletionProvider(CompletionProvider):
    """Returns queued responses in order and records every request."""

    def __init__(self, *responses: Union[CompletionResponse, CompletionStream, BaseException]) -> None:
        self._responses = list(responses)
        self.requests: list[CompletionRequest] = []

    async def send(self, request: CompletionRequest) -> Union[CompletionResponse, CompletionStream]:
        self.requests.append(request)
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def tool_call_response(*calls: tuple[str, Any]) -> CompletionResponse:
    """Build a buffered response carrying the given ``(name, arguments)`` tool calls."""
    tool_calls = []
    for index, (name, arguments) in enumerate(calls):
        tool_calls.append(
            {
                "id": f"call_{index}",
                "type": "function",
                "function": {
                    "name": name,
                    "arguments": arguments if isinstance(arguments, str) else json.dumps(arguments),
                },
            }
        )
    return CompletionResponse({"choices": [{"message": {"role": "assistant", "content": None, "tool_calls": tool_calls}}]})


def parse_sse_frame(frame: bytes) -> dict[str, Any]:
    text = frame.decode("utf-8")
    assert text.startswith("data: ") and text.endswith("\n\n")
    return json.loads(text[len("data: ") :])


@pytest.fixture
def fake_completion_stream():
    """Factory for FakeCompletionStream."""
    return FakeCompletionStream


@pytest.fixture
def fake_completion_provider():
    """Factory for FakeCompletionProvider."""
    return FakeCompletionProvider


@pytest.fixture
def make_tool_call_response():
    """Factory for buffered tool-call responses."""
    return tool_call_response


@pytest.fixture
def sse_frame_parser():
    """Decode one ``data: {...}`` frame into a dict."""
    return parse_sse_frame


@pytest.fixture
def registry() -> ModelRegistry:
    """Registry with a credential for every provider."""
    return ModelRegistry(
        credentials={
            LlmProviderType.OPENAI: "sk-openai-test",
            LlmProviderType.PERPLEXITY: "pplx-test",
            LlmProviderType.GROQ: "gsk-test",
        }
    )


@pytest.fixture
def catalog():
    """The default tool catalog."""
    return build_default_catalog()


@pytest.fixture
def allocator() -> BudgetAllocator:
    return BudgetAllocator()
