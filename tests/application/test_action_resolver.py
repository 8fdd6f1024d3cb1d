"""Unit tests for ActionResolver."""

import pytest

from application.exceptions import UpstreamRejectedError
from application.services.action_resolver import ActionResolver, decode_arguments
from domain.models import ChatMessage, MessageRole, ToolCall


@pytest.fixture
def make_resolver(registry, catalog, allocator):
    def _make(completion):
        return ActionResolver(completion, registry, catalog, allocator)

    return _make


class TestActionResolver:
    """Test classification and filtering."""

    @pytest.mark.asyncio
    async def test_returns_calls_in_provider_order(self, make_resolver, fake_completion_provider, make_tool_call_response):
        completion = fake_completion_provider(
            make_tool_call_response(
                ("getWalletInfo", {"prompt": "my balance", "infoRequested": ["balance"]}),
                ("transferSol", {"to": "ABC123", "amount": 2}),
            )
        )

        calls = await make_resolver(completion).resolve_actions("what is my balance, then send 2 SOL to ABC123")

        assert calls == [
            ToolCall(name="getWalletInfo", args={"prompt": "my balance", "infoRequested": ["balance"]}),
            ToolCall(name="transferSol", args={"to": "ABC123", "amount": 2}),
        ]

    @pytest.mark.asyncio
    async def test_answer_directly_yields_no_calls(self, make_resolver, fake_completion_provider, make_tool_call_response):
        completion = fake_completion_provider(make_tool_call_response(("answerMessage", {"prompt": "hello"})))

        assert await make_resolver(completion).resolve_actions("hello") == []

    @pytest.mark.asyncio
    async def test_default_tool_filtered_among_others(self, make_resolver, fake_completion_provider, make_tool_call_response):
        completion = fake_completion_provider(
            make_tool_call_response(
                ("answerMessage", {"prompt": "hi"}),
                ("addMemo", {"message": "gm"}),
            )
        )

        calls = await make_resolver(completion).resolve_actions("add a memo saying gm")

        assert [call.name for call in calls] == ["addMemo"]

    @pytest.mark.asyncio
    async def test_duplicates_are_kept(self, make_resolver, fake_completion_provider, make_tool_call_response):
        completion = fake_completion_provider(
            make_tool_call_response(("addMemo", {"message": "one"}), ("addMemo", {"message": "two"}))
        )

        calls = await make_resolver(completion).resolve_actions("two memos")

        assert [call.args["message"] for call in calls] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_undecodable_arguments_become_empty(self, make_resolver, fake_completion_provider, make_tool_call_response):
        completion = fake_completion_provider(make_tool_call_response(("generateImage", "{not json")))

        calls = await make_resolver(completion).resolve_actions("draw a cat")

        assert calls == [ToolCall(name="generateImage", args={})]

    @pytest.mark.asyncio
    async def test_classification_request(self, make_resolver, fake_completion_provider, make_tool_call_response, catalog):
        completion = fake_completion_provider(make_tool_call_response(("answerMessage", {})))

        await make_resolver(completion).resolve_actions("hello")

        request = completion.requests[0]
        assert request.model == "gpt-4"
        assert request.stream is False
        assert request.tool_choice == "required"
        assert [tool.name for tool in request.tools] == [tool.name for tool in catalog.tools]
        assert request.messages[0] == ChatMessage.system("You are an AI assistant that solves the best function to be performed based on user input.")
        assert request.messages[-1] == ChatMessage.user("hello")

    @pytest.mark.asyncio
    async def test_prior_messages_are_included(self, make_resolver, fake_completion_provider, make_tool_call_response):
        completion = fake_completion_provider(make_tool_call_response(("answerMessage", {})))
        prior = [ChatMessage.user("earlier"), ChatMessage.assistant("reply")]

        await make_resolver(completion).resolve_actions("now", prior_messages=prior)

        assert [m.role for m in completion.requests[0].messages] == [MessageRole.SYSTEM, MessageRole.USER, MessageRole.ASSISTANT, MessageRole.USER]

    @pytest.mark.asyncio
    async def test_oversized_prompt_is_trimmed(self, make_resolver, fake_completion_provider, make_tool_call_response):
        completion = fake_completion_provider(make_tool_call_response(("answerMessage", {})))

        await make_resolver(completion).resolve_actions("x" * 60000)

        assert len(completion.requests[0].messages[-1].content) < 60000

    @pytest.mark.asyncio
    async def test_classification_failure_propagates(self, make_resolver, fake_completion_provider):
        failure = UpstreamRejectedError("Rate limit reached", status_code=429)
        completion = fake_completion_provider(failure)

        with pytest.raises(UpstreamRejectedError) as exc_info:
            await make_resolver(completion).resolve_actions("hello")

        assert exc_info.value is failure


class TestDecodeArguments:
    """Test argument decoding."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ('{"a": 1}', {"a": 1}),
            ({"a": 1}, {"a": 1}),
            ("", {}),
            (None, {}),
            ("[1, 2]", {}),
            ("not json", {}),
        ],
    )
    def test_decode(self, raw, expected):
        assert decode_arguments(raw) == expected
