"""Unit tests for ActionDispatcher.

Tests cover:
- Sequential execution and result order
- Fault isolation (raising handlers, missing handlers)
- Schema mismatches logged without dropping the call
- Request properties merged into handler arguments
- Startup validation against the tool catalog
"""

import logging
from typing import Any

import pytest

from application.actions import ActionContext, ActionHandler, ToolCatalog
from application.exceptions import ConfigurationError
from application.services.action_dispatcher import ActionDispatcher
from domain.models import ActionResult, ToolCall, ToolDefinition


class RecordingHandler(ActionHandler):
    """Returns a blink result and records the arguments it received."""

    def __init__(self, name: str) -> None:
        super().__init__("persona")
        self.name = name
        self.received: list[dict[str, Any]] = []

    async def execute(self, args: dict[str, Any], context: ActionContext) -> ActionResult:
        self.received.append(args)
        return ActionResult(rim_type="blink", response_system_prompt=f"persona for {self.name}", parameters={"name": self.name})


class ExplodingHandler(ActionHandler):
    name = "explode"

    def __init__(self) -> None:
        super().__init__("persona")

    async def execute(self, args: dict[str, Any], context: ActionContext) -> ActionResult:
        raise RuntimeError("boom")


def tool(name: str, properties: dict = None) -> ToolDefinition:
    return ToolDefinition(name=name, description=name, parameters={"type": "object", "properties": properties or {}})


@pytest.fixture
def test_catalog():
    return ToolCatalog(
        [
            tool("swap", {"from": {"type": "string"}, "to": {"type": "string"}, "amount": {"type": "number"}}),
            tool("explode"),
            tool("transferSol", {"to": {"type": "string"}, "amount": {"type": "number"}}),
            tool("answerMessage", {"prompt": {"type": "string"}}),
        ]
    )


@pytest.fixture
def handlers():
    return {
        "swap": RecordingHandler("swap"),
        "explode": ExplodingHandler(),
        "transferSol": RecordingHandler("transferSol"),
    }


@pytest.fixture
def dispatcher(handlers, test_catalog):
    return ActionDispatcher(handlers.values(), test_catalog)


class TestActionDispatcherExecution:
    """Test execution and fault isolation."""

    @pytest.mark.asyncio
    async def test_failing_handler_is_skipped(self, dispatcher):
        calls = [
            ToolCall("swap", {"from": "SOL", "to": "USDC", "amount": 1}),
            ToolCall("explode", {}),
            ToolCall("transferSol", {"to": "ABC123", "amount": 2}),
        ]

        results = await dispatcher.execute(calls, ActionContext())

        assert [result.parameters["name"] for result in results] == ["swap", "transferSol"]

    @pytest.mark.asyncio
    async def test_missing_handler_is_skipped(self, dispatcher):
        calls = [ToolCall("unknownAction", {}), ToolCall("transferSol", {"to": "ABC123", "amount": 2})]

        results = await dispatcher.execute(calls, ActionContext())

        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_schema_mismatch_still_runs_handler(self, dispatcher, handlers, caplog):
        calls = [ToolCall("transferSol", {"to": "ABC123", "amount": "2"})]

        with caplog.at_level(logging.WARNING):
            results = await dispatcher.execute(calls, ActionContext())

        assert [result.parameters["name"] for result in results] == ["transferSol"]
        assert handlers["transferSol"].received == [{"to": "ABC123", "amount": "2", "properties": {}}]
        assert "do not match its schema" in caplog.text

    @pytest.mark.asyncio
    async def test_properties_are_merged_into_arguments(self, dispatcher, handlers):
        context = ActionContext(properties={"wallet": "WALLET1"})

        await dispatcher.execute([ToolCall("transferSol", {"to": "ABC123", "amount": 2})], context)

        assert handlers["transferSol"].received == [{"to": "ABC123", "amount": 2, "properties": {"wallet": "WALLET1"}}]

    @pytest.mark.asyncio
    async def test_empty_calls(self, dispatcher):
        assert await dispatcher.execute([], ActionContext()) == []

    @pytest.mark.asyncio
    async def test_duplicate_calls_each_execute(self, dispatcher, handlers):
        call = ToolCall("transferSol", {"to": "ABC123", "amount": 2})

        results = await dispatcher.execute([call, call], ActionContext())

        assert len(results) == 2
        assert len(handlers["transferSol"].received) == 2


class TestActionDispatcherValidation:
    """Test handler/catalog validation at construction."""

    def test_matching_handlers_validate(self, dispatcher):
        assert sorted(dispatcher.handler_names) == ["explode", "swap", "transferSol"]

    def test_tool_without_handler(self, handlers, test_catalog):
        with pytest.raises(ConfigurationError) as exc_info:
            ActionDispatcher([handlers["swap"], handlers["explode"]], test_catalog)

        assert exc_info.value.details["tools_without_handler"] == ["transferSol"]

    def test_handler_without_tool(self, handlers, test_catalog):
        with pytest.raises(ConfigurationError) as exc_info:
            ActionDispatcher([*handlers.values(), RecordingHandler("mint")], test_catalog)

        assert exc_info.value.details["handlers_without_tool"] == ["mint"]

    def test_default_tool_handler_is_rejected(self, handlers, test_catalog):
        with pytest.raises(ConfigurationError):
            ActionDispatcher([*handlers.values(), RecordingHandler("answerMessage")], test_catalog)

    def test_duplicate_handler(self, handlers, test_catalog):
        with pytest.raises(ConfigurationError):
            ActionDispatcher([*handlers.values(), RecordingHandler("swap")], test_catalog)
