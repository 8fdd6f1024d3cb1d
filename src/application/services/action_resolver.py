"""Action Resolver: asks the classifier which domain actions a prompt calls for."""

import json
import logging
from typing import TYPE_CHECKING, Any, Sequence

from opentelemetry import trace

from application.actions.catalog import ToolCatalog
from application.llm import CompletionProvider, CompletionRequest
from application.services.budget_allocator import BudgetAllocator
from domain.models import ChatMessage, ToolCall
from observability.metrics import actions_resolved

if TYPE_CHECKING:
    from infrastructure.model_registry import ModelRegistry

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_RESOLVER_SYSTEM_PROMPT = "You are an AI assistant that solves the best function to be performed based on user input."


class ActionResolver:
    """Runs one buffered, tool-forced classification call per prompt.

    The classifier must pick at least one tool; picking only the catalog's
    answer-directly default means "no domain action" and yields an empty list.
    """

    def __init__(
        self,
        completion: CompletionProvider,
        registry: "ModelRegistry",
        catalog: ToolCatalog,
        allocator: BudgetAllocator,
        model: str = "gpt-4",
        system_prompt: str = DEFAULT_RESOLVER_SYSTEM_PROMPT,
        reserved_tokens: int = 1024,
    ) -> None:
        self._completion = completion
        self._registry = registry
        self._catalog = catalog
        self._allocator = allocator
        self._model = model
        self._system_prompt = system_prompt
        self._reserved_tokens = reserved_tokens

    async def resolve_actions(self, prompt: str, prior_messages: Sequence[ChatMessage] = ()) -> list[ToolCall]:
        """Return the domain actions selected for the prompt, in provider order.

        Duplicates are kept. Classification failures propagate unchanged.
        """
        with tracer.start_as_current_span("actions.resolve") as span:
            span.set_attribute("resolver.model", self._model)

            descriptor = self._registry.resolve(self._model)
            system, history, prompt = self._allocator.trim(
                self._system_prompt,
                prior_messages,
                prompt,
                descriptor.context_window,
                self._reserved_tokens,
            )

            response = await self._completion.send(
                CompletionRequest(
                    model=self._model,
                    messages=[ChatMessage.system(system), *history, ChatMessage.user(prompt)],
                    stream=False,
                    tools=self._catalog.tools,
                    tool_choice="required",
                )
            )

            tool_calls = []
            for raw_call in response.tool_calls:
                function = raw_call.get("function") or {}
                name = function.get("name", "")
                if self._catalog.is_default(name):
                    continue
                tool_calls.append(ToolCall(name=name, args=decode_arguments(function.get("arguments"))))

            span.set_attribute("resolver.tool_calls", len(tool_calls))
            for call in tool_calls:
                actions_resolved.add(1, {"action": call.name})

            logger.info(f"🧭 Resolved {len(tool_calls)} actions: {[call.name for call in tool_calls]}")
            return tool_calls


def decode_arguments(arguments: Any) -> dict[str, Any]:
    """Decode a tool call's JSON arguments; anything but a JSON object becomes ``{}``."""
    if isinstance(arguments, dict):
        return arguments
    if not arguments:
        return {}
    try:
        decoded = json.loads(arguments)
    except (TypeError, json.JSONDecodeError):
        logger.warning(f"⚠️ Undecodable tool arguments: {str(arguments)[:100]}")
        return {}
    return decoded if isinstance(decoded, dict) else {}
