"""Tool catalog: the only actions the classifier may select.

``answerMessage`` is the "answer directly" default. The classifier must
always pick a tool, so this one stands for "no domain action"; it never
has a handler and is filtered out of resolved calls.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from domain.models import ToolDefinition

ANSWER_DIRECTLY_TOOL_NAME = "answerMessage"


class ToolCatalog:
    """Immutable, name-unique collection of tool definitions."""

    def __init__(self, tools: Iterable[ToolDefinition], default_tool_name: str = ANSWER_DIRECTLY_TOOL_NAME) -> None:
        by_name: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in by_name:
                raise ValueError(f"Duplicate tool name in catalog: {tool.name}")
            by_name[tool.name] = tool
        self._tools: Mapping[str, ToolDefinition] = MappingProxyType(by_name)
        self.default_tool_name = default_tool_name

    @property
    def tools(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    @property
    def action_tools(self) -> list[ToolDefinition]:
        """Every tool except the answer-directly default."""
        return [tool for tool in self._tools.values() if tool.name != self.default_tool_name]

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def is_default(self, name: str) -> bool:
        return name == self.default_tool_name

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def build_default_catalog() -> ToolCatalog:
    """Build the catalog of Solana assistant actions."""
    return ToolCatalog(
        [
            ToolDefinition(
                name="generateImage",
                description="Generates an image based on the provided prompt.",
                parameters={
                    "type": "object",
                    "properties": {
                        "prompt": {"type": "string", "description": "The prompt to generate the image."},
                    },
                },
            ),
            ToolDefinition(
                name="searchYoutubeVideo",
                description="search for a video based on the prompt.",
                parameters={
                    "type": "object",
                    "properties": {
                        "prompt": {
                            "type": "string",
                            "description": "The prompt to search the video in a search query style for youtube search.",
                        },
                    },
                },
            ),
            ToolDefinition(
                name="addMemo",
                description="Adds a memo to the blockchain.",
                parameters={
                    "type": "object",
                    "properties": {
                        "message": {"type": "string", "description": "The message to add to the blockchain."},
                    },
                },
            ),
            ToolDefinition(
                name="transferSol",
                description="Transfers SOL to another Solana wallet.",
                parameters={
                    "type": "object",
                    "properties": {
                        "to": {"type": "string", "description": "The account to transfer to."},
                        "amount": {"type": "number", "description": "The amount of SOL to transfer."},
                    },
                },
            ),
            ToolDefinition(
                name="swap",
                description="Swaps one token for another.",
                parameters={
                    "type": "object",
                    "properties": {
                        "from": {"type": "string", "description": "The token to swap from."},
                        "to": {"type": "string", "description": "The token to swap to."},
                        "amount": {"type": "number", "description": "The amount of the token to swap."},
                    },
                },
            ),
            ToolDefinition(
                name="getWalletInfo",
                description="Answers information about user wallet based on the provided prompt.",
                parameters={
                    "type": "object",
                    "properties": {
                        "prompt": {"type": "string", "description": "The prompt from the user."},
                        "infoRequested": {
                            "type": "array",
                            "description": "The information the user wants to know about their wallet.",
                            "items": {"type": "string", "enum": ["balance", "transactions", "nfts"]},
                        },
                    },
                },
            ),
            ToolDefinition(
                name=ANSWER_DIRECTLY_TOOL_NAME,
                description="Answers a message based on the provided prompt from the user. Uses the exact message the user sent.",
                parameters={
                    "type": "object",
                    "properties": {
                        "prompt": {"type": "string", "description": "The message the user sent."},
                    },
                },
            ),
        ]
    )
