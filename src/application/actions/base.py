"""Action handler contract.

A handler turns one resolved tool call into an ``ActionResult``. Handlers
are looked up by ``name``, which must match a catalog tool.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from domain.models import ActionResult

PROPERTIES_KEY = "properties"


@dataclass(frozen=True)
class ActionContext:
    """Request-scoped data handlers may read (e.g. the caller's wallet)."""

    properties: Mapping[str, Any] = field(default_factory=dict)


class ActionHandler(ABC):
    """Executes one domain action."""

    name: str = ""

    def __init__(self, persona: str) -> None:
        self._persona = persona

    @abstractmethod
    async def execute(self, args: dict[str, Any], context: ActionContext) -> ActionResult:
        """Run the action.

        Args:
            args: Decoded tool arguments, with the request properties merged under ``properties``
            context: The request context

        Returns:
            The RIM the client renders and the persona for the final answer
        """
        ...

    def _prompt(self, instruction: str) -> str:
        return f"{self._persona} {instruction}"


def user_fields(args: Mapping[str, Any]) -> dict[str, Any]:
    """Tool arguments without the merged request properties."""
    return {key: value for key, value in args.items() if key != PROPERTIES_KEY}
