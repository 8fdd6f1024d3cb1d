"""ActionResult value object."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one successful action handler invocation.

    Attributes:
        rim_type: Kind of rich interactive message the client renders (wallet, image, video, blink)
        response_system_prompt: Persona/system instruction for the final answer
        parameters: Payload the client needs to render the RIM
    """

    rim_type: str
    response_system_prompt: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys clients expect."""
        return {
            "rimType": self.rim_type,
            "responseSystemPrompt": self.response_system_prompt,
            "parameters": dict(self.parameters),
        }
